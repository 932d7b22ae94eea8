"""
Classification of plugin load failures.

Every failure raised while interpreting one plugin file is mapped onto a
fixed set of kinds and logged with the offending path. The load then moves on
to the next file. Only ``Exception`` subclasses are classified; process exit
requests and keyboard interrupts derive from ``BaseException`` and abort the
whole load.
"""

import logging
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import List

from hostfacts.exceptions import (
    IllegalPluginDefinition,
    InvalidPluginName,
    PluginSyntaxError,
)

logger = logging.getLogger(__name__)


class LoadErrorKind(str, Enum):
    """Kinds of per-file plugin load failures."""

    INVALID_NAME = "invalid-name"
    ILLEGAL_DEFINITION = "illegal-definition"
    UNSUPPORTED_OPERATION = "unsupported-operation"
    SYNTAX_ERROR = "syntax-error"
    PLUGIN_ERROR = "generic-plugin-error"


_LABELS = {
    LoadErrorKind.INVALID_NAME: "Plugin Name Error",
    LoadErrorKind.ILLEGAL_DEFINITION: "Plugin Definition Error",
    LoadErrorKind.UNSUPPORTED_OPERATION: "Plugin Method Error",
    LoadErrorKind.SYNTAX_ERROR: "Plugin Syntax Error",
    LoadErrorKind.PLUGIN_ERROR: "Plugin Error",
}


@dataclass(frozen=True)
class LoadError:
    """One classified failure, consumed immediately by logging."""

    kind: LoadErrorKind
    file: str
    message: str

    def __str__(self) -> str:
        return f"{_LABELS[self.kind]}: <{self.file}>: {self.message}"


def _syntax_messages(exc: Exception) -> List[str]:
    issues = exc.issues if isinstance(exc, PluginSyntaxError) else [exc]
    return [issue.msg for issue in issues if issue.msg]


def classify(exc: Exception, plugin_path: str) -> List[LoadError]:
    """
    Map a failure onto load error kinds.

    Returns:
        One LoadError, or one per syntax issue for syntax errors
        (possibly none, if every issue message is empty)
    """
    if isinstance(exc, InvalidPluginName):
        return [LoadError(LoadErrorKind.INVALID_NAME, plugin_path, str(exc))]

    if isinstance(exc, IllegalPluginDefinition):
        return [LoadError(LoadErrorKind.ILLEGAL_DEFINITION, plugin_path, str(exc))]

    if isinstance(exc, (AttributeError, NameError)):
        name = getattr(exc, "name", None) or str(exc)
        return [
            LoadError(
                LoadErrorKind.UNSUPPORTED_OPERATION,
                plugin_path,
                f"unsupported operation '{name}'",
            )
        ]

    if isinstance(exc, (SyntaxError, PluginSyntaxError)):
        return [
            LoadError(LoadErrorKind.SYNTAX_ERROR, plugin_path, message)
            for message in _syntax_messages(exc)
        ]

    return [LoadError(LoadErrorKind.PLUGIN_ERROR, plugin_path, str(exc))]


def log_load_errors(exc: Exception, plugin_path: str) -> List[LoadError]:
    """
    Classify a failure and log it at warning level.

    Generic failures also get the full traceback at debug level.
    """
    errors = classify(exc, plugin_path)
    for error in errors:
        logger.warning(str(error))

    if errors and errors[0].kind is LoadErrorKind.PLUGIN_ERROR:
        details = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        logger.debug(f"Plugin Error: <{plugin_path}>: {exc!r}\n{details}")

    return errors
