"""Custom exceptions for hostfacts."""


class InvalidPluginName(Exception):
    """Raised when a plugin declares a name that breaks the naming rules."""

    pass


class IllegalPluginDefinition(Exception):
    """Raised when a plugin file is not a single, well-formed plugin declaration."""

    pass


class IllegalPluginType(Exception):
    """Raised when a recognized plugin type cannot be instantiated by this loader."""

    pass


class PluginSyntaxError(Exception):
    """
    Raised when a plugin file is not valid Python source.

    A single file may carry several independent syntax errors. Each one is
    kept in ``issues`` and rendered as its own ``<path>:<line>: syntax error,``
    fragment in the exception message.
    """

    def __init__(self, filename: str, issues: list[SyntaxError]):
        self.filename = filename
        self.issues = issues
        fragments = [
            f"<{filename}>:{issue.lineno or 0}: syntax error, {issue.msg}"
            for issue in issues
        ]
        super().__init__("".join(fragments))


class AttributeSyntaxError(Exception):
    """Raised when an attribute path is malformed (e.g. 'kernel//release')."""

    pass


class AttributeNotFound(Exception):
    """Raised when no plugin provides a requested attribute."""

    pass
