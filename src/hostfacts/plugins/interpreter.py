"""
Interpretation of plugin source files into plugin types.

A plugin file is interpreted in three passes:

1. Parse. Syntax errors are collected with simple line-level recovery so a
   file with several independent mistakes reports all of them at once.
2. Structural validation. The module may hold a docstring, imports, and then
   exactly one class decorated with ``hostfacts.plugin(...)``. Nothing may
   follow the plugin class.
3. Execution. The compiled module runs in a fresh globals dict that exposes
   the loader's :class:`DeclarationContext` as ``hostfacts``.
"""

import ast
import builtins
import logging
import os
from typing import List, Type

from hostfacts.exceptions import IllegalPluginDefinition, PluginSyntaxError
from hostfacts.plugins.dsl import BasePlugin, DeclarationContext

logger = logging.getLogger(__name__)

# Text that marks a file as a plugin declaration
DECLARATION_MARKER = "hostfacts.plugin"

# Name under which the declaration context is injected into plugin globals
CONTEXT_NAME = "hostfacts"

MAX_SYNTAX_ERRORS = 10


def is_plugin_source(contents: str) -> bool:
    """Check if source text declares a plugin."""
    return DECLARATION_MARKER in contents


def parse_source(contents: str, filename: str) -> ast.Module:
    """
    Parse plugin source, collecting every independent syntax error.

    After each error the offending line is replaced by ``pass`` at the same
    indentation, or by ``if True:`` when it opened a block, and parsing is
    retried. Recovery stops at the first error that cannot be attributed to a
    fresh line.

    Raises:
        PluginSyntaxError: If the source contains at least one syntax error
    """
    try:
        return ast.parse(contents, filename=filename)
    except SyntaxError as first:
        issues: List[SyntaxError] = [first]

    lines = contents.splitlines(keepends=True)
    seen = set()
    error = issues[0]
    while len(issues) < MAX_SYNTAX_ERRORS:
        lineno = error.lineno
        if not lineno or lineno > len(lines) or lineno in seen:
            break
        seen.add(lineno)

        line = lines[lineno - 1]
        indent = line[: len(line) - len(line.lstrip())]
        # Keep the block a broken header opened, or its body reads as a new error
        if _indent_width(_next_code_line(lines, lineno)) > _indent_width(line):
            lines[lineno - 1] = f"{indent}if True:\n"
        else:
            lines[lineno - 1] = f"{indent}pass\n"

        try:
            ast.parse("".join(lines), filename=filename)
            break
        except SyntaxError as e:
            if e.lineno in seen:
                break
            issues.append(e)
            error = e

    raise PluginSyntaxError(filename, issues)


def _indent_width(line: str) -> int:
    expanded = line.expandtabs()
    return len(expanded) - len(expanded.lstrip())


def _next_code_line(lines: List[str], lineno: int) -> str:
    """Get the first non-blank, non-comment line after ``lineno`` (1-based)."""
    for line in lines[lineno:]:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return line
    return ""


def _is_plugin_decorator(node: ast.expr) -> bool:
    return (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Attribute)
        and node.func.attr == "plugin"
        and isinstance(node.func.value, ast.Name)
        and node.func.value.id == CONTEXT_NAME
    )


def validate_structure(tree: ast.Module) -> ast.ClassDef:
    """
    Check that a parsed module is a single plugin declaration.

    Returns:
        The plugin class definition node

    Raises:
        IllegalPluginDefinition: If the module holds anything else
    """
    body = list(tree.body)

    # Optional module docstring
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        body.pop(0)

    while body and isinstance(body[0], (ast.Import, ast.ImportFrom)):
        body.pop(0)

    if not body:
        raise IllegalPluginDefinition("Plugin file does not contain a plugin definition")

    definition = body.pop(0)
    if not isinstance(definition, ast.ClassDef) or not any(
        _is_plugin_decorator(d) for d in definition.decorator_list
    ):
        raise IllegalPluginDefinition(
            "Plugin file may only contain imports before the plugin definition "
            f"(line {definition.lineno})"
        )

    if body:
        raise IllegalPluginDefinition(
            "Plugin file cannot contain any statements after the plugin definition"
        )

    return definition


def interpret(
    contents: str, plugin_path: str, context: DeclarationContext
) -> Type[BasePlugin]:
    """
    Interpret plugin source and return the plugin type it declares.

    Args:
        contents: Full source text of the plugin file
        plugin_path: Path of the file, used as the code filename
        context: Declaration context the plugin registers itself with

    Returns:
        The declared (or reopened) plugin type, of any schema version

    Raises:
        PluginSyntaxError: If the source is not valid Python
        IllegalPluginDefinition: If the file is not a single plugin declaration
        InvalidPluginName: If the declared name breaks the naming rules
        Exception: Anything raised while the plugin body executes
    """
    tree = parse_source(contents, plugin_path)
    definition = validate_structure(tree)

    code = compile(tree, plugin_path, "exec")
    stem = os.path.splitext(os.path.basename(plugin_path))[0]
    namespace = {
        "__name__": f"hostfacts_plugin_{stem}",
        "__file__": plugin_path,
        "__builtins__": builtins,
        CONTEXT_NAME: context,
    }
    with context.staged():
        exec(code, namespace)

        plugin_type = namespace.get(definition.name)
        if not (isinstance(plugin_type, type) and issubclass(plugin_type, BasePlugin)):
            raise IllegalPluginDefinition(
                f"{definition.name} is not a recognized plugin type"
            )

    return plugin_type
