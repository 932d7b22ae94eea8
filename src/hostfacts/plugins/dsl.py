"""
Plugin base classes and the declaration context exposed to plugin files.

Plugin files never import hostfacts. The interpreter injects a
:class:`DeclarationContext` into each file's globals under the name
``hostfacts``, and the file declares its plugin with it:

    @hostfacts.plugin("Kernel", provides=["kernel", "kernel/release"])
    class Kernel:
        depends = ["os"]

        @hostfacts.collect_data("linux")
        def collect_linux(self):
            self.data["kernel"] = {"release": platform.release()}

The decorated class is only a template. The context turns it into a subclass
of :class:`Plugin` (or :class:`LegacyPlugin`) whose identity is the declared
name and schema version. Declaring the same identity again, from the same or
another file, reopens that type instead of creating a second one.
"""

import copy
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Type

from hostfacts.exceptions import IllegalPluginDefinition
from hostfacts.plugins.declaration import CURRENT_SCHEMA_VERSION, PluginDeclaration

logger = logging.getLogger(__name__)

DEFAULT_PLATFORM = "default"

# Class body names consumed by the declaration instead of copied onto the type
_DECLARATION_ATTRS = {"provides", "depends"}

# Fields describing a plugin type; owned by the context, never by a class body
RESERVED_ATTRS = frozenset(
    {"plugin_name", "schema_version", "provides_attrs", "depends_attrs", "collectors", "sources"}
)

# Mutable fields copied when a plugin type is snapshotted
_MUTABLE_ATTRS = ("provides_attrs", "depends_attrs", "collectors", "sources")

# Dunder names copied from the template class onto the plugin type
_COPIED_DUNDERS = {"__module__", "__doc__"}


class BasePlugin:
    """
    Common base of every plugin type created by a :class:`DeclarationContext`.

    Class attributes describe the plugin type; instances only hold a
    reference to the shared data store.
    """

    plugin_name: str = ""
    schema_version: int = 0
    provides_attrs: List[str] = []
    depends_attrs: List[str] = []
    collectors: Dict[str, Callable[..., Any]] = {}
    sources: List[str] = []

    def __init__(self, data: dict) -> None:
        self.data = data

    def __repr__(self) -> str:
        return f"<{self.plugin_name} plugin v{self.schema_version}>"


class Plugin(BasePlugin):
    """A plugin type written against the current schema version."""

    schema_version = CURRENT_SCHEMA_VERSION

    def collector(self, platform: str) -> Optional[Callable[[], Any]]:
        """
        Get the bound collector for ``platform``.

        Falls back to the default collector, or None when neither exists.
        """
        func = self.collectors.get(platform) or self.collectors.get(DEFAULT_PLATFORM)
        if func is None:
            return None
        return func.__get__(self, type(self))


class LegacyPlugin(BasePlugin):
    """A plugin type written against a recognized but unsupported schema."""

    pass


class DeclarationContext:
    """
    The ``hostfacts`` object seen by plugin files.

    Owns the table of declared plugin types, keyed by
    ``(plugin_name, schema_version)``. A loader owns exactly one context, so
    two loaders never share plugin types.
    """

    def __init__(self) -> None:
        self._types: Dict[Tuple[str, int], Type[BasePlugin]] = {}
        # Types as they were before the current staged() block touched them
        self._staged: Optional[Dict[Tuple[str, int], Optional[Dict[str, Any]]]] = None

    @contextmanager
    def staged(self) -> Iterator[None]:
        """
        Apply declarations tentatively.

        If the block raises, every type created inside it is forgotten and
        every type reopened inside it is restored to its earlier state. Nested
        blocks join the outermost one.
        """
        if self._staged is not None:
            yield
            return

        self._staged = {}
        try:
            yield
        except BaseException:
            for key, state in self._staged.items():
                if state is None:
                    del self._types[key]
                else:
                    _restore(self._types[key], state)
            raise
        finally:
            self._staged = None

    def plugin(
        self,
        name: str,
        *,
        schema: int = CURRENT_SCHEMA_VERSION,
        provides: Any = (),
        depends: Any = (),
    ) -> Callable[[type], Type[BasePlugin]]:
        """
        Class decorator declaring a plugin type.

        Args:
            name: Plugin name, e.g. "Kernel"
            schema: Plugin schema version the file is written against
            provides: Attribute path(s) produced by the plugin
            depends: Attribute path(s) the plugin needs

        Returns:
            Decorator returning the new or reopened plugin type

        Raises:
            InvalidPluginName: If ``name`` breaks the naming rules
            IllegalPluginDefinition: For any other malformed declaration
        """

        def decorator(template: type) -> Type[BasePlugin]:
            if not isinstance(template, type):
                raise IllegalPluginDefinition(
                    f"hostfacts.plugin can only decorate a class (got {template!r})"
                )
            if template.__bases__ != (object,):
                raise IllegalPluginDefinition(
                    f"Plugin class {template.__name__} cannot declare base classes"
                )

            body = template.__dict__
            reserved = sorted(RESERVED_ATTRS.intersection(body))
            if reserved:
                raise IllegalPluginDefinition(
                    f"Plugin class {template.__name__} cannot define {', '.join(reserved)}"
                )

            declaration = PluginDeclaration.from_arguments(
                name,
                schema,
                _attribute_list(provides, "provides")
                + _attribute_list(body.get("provides", ()), "provides"),
                _attribute_list(depends, "depends")
                + _attribute_list(body.get("depends", ()), "depends"),
            )

            key = (declaration.name, declaration.schema_version)
            if key in self._types:
                plugin_type = self._types[key]
                if self._staged is not None and key not in self._staged:
                    self._staged[key] = _snapshot(plugin_type)
                _reopen(plugin_type, declaration, body)
                logger.debug(f"Reopened plugin {declaration.name}")
            else:
                plugin_type = _create(declaration, body)
                self._types[key] = plugin_type
                if self._staged is not None:
                    self._staged[key] = None
                logger.debug(f"Declared plugin {declaration.name}")

            return plugin_type

        return decorator

    def collect_data(self, *platforms: str) -> Callable[[Callable], Callable]:
        """
        Method decorator marking a collector for the given platforms.

        With no platforms the method becomes the default collector.
        """
        platforms = platforms or (DEFAULT_PLATFORM,)
        for platform in platforms:
            if not isinstance(platform, str) or not platform:
                raise IllegalPluginDefinition(
                    f"collect_data platforms must be non-empty strings (got {platform!r})"
                )

        def decorator(func: Callable) -> Callable:
            func._hostfacts_platforms = platforms  # type: ignore[attr-defined]
            return func

        return decorator

    def get(
        self, name: str, schema: int = CURRENT_SCHEMA_VERSION
    ) -> Optional[Type[BasePlugin]]:
        """Get a declared plugin type by identity, or None."""
        return self._types.get((name, schema))

    def __len__(self) -> int:
        return len(self._types)


def _attribute_list(value: Any, field: str) -> List[Any]:
    """Accept a single attribute path or a collection of them."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    raise IllegalPluginDefinition(
        f"{field} must be a string or a list of strings (got {value!r})"
    )


def _collectors_in(body: Dict[str, Any]) -> Dict[str, Callable]:
    collectors: Dict[str, Callable] = {}
    for value in body.values():
        for platform in getattr(value, "_hostfacts_platforms", ()):
            collectors[platform] = value
    return collectors


def _members_in(body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: v
        for k, v in body.items()
        if k not in _DECLARATION_ATTRS
        and (not k.startswith("__") or k in _COPIED_DUNDERS)
    }


def _create(declaration: PluginDeclaration, body: Dict[str, Any]) -> Type[BasePlugin]:
    base = Plugin if declaration.is_current else LegacyPlugin
    namespace = _members_in(body)
    namespace.update(
        plugin_name=declaration.name,
        schema_version=declaration.schema_version,
        provides_attrs=list(declaration.provides),
        depends_attrs=list(declaration.depends),
        collectors=_collectors_in(body),
        sources=[],
    )
    return type(declaration.name, (base,), namespace)


def _reopen(
    plugin_type: Type[BasePlugin], declaration: PluginDeclaration, body: Dict[str, Any]
) -> None:
    for attribute in declaration.provides:
        if attribute not in plugin_type.provides_attrs:
            plugin_type.provides_attrs.append(attribute)
    for attribute in declaration.depends:
        if attribute not in plugin_type.depends_attrs:
            plugin_type.depends_attrs.append(attribute)

    plugin_type.collectors.update(_collectors_in(body))

    for key, value in _members_in(body).items():
        if not key.startswith("__"):
            setattr(plugin_type, key, value)


def _snapshot(plugin_type: Type[BasePlugin]) -> Dict[str, Any]:
    state = {k: v for k, v in vars(plugin_type).items() if not k.startswith("__")}
    for field in _MUTABLE_ATTRS:
        state[field] = copy.copy(state[field])
    return state


def _restore(plugin_type: Type[BasePlugin], state: Dict[str, Any]) -> None:
    added = [k for k in vars(plugin_type) if not k.startswith("__") and k not in state]
    for key in added:
        delattr(plugin_type, key)
    for key, value in state.items():
        setattr(plugin_type, key, value)
