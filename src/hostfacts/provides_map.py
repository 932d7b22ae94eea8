"""
Mapping of data attributes to the plugin instances that provide them.

Attribute paths such as ``kernel/modules`` are stored as a tree of nested
nodes. Each node keeps the list of plugins registered for that exact path.
"""

import logging
from typing import Iterable

from hostfacts.attributes import normalize_attribute
from hostfacts.exceptions import AttributeNotFound
from hostfacts.plugins.dsl import Plugin

logger = logging.getLogger(__name__)

_PROVIDERS = "_plugins"


class ProvidesMap:
    """
    Registry of attribute providers.

    Example:
        >>> provides_map = ProvidesMap()
        >>> provides_map.set_providers_for(kernel_plugin, ["kernel", "kernel/release"])
        >>> provides_map.find_providers_for(["kernel/release"])
        [<Kernel plugin>]
    """

    def __init__(self) -> None:
        self._map: dict = {}

    def set_providers_for(self, plugin: Plugin, attributes: Iterable[str]) -> None:
        """
        Register ``plugin`` as a provider of every attribute in ``attributes``.

        Raises:
            TypeError: If ``plugin`` is not a plugin instance
            AttributeSyntaxError: If an attribute path is malformed
        """
        if not isinstance(plugin, Plugin):
            raise TypeError(
                f"set_providers_for only accepts a Plugin instance (got {plugin!r})"
            )

        attributes = list(attributes)
        for attribute in attributes:
            node = self._map
            for part in normalize_attribute(attribute):
                node = node.setdefault(part, {})

            providers = node.setdefault(_PROVIDERS, [])
            if plugin not in providers:
                providers.append(plugin)

        logger.debug(
            f"Registered {type(plugin).plugin_name} as provider for {attributes}"
        )

    def find_providers_for(self, attributes: Iterable[str]) -> list[Plugin]:
        """
        Get the plugins registered for the exact attribute paths given.

        Raises:
            AttributeNotFound: If no plugin provides one of the attributes
        """
        plugins: list[Plugin] = []
        for attribute in attributes:
            node = self._map
            for part in normalize_attribute(attribute):
                if part not in node:
                    raise AttributeNotFound(f"No such attribute: '{attribute}'")
                node = node[part]

            if not node.get(_PROVIDERS):
                raise AttributeNotFound(f"Cannot find plugin providing attribute: '{attribute}'")

            for plugin in node[_PROVIDERS]:
                if plugin not in plugins:
                    plugins.append(plugin)

        return plugins

    def all_plugins(self) -> list[Plugin]:
        """Get every registered provider, walking the attribute tree breadth-first."""
        plugins: list[Plugin] = []
        pending = [self._map]
        while pending:
            node = pending.pop(0)
            for key, value in node.items():
                if key == _PROVIDERS:
                    for plugin in value:
                        if plugin not in plugins:
                            plugins.append(plugin)
                else:
                    pending.append(value)
        return plugins
