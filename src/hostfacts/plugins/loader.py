"""
Plugin discovery and loading system.

Finds every plugin file under the configured ``plugin_path`` (a single
directory or a list of them), interprets each one into a plugin type, and
creates plugin instances bound to the controller's shared data store.

A broken plugin file never aborts a load. Its failure is classified, logged,
and the loader moves on to the next file.
"""

import glob
import logging
import os
from typing import TYPE_CHECKING, Iterable, List, NamedTuple, Optional, Protocol, Type, Union

from hostfacts.config import Settings
from hostfacts.config import settings as default_settings
from hostfacts.exceptions import IllegalPluginDefinition, IllegalPluginType
from hostfacts.path_helper import escape_glob_dir
from hostfacts.plugins.classifier import log_load_errors
from hostfacts.plugins.declaration import CURRENT_SCHEMA_VERSION
from hostfacts.plugins.dsl import BasePlugin, DeclarationContext, Plugin
from hostfacts.plugins.interpreter import interpret, is_plugin_source

if TYPE_CHECKING:
    from hostfacts.provides_map import ProvidesMap

logger = logging.getLogger(__name__)

PLUGIN_SUFFIX = ".py"

PluginDirs = Union[str, os.PathLike, Iterable[Union[str, os.PathLike]], None]


class Controller(Protocol):
    """What the loader needs from its owner."""

    data: dict
    provides_map: "ProvidesMap"


class PluginFile(NamedTuple):
    """A plugin file and the plugin root it was found under."""

    path: str
    plugin_root: str

    @classmethod
    def find_all_in(cls, plugin_dir: Union[str, os.PathLike]) -> List["PluginFile"]:
        """
        Find every plugin source file under ``plugin_dir``, at any depth.

        Returns:
            PluginFile entries sorted by path; empty if the directory is missing
        """
        plugin_dir = os.fspath(plugin_dir)
        if not os.path.isdir(plugin_dir):
            logger.info(f"The plugin path {plugin_dir} does not exist. Skipping...")
            return []

        logger.debug(f"Searching for plugins in {plugin_dir}")

        pattern = os.path.join(escape_glob_dir(plugin_dir), "**", f"*{PLUGIN_SUFFIX}")
        return [
            cls(path, plugin_dir)
            for path in sorted(glob.glob(pattern, recursive=True))
            if os.path.isfile(path)
        ]


class Loader:
    """
    Loads plugin types from plugin files and instantiates them.

    The loader owns the declaration context plugin files register with and
    the ordered list of accepted plugin types. It is the only creator of
    plugin instances.

    Example:
        >>> loader = Loader(system)
        >>> loader.load_all()
        >>> system.provides_map.find_providers_for(["kernel"])
    """

    def __init__(self, controller: Controller, settings: Optional[Settings] = None) -> None:
        """
        Initialize the loader.

        Args:
            controller: Owner of the shared data store and the provides map
            settings: Settings providing ``plugin_path`` (defaults to the
                      global settings)
        """
        self.controller = controller
        self.settings = settings or default_settings

        self._context = DeclarationContext()
        # Accepted current-schema plugin types, in acceptance order
        self._plugin_types: List[Type[Plugin]] = []
        # Types already instantiated by load_all()
        self._collected: List[Type[Plugin]] = []

    @property
    def plugin_types(self) -> List[Type[Plugin]]:
        """Get the accepted plugin types."""
        return list(self._plugin_types)

    @property
    def context(self) -> DeclarationContext:
        """Get the declaration context plugin files register with."""
        return self._context

    def plugin_files_by_dir(self, dirs: PluginDirs = None) -> List[PluginFile]:
        """
        Search plugin directories for plugin files.

        Args:
            dirs: A directory, a list of directories, or None for the
                  configured plugin_path

        Returns:
            PluginFile entries, directory by directory in the order given
        """
        if dirs is None:
            dirs = self.settings.plugin_paths
        elif isinstance(dirs, (str, os.PathLike)):
            dirs = [dirs]

        plugin_files: List[PluginFile] = []
        for plugin_dir in dirs:
            plugin_files.extend(PluginFile.find_all_in(plugin_dir))
        return plugin_files

    def load_all(self) -> None:
        """
        Load every plugin under the configured plugin_path.

        Each accepted plugin type is instantiated once, no matter how many
        files declared it.
        """
        for plugin_file in self.plugin_files_by_dir():
            self.load_plugin_file(plugin_file.path)

        self._collect_plugins()

    def load_additional(self, from_: PluginDirs) -> List[Optional[Plugin]]:
        """
        Load plugins from the configured plugin_path plus extra directories.

        Unlike load_all(), every interpreted file is instantiated right away,
        so a plugin type that is already loaded gets another instance.

        Returns:
            One entry per plugin file; None for files that yielded no plugin
        """
        if from_ is None:
            extra: List[Union[str, os.PathLike]] = []
        elif isinstance(from_, (str, os.PathLike)):
            extra = [from_]
        else:
            extra = list(from_)

        plugins: List[Optional[Plugin]] = []
        for plugin_file in self.plugin_files_by_dir([*self.settings.plugin_paths, *extra]):
            logger.debug(f"Loading additional plugin: {plugin_file.path}")
            plugin_type = self.load_plugin_file(plugin_file.path)
            plugins.append(self.instantiate(plugin_type) if plugin_type else None)
        return plugins

    def load_plugin(self, plugin_path: Union[str, os.PathLike]) -> Optional[Plugin]:
        """
        Load a single plugin file and create an instance of it.

        Not used by load_all() or load_additional(); meant for loading one
        plugin by hand, e.g. from tests.

        Returns:
            The plugin instance, or None if the file declares no plugin

        Raises:
            IllegalPluginType: If the file declares a recognized plugin type
                of an unsupported schema version
        """
        plugin_path = os.fspath(plugin_path)
        contents = self._read_plugin(plugin_path)
        if contents is None or not is_plugin_source(contents):
            return None

        plugin_type = self._load_plugin_class(contents, plugin_path, require_current=False)
        if plugin_type is None:
            return None
        if not issubclass(plugin_type, Plugin):
            raise IllegalPluginType(
                f"cannot create plugin of type {plugin_type.plugin_name} "
                f"(schema version {plugin_type.schema_version})"
            )
        return self.instantiate(plugin_type)

    def load_plugin_file(self, plugin_path: Union[str, os.PathLike]) -> Optional[Type[Plugin]]:
        """
        Read a plugin file and return the plugin type declared in it.

        Returns:
            The accepted plugin type, or None if the file could not be read,
            is not a plugin declaration, or failed to load
        """
        plugin_path = os.fspath(plugin_path)
        contents = self._read_plugin(plugin_path)
        if contents is None or not is_plugin_source(contents):
            return None

        return self._load_plugin_class(contents, plugin_path)

    def instantiate(self, plugin_type: Type[Plugin]) -> Plugin:
        """Create a plugin bound to the shared data store and register its provides."""
        plugin = plugin_type(self.controller.data)
        self.controller.provides_map.set_providers_for(plugin, plugin_type.provides_attrs)
        return plugin

    def _read_plugin(self, plugin_path: str) -> Optional[str]:
        logger.debug(f"Reading plugin at {plugin_path}")
        try:
            with open(plugin_path, encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError):
            logger.warning(f"Unable to open or read plugin at {plugin_path}")
            return None

    def _load_plugin_class(
        self, contents: str, plugin_path: str, require_current: bool = True
    ) -> Optional[Type[BasePlugin]]:
        logger.debug(f"Loading plugin class from {plugin_path}")
        try:
            # A rejected file leaves every declared type as it was
            with self._context.staged():
                plugin_type = interpret(contents, plugin_path, self._context)
                if require_current and not issubclass(plugin_type, Plugin):
                    raise IllegalPluginDefinition(
                        f"Plugin schema version {plugin_type.schema_version} is not "
                        f"supported (expected {CURRENT_SCHEMA_VERSION})"
                    )

                if plugin_path not in plugin_type.sources:
                    plugin_type.sources.append(plugin_path)
                if issubclass(plugin_type, Plugin) and plugin_type not in self._plugin_types:
                    self._plugin_types.append(plugin_type)
        except Exception as e:
            log_load_errors(e, plugin_path)
            return None

        return plugin_type

    def _collect_plugins(self) -> None:
        for plugin_type in self._plugin_types:
            if plugin_type not in self._collected:
                self.instantiate(plugin_type)
                self._collected.append(plugin_type)
