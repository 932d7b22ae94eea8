"""
Plugin system for host fact collection.

This package provides infrastructure for discovering plugin files under the
configured plugin directories, interpreting them into plugin types, and
instantiating plugins bound to a shared data store.
"""

from hostfacts.plugins.classifier import LoadError, LoadErrorKind
from hostfacts.plugins.declaration import CURRENT_SCHEMA_VERSION, PluginDeclaration
from hostfacts.plugins.dsl import BasePlugin, DeclarationContext, LegacyPlugin, Plugin
from hostfacts.plugins.loader import Loader, PluginFile

__all__ = [
    "BasePlugin",
    "CURRENT_SCHEMA_VERSION",
    "DeclarationContext",
    "LegacyPlugin",
    "LoadError",
    "LoadErrorKind",
    "Loader",
    "Plugin",
    "PluginDeclaration",
    "PluginFile",
]
