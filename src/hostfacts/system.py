"""
The controller that owns the shared data store.

Plugins write the facts they collect into ``System.data``; the provides map
records which plugin is responsible for which attribute.
"""

import logging
from typing import Optional

from hostfacts.config import Settings
from hostfacts.plugins.loader import Loader
from hostfacts.provides_map import ProvidesMap

logger = logging.getLogger(__name__)


class System:
    """Owner of the data store, the provides map and the plugin loader."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.data: dict = {}
        self.provides_map = ProvidesMap()
        self.loader = Loader(self, settings=settings)

    def load_plugins(self) -> None:
        """Load every plugin under the configured plugin_path."""
        self.loader.load_all()
        logger.info(f"Loaded {len(self.loader.plugin_types)} plugin type(s)")
