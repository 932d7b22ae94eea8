"""hostfacts - host fact collection through file-based plugins."""

__version__ = "0.1.0"
