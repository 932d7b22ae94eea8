"""Filesystem path helpers."""

import glob
import os


def escape_glob_dir(*parts: str) -> str:
    """
    Join path parts and escape glob metacharacters in the result.

    Plugin roots such as ``/opt/plugins[prod]`` would otherwise be read as a
    character class by :mod:`glob`.

    Example:
        >>> escape_glob_dir("/opt", "plugins[prod]")
        '/opt/plugins[[]prod]'
    """
    return glob.escape(os.path.join(*parts))
