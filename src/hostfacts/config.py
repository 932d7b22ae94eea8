"""
hostfacts Configuration.

Centralized configuration management using Pydantic Settings.
Loads configuration from environment variables prefixed with ``HOSTFACTS_``.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Plugins shipped with the package
BUNDLED_PLUGIN_DIR = Path(__file__).resolve().parent / "bundled_plugins"


def get_user_plugin_dir() -> str:
    """
    Get the per-user plugin directory.

    Returns:
        str: Path to ~/.hostfacts/plugins (not expanded)
    """
    return str(Path("~") / ".hostfacts" / "plugins")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HOSTFACTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Plugins: a single directory or a list of directories
    plugin_path: list[str] | str = [str(BUNDLED_PLUGIN_DIR), get_user_plugin_dir()]

    # Logging
    log_level: str = "INFO"
    log_format: str = "standard"  # standard or json

    @property
    def plugin_paths(self) -> list[str]:
        """Get plugin_path as a list of expanded directory paths."""
        paths = [self.plugin_path] if isinstance(self.plugin_path, str) else self.plugin_path
        return [str(Path(p).expanduser()) for p in paths]


# Global settings instance
settings = Settings()
