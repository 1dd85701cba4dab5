"""Configuration loading for the demandas service.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from gestao_demandas.config import get_settings

    settings = get_settings()
    port = settings.api.port
    backup_dir = settings.backup.directory
"""

from functools import lru_cache

from gestao_demandas.config.loader import load_config
from gestao_demandas.config.settings import Settings, set_toml_config
from gestao_demandas.observability.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    A missing config/default.toml falls back to model defaults.
    """
    try:
        config_dict = load_config()
    except FileNotFoundError:
        logger.warning("config_file_not_found", msg="Using default configuration")
        config_dict = {}
    set_toml_config(config_dict)

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
