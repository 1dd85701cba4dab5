"""Reads ``config/default.toml`` and the per-environment overlay."""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "DEMANDAS_CONFIG_DIR"
ENVIRONMENT_ENV = "DEMANDAS_ENV"
DEFAULT_ENVIRONMENT = "development"

# Checkout root when running from source: <root>/gestao_demandas/config/loader.py
_SOURCE_ROOT = Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Locate the directory holding the TOML files.

    ``DEMANDAS_CONFIG_DIR`` wins when set and must exist. Otherwise the
    first ``config/`` found walking up from the working directory is used,
    then the one next to the package sources.

    Raises:
        FileNotFoundError: If DEMANDAS_CONFIG_DIR names a missing directory
    """
    explicit = os.environ.get(CONFIG_DIR_ENV)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    cwd = Path.cwd()
    for candidate in (cwd, *cwd.parents, _SOURCE_ROOT):
        if (candidate / "config").is_dir():
            return candidate / "config"
    return Path("config")


def get_environment() -> str:
    """Deployment environment name, ``development`` unless DEMANDAS_ENV says otherwise."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def load_toml(file_path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file does not exist
        tomllib.TOMLDecodeError: If the file is not valid TOML
    """
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise FileNotFoundError(f"Configuration file not found: {file_path}") from e


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` updated with ``override``, merging nested tables.

    Neither argument is modified.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_config() -> dict[str, Any]:
    """Load ``default.toml`` overlaid with ``<DEMANDAS_ENV>.toml`` when present.

    Raises:
        FileNotFoundError: If default.toml is missing
    """
    config_dir = get_config_dir()
    default_path = config_dir / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            f"Create config/default.toml or set {CONFIG_DIR_ENV}."
        )

    config = load_toml(default_path)
    overlay = config_dir / f"{get_environment()}.toml"
    if overlay.is_file():
        config = deep_merge(config, load_toml(overlay))
    return config
