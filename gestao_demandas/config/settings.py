"""``Settings``: the typed view of the service configuration."""

from typing import Any

from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gestao_demandas.config.models.api import APIConfig
from gestao_demandas.config.models.backup import BackupConfig
from gestao_demandas.config.models.observability import ObservabilityConfig
from gestao_demandas.config.models.storage import StorageConfig

# Merged TOML tables, installed by get_settings() before Settings() is built
_loaded_toml: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Install the merged TOML tables read by the next ``Settings()``."""
    global _loaded_toml
    _loaded_toml = dict(config)


class LoadedTomlSource(PydanticBaseSettingsSource):
    """Settings source serving the tables installed with ``set_toml_config``."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        value = _loaded_toml.get(field_name)
        return value, field_name, isinstance(value, dict)

    def __call__(self) -> dict[str, Any]:
        return dict(_loaded_toml)


class Settings(BaseSettings):
    """Service configuration.

    Later layers override earlier ones, nested tables are merged key by key:

    1. defaults declared on the models below
    2. ``config/default.toml``
    3. ``config/{DEMANDAS_ENV}.toml``
    4. ``DEMANDAS_*`` environment variables, ``__`` between nesting levels
       (``DEMANDAS_BACKUP__KEEP_AUTO=5``)
    """

    model_config = SettingsConfigDict(
        env_prefix="DEMANDAS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="gestao-demandas", description="Name bound to log lines")
    env: str = Field(default="development", description="Deployment environment name")
    debug: bool = Field(default=False, description="Verbose diagnostics")
    version: str = Field(default="1.0.0", description="Version reported by /health")

    api: APIConfig = Field(default_factory=APIConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @property
    def is_production(self) -> bool:
        """Whether raw error messages must be hidden from API clients."""
        return self.env.lower() == "production"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Constructor arguments, then environment, then TOML."""
        return (init_settings, env_settings, LoadedTomlSource(settings_cls))
