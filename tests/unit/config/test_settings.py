"""Unit tests for the Settings model and its sources."""

from pathlib import Path

from gestao_demandas.config import get_settings, reload_settings
from gestao_demandas.config.settings import Settings, set_toml_config


class TestSettingsDefaults:
    def test_model_defaults(self) -> None:
        set_toml_config({})
        settings = Settings()

        assert settings.api.port == 3000
        assert settings.api.default_page_size == 50
        assert settings.storage.backend == "inmemory"
        assert settings.backup.auto_interval_hours == 6
        assert settings.backup.purge_interval_hours == 24
        assert settings.backup.retention_days == 30
        assert settings.backup.keep_auto == 10
        assert settings.is_production is False

    def test_toml_values_apply(self) -> None:
        set_toml_config({"backup": {"keep_auto": 4}, "env": "production"})
        try:
            settings = Settings()
        finally:
            set_toml_config({})

        assert settings.backup.keep_auto == 4
        assert settings.backup.retention_days == 30
        assert settings.is_production is True


class TestEnvironmentOverrides:
    def test_nested_env_var_wins_over_toml(self, env_override) -> None:
        set_toml_config({"backup": {"keep_auto": 4, "retention_days": 15}})
        try:
            with env_override({"DEMANDAS_BACKUP__KEEP_AUTO": "2"}):
                settings = Settings()
        finally:
            set_toml_config({})

        assert settings.backup.keep_auto == 2
        assert settings.backup.retention_days == 15


class TestGetSettings:
    def test_loads_from_config_dir(self, config_dir: Path, write_config, env_override) -> None:
        write_config({"default.toml": 'app_name = "from-toml"\n[api]\nport = 4000\n'})
        with env_override({"DEMANDAS_CONFIG_DIR": str(config_dir)}):
            settings = get_settings()

        assert settings.app_name == "from-toml"
        assert settings.api.port == 4000

    def test_is_cached(self, config_dir: Path, write_config, env_override) -> None:
        write_config({"default.toml": ""})
        with env_override({"DEMANDAS_CONFIG_DIR": str(config_dir)}):
            assert get_settings() is get_settings()

    def test_reload_picks_up_changes(
        self, config_dir: Path, write_config, env_override
    ) -> None:
        write_config({"default.toml": "[api]\nport = 4000\n"})
        with env_override({"DEMANDAS_CONFIG_DIR": str(config_dir)}):
            assert get_settings().api.port == 4000
            write_config({"default.toml": "[api]\nport = 5000\n"})
            assert reload_settings().api.port == 5000

    def test_missing_default_toml_uses_model_defaults(
        self, config_dir: Path, env_override
    ) -> None:
        with env_override({"DEMANDAS_CONFIG_DIR": str(config_dir)}):
            settings = get_settings()

        assert settings.api.port == 3000
