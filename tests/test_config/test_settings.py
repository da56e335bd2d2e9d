"""Tests for environment-driven process settings."""

from scheduled_mailer.config.settings import Settings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.json_config == "scheduled_mailer"
        assert settings.config_files == ["/etc/sensu/config.json"]
        assert settings.config_dirs == ["/etc/sensu/conf.d"]
        assert settings.is_production

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SCHEDULED_MAILER_JSON_CONFIG", "night_mailer")
        monkeypatch.setenv("SCHEDULED_MAILER_CONFIG_FILES", '["/opt/sensu/config.json"]')
        monkeypatch.setenv("SCHEDULED_MAILER_ENVIRONMENT", "development")

        settings = get_settings()

        assert settings.json_config == "night_mailer"
        assert settings.config_files == ["/opt/sensu/config.json"]
        assert not settings.is_production

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_delivery_deadline_not_configurable(self, monkeypatch):
        monkeypatch.setenv("SCHEDULED_MAILER_DELIVERY_TIMEOUT_SECONDS", "120")
        assert "delivery_timeout_seconds" not in get_settings().model_dump()
