"""Tests for settings loading."""

import pytest

from hookgate.config import DEFAULT_WEBHOOK_PATH, Settings, WebhooksConfig, load_settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOOKGATE_CONFIG_DIR", str(tmp_path))
    for name in ("HOOKGATE_CONFIG", "HOOKGATE_WEBHOOKS__SECRET", "HOOKGATE_WEBHOOKS__PATH", "HOOKGATE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_webhooks(self):
        cfg = WebhooksConfig()
        assert cfg.path == DEFAULT_WEBHOOK_PATH == "/api/github/webhooks"
        assert cfg.secret == ""
        assert cfg.additional_secrets == []

    def test_settings(self):
        settings = Settings()
        assert settings.server.bind == "0.0.0.0"
        assert settings.server.port == 8420
        assert settings.health_path == "/healthz"
        assert settings.log_level == "INFO"
        assert settings.log_json is False


class TestLoadSettings:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HOOKGATE_WEBHOOKS__SECRET", "from-env")
        monkeypatch.setenv("HOOKGATE_LOG_LEVEL", "DEBUG")
        settings = load_settings()
        assert settings.webhooks.secret == "from-env"
        assert settings.webhooks.path == DEFAULT_WEBHOOK_PATH
        assert settings.log_level == "DEBUG"

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "hooks.yaml"
        path.write_text(
            "webhooks:\n"
            "  path: /hooks\n"
            "  secret: s3cret\n"
            "  additional_secrets: [old]\n"
            "server:\n"
            "  port: 9000\n"
        )
        settings = load_settings(path)
        assert settings.webhooks.path == "/hooks"
        assert settings.webhooks.secret == "s3cret"
        assert settings.webhooks.additional_secrets == ["old"]
        assert settings.server.port == 9000

    def test_default_config_dir(self, tmp_path):
        (tmp_path / "config.yaml").write_text("log_json: true\n")
        assert load_settings().log_json is True

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.yaml")
        assert settings.webhooks.path == DEFAULT_WEBHOOK_PATH

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_settings(path).server.port == 8420

    def test_env_overrides_yaml(self, monkeypatch, tmp_path):
        path = tmp_path / "hooks.yaml"
        path.write_text(
            "webhooks:\n"
            "  secret: from-yaml\n"
            "  path: /hooks\n"
            "log_level: WARNING\n"
        )
        monkeypatch.setenv("HOOKGATE_WEBHOOKS__SECRET", "from-env")
        monkeypatch.setenv("HOOKGATE_LOG_LEVEL", "DEBUG")
        settings = load_settings(path)
        assert settings.webhooks.secret == "from-env"
        assert settings.webhooks.path == "/hooks"
        assert settings.log_level == "DEBUG"

    def test_yaml_not_reused_by_later_settings(self, tmp_path):
        path = tmp_path / "hooks.yaml"
        path.write_text("server:\n  port: 9000\n")
        assert load_settings(path).server.port == 9000
        assert Settings().server.port == 8420
