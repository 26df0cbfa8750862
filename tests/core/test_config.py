from __future__ import annotations

import pytest

from oauth_registry.core.config import AppEnv, Settings, load_settings

# ---- valid values ----


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("APP_ENV", "LOG_LEVEL", "LOG_JSON", "OAUTH_SERVERS_DIR", "OAUTH_SERVERS_STRICT"):
        monkeypatch.delenv(name, raising=False)
    settings = load_settings()
    assert settings.app_env == "dev"
    assert settings.log_level == "info"
    assert settings.log_json is False
    assert settings.oauth_servers_dir == "./conf/oauth"
    assert settings.oauth_servers_strict is False


def test_load_settings_respects_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.setenv("LOG_LEVEL", "error")
    monkeypatch.setenv("OAUTH_SERVERS_DIR", "/etc/gateway/oauth")
    monkeypatch.setenv("OAUTH_SERVERS_STRICT", "yes")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "error"
    assert settings.oauth_servers_dir == "/etc/gateway/oauth"
    assert settings.oauth_servers_strict is True


def test_load_settings_normalizes_case(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("LOG_JSON", "TRUE")
    settings = load_settings()
    assert settings.app_env == "prod"
    assert settings.log_level == "debug"
    assert settings.log_json is True


def test_load_settings_strips_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "  test  ")
    monkeypatch.setenv("OAUTH_SERVERS_DIR", "  /srv/oauth  ")
    settings = load_settings()
    assert settings.app_env == "test"
    assert settings.oauth_servers_dir == "/srv/oauth"


# ---- invalid values ----


def test_load_settings_rejects_invalid_app_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "staging")
    with pytest.raises(ValueError, match="APP_ENV must be dev|test|prod"):
        load_settings()


def test_load_settings_rejects_invalid_log_level(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    with pytest.raises(ValueError, match="LOG_LEVEL must be debug|info|warning|error"):
        load_settings()


def test_load_settings_rejects_non_integer_port(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PORT", "eighty")
    with pytest.raises(ValueError, match="PORT must be an integer"):
        load_settings()


def test_load_settings_rejects_bad_boolean(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OAUTH_SERVERS_STRICT", "sometimes")
    with pytest.raises(ValueError, match="OAUTH_SERVERS_STRICT must be a boolean"):
        load_settings()


def test_load_settings_rejects_empty_definitions_dir(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("OAUTH_SERVERS_DIR", "   ")
    with pytest.raises(ValueError, match="OAUTH_SERVERS_DIR must not be empty"):
        load_settings()


# ---- Settings properties ----


def _make_settings(app_env: AppEnv = "dev") -> Settings:
    return Settings(
        app_env=app_env,
        log_level="info",
        log_json=False,
        port=8000,
        oauth_servers_dir="./conf/oauth",
    )


def test_settings_env_flags() -> None:
    assert _make_settings("dev").is_dev is True
    assert _make_settings("test").is_test is True
    assert _make_settings("prod").is_prod is True
    assert _make_settings("prod").is_dev is False


def test_settings_is_frozen() -> None:
    s = _make_settings()
    with pytest.raises(AttributeError):
        s.app_env = "prod"  # type: ignore[misc]
