import json
from pathlib import Path

import pytest

from src.sara.core.config_loader import (
    clear_config_cache,
    get_default_model,
    get_logging_config,
    get_messenger_config,
    get_mode,
    get_model_by_alias,
    get_model_config,
    get_provider_config,
    get_site_url,
    get_storage_config,
    is_demo,
    load_config,
    resolve_config_path,
)


def _write_json(path: Path, payload: dict) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in (
        "SARA_MODE",
        "SITE_URL",
        "OPENAI_API_KEY",
        "SARA_MODEL",
        "SARA_DB_PATH",
        "SARA_LOG_LEVEL",
        "FB_VERIFY_TOKEN",
        "FACEBOOK_VERIFY_TOKEN",
        "FB_PAGE_ACCESS_TOKEN",
        "FACEBOOK_PAGE_ACCESS_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


def test_resolve_config_path_uses_env_var(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    config_path = tmp_path / "custom.json"
    _write_json(config_path, {"ok": True})
    monkeypatch.setenv("SARA_CONFIG_PATH", str(config_path))

    assert resolve_config_path() == config_path.resolve()


def test_load_config_reads_json_file(tmp_path: Path):
    config_path = tmp_path / "config.json"
    payload = {"mode": "live"}
    _write_json(config_path, payload)

    assert load_config(config_path=config_path, use_cache=False) == payload


def test_load_config_invalid_json_raises_value_error(tmp_path: Path):
    config_path = tmp_path / "config.json"
    config_path.write_text("{ invalid", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid JSON in config file"):
        load_config(config_path=config_path, use_cache=False)


def test_load_config_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(config_path=tmp_path / "absent.json")


def test_mode_defaults_to_demo_and_env_overrides(monkeypatch: pytest.MonkeyPatch):
    assert get_mode({}) == "demo"
    assert get_mode({"mode": "live"}) == "live"
    assert get_mode({"mode": "anything-else"}) == "demo"

    monkeypatch.setenv("SARA_MODE", "LIVE")
    assert get_mode({"mode": "demo"}) == "live"
    assert is_demo({"mode": "demo"}) is False


def test_helpers_tolerate_missing_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SARA_CONFIG_PATH", str(tmp_path / "missing.json"))

    assert get_mode() == "demo"
    assert get_site_url() == ""
    assert get_storage_config()["backend"] == "sqlite"
    assert get_logging_config() == {"level": "INFO"}


def test_site_url_strips_trailing_slash(monkeypatch: pytest.MonkeyPatch):
    assert get_site_url({"site_url": "https://sara.example/"}) == "https://sara.example"
    monkeypatch.setenv("SITE_URL", "https://env.example/")
    assert get_site_url({"site_url": "https://sara.example"}) == "https://env.example"


def test_model_resolution_by_alias_id_and_default(monkeypatch: pytest.MonkeyPatch):
    config = {
        "default_model_alias": "sara",
        "models": {
            "gpt5_mini": {"alias": "sara", "provider": "openai", "endpoint": "gpt-5-mini"},
            "gpt5": {"alias": "big", "provider": "openai", "endpoint": "gpt-5"},
        },
    }
    assert get_default_model(config)[0] == "gpt5_mini"
    assert get_model_by_alias("big", config)[1]["endpoint"] == "gpt-5"
    assert get_model_config("gpt5", config)[0] == "gpt5"

    monkeypatch.setenv("SARA_MODEL", "gpt-override")
    model_id, model_cfg = get_model_config(None, config)
    assert model_id == "gpt5_mini"
    assert model_cfg["endpoint"] == "gpt-override"
    assert config["models"]["gpt5_mini"]["endpoint"] == "gpt-5-mini"


def test_model_alias_must_be_unique():
    config = {
        "models": {
            "a": {"alias": "dup"},
            "b": {"alias": "dup"},
        }
    }
    with pytest.raises(ValueError, match="not unique"):
        get_model_by_alias("dup", config)


def test_provider_config_applies_env_key_without_mutating_config(monkeypatch: pytest.MonkeyPatch):
    config = {"model_providers": {"openai": {"apikey": "FILE_KEY"}}}
    monkeypatch.setenv("OPENAI_API_KEY", "ENV_KEY")

    provider = get_provider_config("openai", config)
    assert provider["apikey"] == "ENV_KEY"
    assert provider["base_url"].startswith("https://")
    assert config["model_providers"]["openai"] == {"apikey": "FILE_KEY"}

    with pytest.raises(ValueError, match="not defined"):
        get_provider_config("anthropic", config)


def test_messenger_config_prefers_fb_env_names(monkeypatch: pytest.MonkeyPatch):
    config = {"messenger": {"verify_token": "file-verify", "timeout_sec": 7}}
    assert get_messenger_config(config)["verify_token"] == "file-verify"
    assert get_messenger_config(config)["timeout_sec"] == 7

    monkeypatch.setenv("FACEBOOK_VERIFY_TOKEN", "fallback")
    assert get_messenger_config(config)["verify_token"] == "fallback"
    monkeypatch.setenv("FB_VERIFY_TOKEN", "primary")
    monkeypatch.setenv("FB_PAGE_ACCESS_TOKEN", "page")
    cfg = get_messenger_config(config)
    assert cfg["verify_token"] == "primary"
    assert cfg["page_access_token"] == "page"


def test_storage_config_env_db_path(monkeypatch: pytest.MonkeyPatch):
    assert get_storage_config({"storage": {"backend": "memory"}})["backend"] == "memory"
    assert get_storage_config({"storage": {"backend": "redis"}})["backend"] == "sqlite"
    monkeypatch.setenv("SARA_DB_PATH", "/tmp/sara.db")
    assert get_storage_config({})["db_path"] == "/tmp/sara.db"
