"""Load and query Sara JSON config files."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

DEFAULT_CONFIG_PATH = Path("config/config.json")
DEFAULT_DB_PATH = "data/sara_blobs.db"
DEFAULT_OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_GRAPH_SEND_URL = "https://graph.facebook.com/v17.0/me/messages"
_CONFIG_CACHE: dict[Path, tuple[int, dict[str, Any]]] = {}

SaraMode = Literal["demo", "live"]


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[3]


def resolve_config_path(config_path: str | Path | None = None) -> Path:
    """Resolve config path against repo root.

    Priority:
    1. explicit function argument
    2. `SARA_CONFIG_PATH` environment variable
    3. default `config/config.json`
    """
    raw_path: str | Path | None = config_path or os.getenv("SARA_CONFIG_PATH")
    candidate = Path(raw_path) if raw_path else DEFAULT_CONFIG_PATH
    if not candidate.is_absolute():
        candidate = _repo_root() / candidate
    return candidate.resolve()


def load_config(config_path: str | Path | None = None, *, use_cache: bool = True) -> dict[str, Any]:
    """Load config JSON as a dictionary."""
    resolved = resolve_config_path(config_path)
    if not resolved.exists():
        raise FileNotFoundError(f"Config file not found: {resolved}")

    mtime_ns = resolved.stat().st_mtime_ns
    if use_cache and resolved in _CONFIG_CACHE:
        cached_mtime_ns, cached_payload = _CONFIG_CACHE[resolved]
        if cached_mtime_ns == mtime_ns:
            return cached_payload

    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in config file: {resolved}") from exc

    if not isinstance(payload, dict):
        raise ValueError(f"Config root must be a JSON object: {resolved}")

    _CONFIG_CACHE[resolved] = (mtime_ns, payload)
    return payload


def clear_config_cache() -> None:
    """Clear in-memory config cache."""
    _CONFIG_CACHE.clear()


def _safe_config(config: dict[str, Any] | None) -> dict[str, Any]:
    if config is not None:
        return config
    try:
        return load_config()
    except (FileNotFoundError, ValueError):
        return {}


def _section(name: str, config: dict[str, Any] | None) -> dict[str, Any]:
    block = _safe_config(config).get(name)
    return block if isinstance(block, dict) else {}


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def get_mode(config: dict[str, Any] | None = None) -> SaraMode:
    """Return operating mode; anything other than `live` is treated as demo."""
    raw = _first_env("SARA_MODE") or _safe_config(config).get("mode") or "demo"
    return "live" if str(raw).strip().lower() == "live" else "demo"


def is_demo(config: dict[str, Any] | None = None) -> bool:
    return get_mode(config) == "demo"


def get_site_url(config: dict[str, Any] | None = None) -> str:
    raw = _first_env("SITE_URL") or _safe_config(config).get("site_url") or ""
    return str(raw).rstrip("/")


def get_model_by_alias(alias: str, config: dict[str, Any] | None = None) -> tuple[str, dict[str, Any]]:
    """Return `(model_id, model_payload)` for a unique alias."""
    payload = _safe_config(config)
    models = payload.get("models")
    if not isinstance(models, dict):
        raise ValueError("Config models must be a JSON object keyed by model id.")

    matches: list[tuple[str, dict[str, Any]]] = []
    for model_id, model in models.items():
        if isinstance(model, dict) and model.get("alias") == alias:
            matches.append((model_id, model))

    if not matches:
        raise ValueError(f"No model found for alias '{alias}'.")
    if len(matches) > 1:
        raise ValueError(f"Alias '{alias}' is not unique across models.")
    return matches[0]


def get_default_model(config: dict[str, Any] | None = None) -> tuple[str, dict[str, Any]]:
    """Return default model resolved from `default_model_alias`."""
    payload = _safe_config(config)
    alias = payload.get("default_model_alias")
    if not isinstance(alias, str) or not alias:
        raise ValueError("Config requires non-empty string `default_model_alias`.")
    return get_model_by_alias(alias, config=payload)


def get_model_config(model_ref: str | None = None, config: dict[str, Any] | None = None) -> tuple[str, dict[str, Any]]:
    """Resolve model config by id, alias, or default alias when model_ref is None.

    `SARA_MODEL` overrides the endpoint of the resolved model.
    """
    payload = _safe_config(config)
    if model_ref is None:
        model_id, model_cfg = get_default_model(payload)
    else:
        models = payload.get("models")
        if isinstance(models, dict) and isinstance(models.get(model_ref), dict):
            model_id, model_cfg = model_ref, models[model_ref]
        else:
            model_id, model_cfg = get_model_by_alias(model_ref, payload)

    override = _first_env("SARA_MODEL")
    if override:
        model_cfg = {**model_cfg, "endpoint": override}
    return model_id, model_cfg


def get_provider_config(provider_name: str, config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return provider config from `model_providers`, with env-provided API keys."""
    payload = _safe_config(config)
    providers = payload.get("model_providers")
    if not isinstance(providers, dict):
        raise ValueError("Config model_providers must be a JSON object.")

    provider = providers.get(provider_name)
    if not isinstance(provider, dict):
        raise ValueError(f"Model provider '{provider_name}' is not defined.")

    provider = dict(provider)
    if provider_name == "openai":
        env_key = _first_env("OPENAI_API_KEY")
        if env_key:
            provider["apikey"] = env_key
        provider.setdefault("base_url", DEFAULT_OPENAI_CHAT_URL)
    return provider


def get_storage_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    block = _section("storage", config)
    backend = str(block.get("backend") or "sqlite").strip().lower()
    db_path = _first_env("SARA_DB_PATH") or block.get("db_path") or DEFAULT_DB_PATH
    return {
        "backend": backend if backend in {"sqlite", "memory"} else "sqlite",
        "db_path": str(db_path),
    }


def resolve_repo_path(raw: str | Path) -> Path:
    candidate = Path(raw)
    if not candidate.is_absolute():
        candidate = _repo_root() / candidate
    return candidate


def get_messenger_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    block = _section("messenger", config)
    timeout_raw = block.get("timeout_sec")
    return {
        "verify_token": _first_env("FB_VERIFY_TOKEN", "FACEBOOK_VERIFY_TOKEN") or block.get("verify_token") or None,
        "page_access_token": (
            _first_env("FB_PAGE_ACCESS_TOKEN", "FACEBOOK_PAGE_ACCESS_TOKEN") or block.get("page_access_token") or None
        ),
        "send_url": block.get("send_url") or DEFAULT_GRAPH_SEND_URL,
        "timeout_sec": int(timeout_raw) if isinstance(timeout_raw, int) and timeout_raw > 0 else 15,
    }


def get_logging_config(config: dict[str, Any] | None = None) -> dict[str, Any]:
    block = _section("logging", config)
    level = _first_env("SARA_LOG_LEVEL") or block.get("level") or "INFO"
    return {"level": str(level).upper()}
