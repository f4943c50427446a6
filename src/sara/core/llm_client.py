"""Provider-agnostic LLM client entrypoint.

Every completion call is a single attempt; failures come back as `ok=False`
payloads and the caller decides how to surface them.
"""

from __future__ import annotations

from typing import Any

from .config_loader import get_model_config, get_provider_config, load_config
from .logger import get_logger
from .providers import call_openai

log = get_logger("llm")


def _failure(*, provider: str | None, model: str | None, error: str) -> dict[str, Any]:
    return {
        "ok": False,
        "provider": provider,
        "model": model,
        "text": None,
        "tool_calls": None,
        "finish_reason": None,
        "usage": None,
        "raw": None,
        "error": error,
    }


def _load_config_or_empty() -> dict[str, Any]:
    try:
        return load_config()
    except (FileNotFoundError, ValueError):
        return {}


def call_llm(
    *,
    messages: list[dict[str, Any]],
    model: str | None = None,
    tools: list[dict[str, Any]] | None = None,
    temperature: float | None = None,
    max_output_tokens: int | None = None,
    timeout_sec: int | None = None,
) -> dict[str, Any]:
    """Resolve model/provider from config and execute one model call."""
    payload = _load_config_or_empty()
    try:
        model_id, model_cfg = get_model_config(model, payload)
    except ValueError as exc:
        return _failure(provider=None, model=model, error=str(exc))

    provider_name = model_cfg.get("provider")
    if not isinstance(provider_name, str) or not provider_name:
        return _failure(provider=None, model=model_id, error=f"Model '{model_id}' missing provider.")

    endpoint = model_cfg.get("endpoint")
    if not isinstance(endpoint, str) or not endpoint:
        return _failure(provider=provider_name, model=model_id, error=f"Model '{model_id}' missing endpoint.")

    if provider_name != "openai":
        return _failure(provider=provider_name, model=model_id, error=f"Unsupported provider '{provider_name}'.")

    try:
        provider_cfg = get_provider_config(provider_name, payload)
    except ValueError as exc:
        return _failure(provider=provider_name, model=model_id, error=str(exc))

    api_key = provider_cfg.get("apikey")
    if not isinstance(api_key, str) or not api_key:
        return _failure(provider=provider_name, model=model_id, error="OpenAI API key missing.")

    provider_timeout = timeout_sec
    if provider_timeout is None:
        configured = provider_cfg.get("timeout_sec")
        provider_timeout = int(configured) if configured is not None else 60
    if max_output_tokens is None and isinstance(model_cfg.get("max_output_tokens"), int):
        max_output_tokens = model_cfg["max_output_tokens"]

    try:
        return call_openai(
            api_key=api_key,
            model=endpoint,
            messages=messages,
            tools=tools,
            max_output_tokens=max_output_tokens,
            temperature=temperature,
            timeout_sec=provider_timeout,
            base_url=provider_cfg["base_url"],
        )
    except Exception as exc:
        log.error("completion call to %s failed: %s", endpoint, exc)
        return _failure(provider=provider_name, model=model_id, error=str(exc))
