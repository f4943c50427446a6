"""Two-pass reply loop: one completion with tools, then a summarizing completion."""

from __future__ import annotations

import json
from typing import Any

from .errors import SaraError, UpstreamError
from .llm_client import call_llm
from .logger import get_logger
from .message_store import replay_for_model
from .prompts import build_system_prompt
from .records import Message
from .tool_context import ToolContext
from .tool_registry import execute_tool_call, tool_schemas_for_llm

log = get_logger("orchestrator")

FALLBACK_REPLY = "Sorry, I was unable to generate a response."
ASSISTANT_PLACEHOLDER = "I have performed the requested tool actions. Summarize what changed for the user."
SUMMARY_INSTRUCTION = "Here are the raw tool results, which you should summarize in natural language for the user:\n"


def build_context_message(user_profile: dict[str, Any], messages: list[Message]) -> str:
    profile_block = f"USER_PROFILE:\n{json.dumps(user_profile, indent=2)}"
    conversation_block = f"CONVERSATION_MESSAGES:\n{json.dumps(replay_for_model(messages), indent=2)}"
    return f"{profile_block}\n\n{conversation_block}"


def build_user_message(text: str, media_urls: list[str] | None = None) -> str:
    if not media_urls:
        return text
    return f"{text}\n\nATTACHED_MEDIA_URLS:\n{json.dumps(list(media_urls))}"


def _parse_tool_call(tool_call: dict[str, Any]) -> tuple[str | None, Any]:
    """Return (name, raw arguments); arguments stay undecoded."""
    fn = tool_call.get("function")
    if not isinstance(fn, dict):
        return None, None

    name = fn.get("name")
    if not isinstance(name, str) or not name:
        return None, None
    return name, fn.get("arguments")


def _complete(messages: list[dict[str, Any]], *, tools: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    result = call_llm(messages=messages, tools=tools)
    if not result.get("ok"):
        log.error("completion failed: %s", result.get("error"))
        raise UpstreamError(f"Completion endpoint failed: {result.get('error') or 'unknown error'}")
    return result


def run_tool_calls(tool_calls: list[Any], context: ToolContext) -> list[dict[str, Any]]:
    """Execute calls strictly in emission order, capturing each failure in place."""
    results: list[dict[str, Any]] = []
    for call in tool_calls:
        name, raw_args = _parse_tool_call(call if isinstance(call, dict) else {})
        tool_name = name or "unknown"
        if name is None:
            results.append({"toolName": tool_name, "error": "Malformed tool call."})
            continue
        try:
            result = execute_tool_call(name, raw_args, context)
        except SaraError as exc:
            log.warning("tool %s failed: %s", name, exc.message)
            results.append({"toolName": name, "error": exc.message})
        except Exception as exc:
            log.warning("tool %s raised %s: %s", name, type(exc).__name__, exc)
            results.append({"toolName": name, "error": str(exc)})
        else:
            results.append({"toolName": name, "result": result})
    return results


def format_tool_results(results: list[dict[str, Any]]) -> str:
    return "TOOL_RESULTS:\n" + "\n".join(json.dumps(entry, indent=2) for entry in results)


def generate_reply(
    text: str,
    user_profile: dict[str, Any],
    messages: list[Message],
    context: ToolContext,
    media_urls: list[str] | None = None,
) -> dict[str, Any]:
    """Produce Sara's reply for one inbound user turn.

    The first completion sees the tool catalogue. When it requests tools they
    run sequentially, and a second completion without tools turns the raw
    results into prose. Returns `replyText`, the ordered `toolResults` and
    the number of completion calls made.
    """
    base_messages: list[dict[str, Any]] = [
        {"role": "system", "content": build_system_prompt(context.mode, context.role)},
        {"role": "user", "content": build_context_message(user_profile, messages)},
        {"role": "user", "content": build_user_message(text, media_urls)},
    ]

    initial = _complete(base_messages, tools=tool_schemas_for_llm())
    initial_text = initial.get("text") if isinstance(initial.get("text"), str) else ""
    tool_calls = initial.get("tool_calls")
    if not isinstance(tool_calls, list) or not tool_calls:
        return {"replyText": initial_text or FALLBACK_REPLY, "toolResults": [], "completionCalls": 1}

    tool_results = run_tool_calls(tool_calls, context)

    follow_up_messages = [
        *base_messages,
        {"role": "assistant", "content": initial_text or ASSISTANT_PLACEHOLDER},
        {"role": "user", "content": SUMMARY_INSTRUCTION + format_tool_results(tool_results)},
    ]
    follow_up = _complete(follow_up_messages)
    follow_up_text = follow_up.get("text") if isinstance(follow_up.get("text"), str) else ""

    reply_text = follow_up_text or initial_text or FALLBACK_REPLY
    return {"replyText": reply_text, "toolResults": tool_results, "completionCalls": 2}
