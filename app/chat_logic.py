"""Message-processing entry points shared by every inbound channel."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from src.sara.core.config_loader import get_mode, get_site_url, is_demo
from src.sara.core.errors import ModeError, NotFoundError
from src.sara.core.logger import get_logger
from src.sara.core.message_store import append_messages_for_user, get_messages_for_user, new_message
from src.sara.core.records import Channel, UserProfile
from src.sara.core.reply_orchestrator import generate_reply
from src.sara.core.report_store import get_user_reports
from src.sara.core.tool_context import ToolContext
from src.sara.core.users import get_user_by_id, project_for_model, resolve_or_create_user
from src.sara.demo.roles import get_role_info
from src.sara.demo.seeding import seed_demo_data_if_needed
from src.sara.demo.sessions import resolve_session

log = get_logger("chat")


@dataclass(slots=True)
class IncomingMessage:
    """Normalized inbound message from any channel."""

    sender_id: str
    text: str
    channel: Channel
    timestamp: int | None = None
    name_hint: str | None = None
    media_urls: list[str] = field(default_factory=list)
    raw_payload: Any = None


def _timestamp_iso(timestamp_ms: int | None) -> str | None:
    if not timestamp_ms:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


def build_turn_context(user: UserProfile, mode: str) -> tuple[dict[str, Any], ToolContext]:
    """Project stored state for the model and build the matching tool context."""
    reports = get_user_reports(user.id)
    role_info = get_role_info(user.id) if mode == "demo" else None
    profile = project_for_model(user, reports, role_info, mode=mode)
    context = ToolContext(
        user_id=user.id,
        mode=mode,
        role=role_info.role if role_info is not None else None,
        site_url=get_site_url(),
    )
    return profile, context


def run_turn(
    user: UserProfile,
    text: str,
    *,
    mode: str,
    media_urls: list[str] | None = None,
    received_at: str | None = None,
) -> dict[str, Any]:
    """Orchestrate one reply, then append the user turn and the reply to history."""
    profile, context = build_turn_context(user, mode)
    history = get_messages_for_user(user.id)
    reply = generate_reply(text, profile, history, context, media_urls=media_urls)

    append_messages_for_user(
        user.id,
        [
            new_message(user.id, "user", text, media_urls=media_urls, created_at=received_at),
            new_message(user.id, "assistant", reply["replyText"]),
        ],
    )
    return reply


def process_message(incoming: IncomingMessage) -> dict[str, Any]:
    mode = get_mode()
    seed_demo_data_if_needed(mode)

    user = resolve_or_create_user(incoming.channel, incoming.sender_id, incoming.name_hint)
    log.info("inbound %s message for user %s", incoming.channel, user.id)
    reply = run_turn(
        user,
        incoming.text,
        mode=mode,
        media_urls=incoming.media_urls,
        received_at=_timestamp_iso(incoming.timestamp),
    )
    return {"replyText": reply["replyText"]}


def handle_demo_map_chat(token: str, text: str) -> dict[str, Any]:
    if not is_demo():
        raise ModeError("Demo map chat is only available in demo mode")
    seed_demo_data_if_needed("demo")

    session = resolve_session(token)
    user = get_user_by_id(session.user_id)
    if user is None:
        raise NotFoundError("User not found for session")

    log.info("demo map chat for user %s role %s", user.id, session.role)
    reply = run_turn(user, text, mode="demo")
    return {"replyText": reply["replyText"]}
