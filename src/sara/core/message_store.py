"""Append-only per-user message history."""

from __future__ import annotations

from typing import Any

from .blob_store import MESSAGES, get_blob_store
from .records import Message, MessageDirection, new_id, utc_now_iso


def new_message(
    user_id: str,
    direction: MessageDirection,
    text: str,
    *,
    media_urls: list[str] | None = None,
    created_at: str | None = None,
) -> Message:
    return Message(
        id=new_id(),
        user_id=user_id,
        direction=direction,
        text=text,
        media_urls=list(media_urls or []),
        created_at=created_at or utc_now_iso(),
    )


def get_messages_for_user(user_id: str) -> list[Message]:
    payload = get_blob_store().get(MESSAGES, user_id)
    if not isinstance(payload, list):
        return []
    return [Message.from_dict(item) for item in payload if isinstance(item, dict)]


def append_messages_for_user(user_id: str, messages: list[Message]) -> None:
    store = get_blob_store()
    existing = store.get(MESSAGES, user_id)
    history = existing if isinstance(existing, list) else []
    store.set(MESSAGES, user_id, [*history, *(message.to_dict() for message in messages)])


def replay_for_model(messages: list[Message]) -> list[dict[str, Any]]:
    return [
        {
            "direction": message.direction,
            "text": message.text,
            "mediaUrls": list(message.media_urls),
            "createdAt": message.created_at,
        }
        for message in messages
    ]
