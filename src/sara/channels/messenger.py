"""Messenger webhook envelope parsing, verification and Send API replies."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from src.sara.core.config_loader import get_messenger_config
from src.sara.core.logger import get_logger

log = get_logger("channels.messenger")


@dataclass(slots=True)
class MessagingEvent:
    sender_id: str
    text: str
    media_urls: list[str] = field(default_factory=list)
    timestamp: int | None = None


def verify_subscription(mode: str | None, token: str | None, challenge: str | None, expected: str | None) -> str | None:
    """Return the challenge to echo when the handshake matches, else None."""
    if mode == "subscribe" and token and expected and token == expected:
        return challenge or ""
    return None


def parse_messaging_event(payload: Any) -> MessagingEvent | None:
    """Extract the first messaging event; None when it has no sender or content."""
    if not isinstance(payload, dict):
        return None
    entries = payload.get("entry")
    if not isinstance(entries, list) or not entries or not isinstance(entries[0], dict):
        return None
    messaging = entries[0].get("messaging")
    if not isinstance(messaging, list) or not messaging or not isinstance(messaging[0], dict):
        return None
    event = messaging[0]

    sender = event.get("sender") if isinstance(event.get("sender"), dict) else {}
    sender_id = sender.get("id")
    message = event.get("message") if isinstance(event.get("message"), dict) else {}
    text = message.get("text") if isinstance(message.get("text"), str) else ""

    media_urls: list[str] = []
    attachments = message.get("attachments")
    for attachment in attachments if isinstance(attachments, list) else []:
        if not isinstance(attachment, dict) or attachment.get("type") != "image":
            continue
        attachment_payload = attachment.get("payload")
        url = attachment_payload.get("url") if isinstance(attachment_payload, dict) else None
        if isinstance(url, str) and url:
            media_urls.append(url)

    if sender_id is None or sender_id == "":
        return None
    if not text and not media_urls:
        return None

    timestamp = event.get("timestamp")
    return MessagingEvent(
        sender_id=str(sender_id),
        text=text,
        media_urls=media_urls,
        timestamp=timestamp if isinstance(timestamp, int) else None,
    )


def send_text_message(recipient_id: str, text: str) -> dict[str, Any]:
    """Post a reply through the Send API; skipped when no page token is configured."""
    cfg = get_messenger_config()
    page_token = cfg["page_access_token"]
    if not page_token:
        log.warning("page access token is not set; skipping send to Messenger")
        return {"ok": False, "sent": False, "error": "missing_page_access_token"}

    url = f"{cfg['send_url']}?access_token={quote(page_token, safe='')}"
    body = {"recipient": {"id": recipient_id}, "message": {"text": text}}
    req = Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json"},
        method="POST",
    )
    try:
        with urlopen(req, timeout=cfg["timeout_sec"]) as response:
            status = response.status
    except HTTPError as exc:
        log.error("messenger send to %s failed: HTTP %s", recipient_id, exc.code)
        return {"ok": False, "sent": False, "error": f"HTTP {exc.code}"}
    except URLError as exc:
        log.error("messenger send to %s failed: %s", recipient_id, exc.reason)
        return {"ok": False, "sent": False, "error": str(exc.reason)}
    except OSError as exc:
        # Read timeouts and dropped sockets surface here rather than as URLError.
        log.error("messenger send to %s failed: %s", recipient_id, exc)
        return {"ok": False, "sent": False, "error": str(exc) or type(exc).__name__}

    log.info("sent messenger reply to %s", recipient_id)
    return {"ok": True, "sent": True, "status": status}
