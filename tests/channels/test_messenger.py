import json
from urllib.error import URLError

import pytest

from src.sara.channels import messenger
from src.sara.channels.messenger import parse_messaging_event, send_text_message, verify_subscription


def _envelope(event):
    return {"object": "page", "entry": [{"id": "page-1", "messaging": [event]}]}


def _config(page_token="PAGE TOKEN"):
    return {
        "verify_token": "verify-me",
        "page_access_token": page_token,
        "send_url": "https://graph.example/v19.0/me/messages",
        "timeout_sec": 7,
    }


def test_verify_subscription_handshake():
    assert verify_subscription("subscribe", "verify-me", "12345", "verify-me") == "12345"
    assert verify_subscription("subscribe", "wrong", "12345", "verify-me") is None
    assert verify_subscription("unsubscribe", "verify-me", "12345", "verify-me") is None
    assert verify_subscription("subscribe", None, "12345", None) is None


def test_parse_text_and_image_attachments():
    event = parse_messaging_event(
        _envelope(
            {
                "sender": {"id": "psid-9"},
                "timestamp": 1717243200000,
                "message": {
                    "text": "Roof is gone",
                    "attachments": [
                        {"type": "image", "payload": {"url": "https://cdn.example/1.jpg"}},
                        {"type": "video", "payload": {"url": "https://cdn.example/2.mp4"}},
                        {"type": "image", "payload": {}},
                    ],
                },
            }
        )
    )
    assert event.sender_id == "psid-9"
    assert event.text == "Roof is gone"
    assert event.media_urls == ["https://cdn.example/1.jpg"]
    assert event.timestamp == 1717243200000


def test_parse_image_only_message():
    event = parse_messaging_event(
        _envelope(
            {
                "sender": {"id": "psid-9"},
                "message": {"attachments": [{"type": "image", "payload": {"url": "https://cdn.example/1.jpg"}}]},
            }
        )
    )
    assert event.text == ""
    assert event.media_urls == ["https://cdn.example/1.jpg"]


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"entry": []},
        {"entry": [{"messaging": []}]},
        _envelope({"message": {"text": "no sender"}}),
        _envelope({"sender": {"id": "psid-9"}, "delivery": {"mids": ["m1"]}}),
        _envelope({"sender": {"id": "psid-9"}, "message": {"text": ""}}),
    ],
)
def test_parse_ignores_unusable_events(payload):
    assert parse_messaging_event(payload) is None


def test_send_is_skipped_without_page_token(monkeypatch):
    monkeypatch.setattr(messenger, "get_messenger_config", lambda: _config(page_token=None))

    def fail_urlopen(*args, **kwargs):
        raise AssertionError("urlopen should not be called")

    monkeypatch.setattr(messenger, "urlopen", fail_urlopen)
    assert send_text_message("psid-9", "hi") == {"ok": False, "sent": False, "error": "missing_page_access_token"}


class _FakeResponse:
    status = 200

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


def test_send_posts_to_graph_api(monkeypatch):
    captured = {}

    def fake_urlopen(req, timeout):
        captured["url"] = req.full_url
        captured["method"] = req.get_method()
        captured["body"] = json.loads(req.data.decode("utf-8"))
        captured["timeout"] = timeout
        return _FakeResponse()

    monkeypatch.setattr(messenger, "get_messenger_config", _config)
    monkeypatch.setattr(messenger, "urlopen", fake_urlopen)

    result = send_text_message("psid-9", "Report saved.")

    assert result == {"ok": True, "sent": True, "status": 200}
    assert captured["url"] == "https://graph.example/v19.0/me/messages?access_token=PAGE%20TOKEN"
    assert captured["method"] == "POST"
    assert captured["body"] == {"recipient": {"id": "psid-9"}, "message": {"text": "Report saved."}}
    assert captured["timeout"] == 7


def test_send_network_failure_is_reported_not_raised(monkeypatch):
    def fake_urlopen(req, timeout):
        raise URLError("connection refused")

    monkeypatch.setattr(messenger, "get_messenger_config", _config)
    monkeypatch.setattr(messenger, "urlopen", fake_urlopen)

    result = send_text_message("psid-9", "hi")
    assert result["ok"] is False
    assert result["error"] == "connection refused"


@pytest.mark.parametrize(
    "failure, expected",
    [
        (TimeoutError("The read operation timed out"), "The read operation timed out"),
        (ConnectionResetError(), "ConnectionResetError"),
    ],
)
def test_send_timeout_or_socket_error_is_reported_not_raised(monkeypatch, failure, expected):
    def fake_urlopen(req, timeout):
        raise failure

    monkeypatch.setattr(messenger, "get_messenger_config", _config)
    monkeypatch.setattr(messenger, "urlopen", fake_urlopen)

    assert send_text_message("psid-9", "hi") == {"ok": False, "sent": False, "error": expected}
