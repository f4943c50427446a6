"""Inbound channel adapters."""

from .messenger import MessagingEvent, parse_messaging_event, send_text_message, verify_subscription

__all__ = [
    "MessagingEvent",
    "parse_messaging_event",
    "send_text_message",
    "verify_subscription",
]
