"""Completion provider adapters."""

from .openai import call_openai

__all__ = ["call_openai"]
