"""Per-turn execution context handed to every tool handler."""

from __future__ import annotations

from dataclasses import dataclass

from .records import DemoRole


@dataclass(slots=True)
class ToolContext:
    """Caller identity and mode for one reply turn.

    `role` is mutable so a persona change made by one tool call is visible to
    later calls in the same turn.
    """

    user_id: str
    mode: str = "live"
    role: DemoRole | None = None
    site_url: str | None = None

    @property
    def is_demo(self) -> bool:
        return self.mode == "demo"
