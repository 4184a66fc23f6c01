# actuator link abstraction
# src/bot_link/client.py
"""
Link abstraction between the navigator and the external actuator.

Defines the BotLink protocol used by the driver loop, plus the
BotLinkError raised by transports when a round trip can't complete.

Transport failures are fatal for the session: the driver stops and
reports them, it never retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Protocol


@dataclass
class BotLinkError(RuntimeError):
    """
    Transport-level failure talking to the actuator.

    Codes:
        - "send_failed": the request couldn't be written
        - "no_reply":    the reply stream ended
        - "bad_reply":   the reply wasn't a JSON object
    """

    code: str
    details: dict[str, Any]

    def __str__(self) -> str:
        return f"BotLinkError(code={self.code!r}, details={self.details!r})"


class BotLink(Protocol):
    """
    Request/reply channel to the actuator.

    Implementations:
    - LineBotLink: one JSON object per line over a pair of text streams
    - FakeBotLink: in-memory voxel world for tests
    """

    def send(self, request: Mapping[str, Any]) -> None:
        """Send exactly one request."""
        ...

    def receive(self) -> Dict[str, Any]:
        """Block until the reply to the last request arrives."""
        ...
