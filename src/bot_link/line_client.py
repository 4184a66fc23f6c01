# JSON-lines transport over text streams
# src/bot_link/line_client.py
"""
Line-oriented JSON transport.

Message format:
  - Each message is a single line of UTF-8 JSON.
  - Requests and replies are JSON objects.

The actuator process typically owns our stdin/stdout, so the CLI wires
LineBotLink(sys.stdin, sys.stdout) and keeps all logging on stderr.
"""

from __future__ import annotations

import json
import logging
from typing import IO, Any, Dict, Mapping

from .client import BotLink, BotLinkError

log = logging.getLogger(__name__)


class LineBotLink(BotLink):
    """
    Blocking JSON-lines link.

    send() writes one compact JSON object per line and flushes.
    receive() reads lines until a non-blank one arrives and decodes it.
    """

    def __init__(self, reader: IO[str], writer: IO[str]) -> None:
        self._reader = reader
        self._writer = writer

    def send(self, request: Mapping[str, Any]) -> None:
        encoded = json.dumps(dict(request), separators=(",", ":"))
        try:
            self._writer.write(encoded + "\n")
            self._writer.flush()
        except (OSError, ValueError) as exc:
            raise BotLinkError(
                code="send_failed",
                details={"request": dict(request), "exception": repr(exc)},
            ) from exc
        log.debug("LineBotLink sent %s", encoded)

    def receive(self) -> Dict[str, Any]:
        while True:
            try:
                line = self._reader.readline()
            except (OSError, ValueError) as exc:
                raise BotLinkError(
                    code="no_reply",
                    details={"exception": repr(exc)},
                ) from exc

            if line == "":
                raise BotLinkError(code="no_reply", details={"reason": "eof"})

            line = line.strip()
            if line:
                break

        try:
            obj = json.loads(line)
        except json.JSONDecodeError as exc:
            raise BotLinkError(
                code="bad_reply",
                details={"line": line, "exception": repr(exc)},
            ) from exc

        if not isinstance(obj, dict):
            raise BotLinkError(
                code="bad_reply",
                details={"line": line, "reason": "not_an_object"},
            )

        log.debug("LineBotLink received %s", line)
        return obj
