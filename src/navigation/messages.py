# wire message shapes exchanged with the external actuator
# src/navigation/messages.py
"""
Request builders and reply parsers for the turn-based actuator protocol.

Requests (one JSON object each):
  - {"action": "position"}
  - {"action": "step", "dir": "north" | "south" | "east" | "west"}
  - {"action": "block_at", "position": {"x": .., "y": .., "z": ..}}

Parsers return None for anything that is not a well-formed reply of the
expected kind. The state machine treats None as "not for me" and does
nothing, so parsing never raises.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .types import Cell, Direction

POSITION_TAGS = ("position", "ok")


def position_request() -> Dict[str, Any]:
    return {"action": "position"}


def step_request(direction: Direction) -> Dict[str, Any]:
    return {"action": "step", "dir": direction.value}


def block_at_request(cell: Cell) -> Dict[str, Any]:
    return {
        "action": "block_at",
        "position": {"x": cell.x, "y": cell.y, "z": cell.z},
    }


# ---------------------------------------------------------------------------
# Reply parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProbeReply:
    """Outcome of a block_at query. `name` is None for an empty cell."""

    name: Optional[str]

    @property
    def occupied(self) -> bool:
        return self.name is not None


def _coord(value: Any) -> Optional[int]:
    # bool is an int subclass; a boolean coordinate is garbage.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return math.floor(value)
    if isinstance(value, str):
        try:
            return math.floor(float(value))
        except (TypeError, ValueError, OverflowError):
            return None
    return None


def _cell_from(mapping: Mapping[str, Any]) -> Optional[Cell]:
    if not all(k in mapping for k in ("x", "y", "z")):
        return None
    x, y, z = (_coord(mapping[k]) for k in ("x", "y", "z"))
    if x is None or y is None or z is None:
        return None
    return Cell(x, y, z)


def parse_position_reply(msg: Any) -> Optional[Cell]:
    """
    Extract the agent's position from a position reply.

    Accepted:
      {"type"|"status": "position", "x": .., "y": .., "z": ..}
      {"type"|"status": "position", "position": {"x": .., "y": .., "z": ..}}
    "status": "ok" is accepted as a tag as well.
    """
    if not isinstance(msg, Mapping):
        return None

    tagged = msg.get("type") == "position" or msg.get("status") in POSITION_TAGS
    if not tagged:
        return None

    nested = msg.get("position")
    if isinstance(nested, Mapping):
        cell = _cell_from(nested)
        if cell is not None:
            return cell

    return _cell_from(msg)


def parse_step_reply(msg: Any) -> Optional[bool]:
    """
    Outcome of a step reply: True/False, or None if not a usable step reply.

    `ok` may be a boolean or the strings "true"/"false".
    """
    if not isinstance(msg, Mapping):
        return None
    if msg.get("action") != "step" or "ok" not in msg:
        return None

    ok = msg["ok"]
    if isinstance(ok, bool):
        return ok
    if isinstance(ok, str):
        lowered = ok.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    return None


def parse_probe_reply(msg: Any) -> Optional[ProbeReply]:
    """Parse a block_at reply. A `name` field marks the cell as occupied."""
    if not isinstance(msg, Mapping):
        return None
    if msg.get("action") != "block_at" and msg.get("type") != "block_at":
        return None

    # Actuators serialize an empty cell as `"name": null` as well as by
    # omitting the field; both read as empty.
    name = msg.get("name")
    if name is None:
        return ProbeReply(name=None)
    return ProbeReply(name=str(name))
