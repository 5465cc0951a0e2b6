# filmshare/services/wire_format.py
"""
Wire bodies carried (compressed) in the ``favs`` parameter.

Two layouts exist and neither carries a version tag:

* current: ``{"codes": "a4gb1z", "priorities": {"b1z": true}}``
* legacy: the bare codes string, from links made before priorities existed.
  The very first links separated codes with commas.

parse_wire_body() sniffs which one it got and returns a tagged variant.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class SharePayload:
    """Pre-compression record: concatenated codes plus the sparse priority set."""

    codes: str
    priorities: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class CurrentWireBody:
    codes: str
    priorities: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LegacyWireBody:
    codes: str

    @property
    def comma_separated(self) -> bool:
        return "," in self.codes


WireBody = Union[CurrentWireBody, LegacyWireBody]


def serialize_payload(payload: SharePayload) -> str:
    """Compact JSON; ``priorities`` is omitted when nothing is flagged."""
    body: dict[str, Any] = {"codes": payload.codes}
    if payload.priorities:
        body["priorities"] = payload.priorities
    return json.dumps(body, separators=(",", ":"))


def parse_current(text: str) -> CurrentWireBody | None:
    """Parse the structured layout, or None if ``text`` is not one."""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict) or not isinstance(data.get("codes"), str):
        return None
    priorities = data.get("priorities")
    return CurrentWireBody(
        codes=data["codes"],
        priorities=priorities if isinstance(priorities, dict) else {},
    )


def parse_wire_body(text: str) -> WireBody:
    """Try the current layout first; anything else is a legacy codes string."""
    current = parse_current(text)
    if current is not None:
        return current
    return LegacyWireBody(codes=text)
