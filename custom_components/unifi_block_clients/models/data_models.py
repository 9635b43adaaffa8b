"""Data models for UniFi Block Clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ClientRecord:
    """A known client as reported by the controller."""

    record_id: str
    mac: str
    name: str | None = None
    hostname: str | None = None
    blocked: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> ClientRecord:
        """Build from a controller ``rest/user`` entry."""
        return cls(
            record_id=data["_id"],
            mac=data["mac"].lower(),
            name=data.get("name") or None,
            hostname=data.get("hostname") or None,
            blocked=bool(data.get("blocked", False)),
        )
