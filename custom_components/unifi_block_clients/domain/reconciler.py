"""Pure client reconciliation logic.

This module decides which switches must be created and which must go,
given the configured clients and the switches currently exposed.
It has NO dependencies on Home Assistant.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import ClientRecord

_UNIQUE_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_DNS, "unifi_block_clients")


@dataclass
class ReconcilePlan:
    """Result of diffing desired clients against exposed switches."""

    # Desired identifiers with no switch yet, in configuration order
    to_add: list[str] = field(default_factory=list)
    # Positions in the exposed list to remove (stale or duplicate)
    remove_positions: list[int] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """Check if nothing needs to change."""
        return not self.to_add and not self.remove_positions


class ClientReconciler:
    """Diff algorithm between desired clients and exposed switches."""

    @staticmethod
    def normalize(identifiers: list[str]) -> list[str]:
        """Lower-case identifiers and drop duplicates, keeping order."""
        seen: set[str] = set()
        result = []
        for identifier in identifiers:
            value = identifier.strip().lower()
            if value and value not in seen:
                seen.add(value)
                result.append(value)
        return result

    @staticmethod
    def plan(desired: list[str], exposed: list[str]) -> ReconcilePlan:
        """Calculate what to add and remove.

        Args:
            desired: Configured client identifiers
            exposed: Identifiers of the currently exposed switches, in order

        Returns:
            ReconcilePlan; applying it leaves exactly one switch per desired client
        """
        wanted = ClientReconciler.normalize(desired)
        wanted_set = set(wanted)

        kept: set[str] = set()
        remove_positions = []
        for position, identifier in enumerate(exposed):
            if identifier not in wanted_set or identifier in kept:
                remove_positions.append(position)
            else:
                kept.add(identifier)

        return ReconcilePlan(
            to_add=[identifier for identifier in wanted if identifier not in kept],
            remove_positions=remove_positions,
        )

    @staticmethod
    def select_records(
        records: list[ClientRecord], to_add: list[str]
    ) -> list[ClientRecord]:
        """Pick one controller record per identifier that must be added."""
        by_mac: dict[str, ClientRecord] = {}
        for record in records:
            by_mac.setdefault(record.mac, record)
        return [by_mac[mac] for mac in to_add if mac in by_mac]

    @staticmethod
    def unknown_identifiers(
        records: list[ClientRecord], to_add: list[str]
    ) -> list[str]:
        """Identifiers the controller has never seen."""
        known = {record.mac for record in records}
        return [mac for mac in to_add if mac not in known]


def display_name(record: ClientRecord) -> str:
    """Name for a new switch: alias, then hostname, then controller id."""
    return record.name or record.hostname or record.record_id


def generate_unique_id(record_id: str) -> str:
    """Stable unique id derived from the controller record id."""
    return str(uuid.uuid5(_UNIQUE_ID_NAMESPACE, record_id))
