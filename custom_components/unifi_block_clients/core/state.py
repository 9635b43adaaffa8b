"""State containers for UniFi Block Clients.

Holds the resolved configuration, the readiness gate and the persisted
context of every exposed switch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from ..const import (
    CONF_CLIENTS,
    CONF_CONTROLLER_URL,
    CONF_DEBUG_LOGGING,
    CONF_PASSWORD,
    CONF_POLLING_FREQUENCY,
    CONF_SITE_NAME,
    CONF_USERNAME,
    CONF_VERIFY_SSL,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_POLLING_FREQUENCY,
    DEFAULT_SITE_NAME,
    DEFAULT_VERIFY_SSL,
    REQUIRED_CONFIG,
)
from ..domain import ClientReconciler
from ..exceptions import ConfigurationError

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry


class ReadinessState(str, Enum):
    """Authentication readiness of the controller session."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    READY = "ready"


@dataclass
class BlockClientsConfig:
    """Resolved configuration (options override data)."""

    username: str
    password: str
    controller_url: str
    site_name: str = DEFAULT_SITE_NAME
    polling_frequency: int = DEFAULT_POLLING_FREQUENCY
    clients: list[str] = field(default_factory=list)
    verify_ssl: bool = DEFAULT_VERIFY_SSL
    debug_logging: bool = DEFAULT_DEBUG_LOGGING

    @classmethod
    def from_mapping(cls, config: dict[str, Any]) -> BlockClientsConfig:
        """Build from a flat mapping.

        Raises:
            ConfigurationError: a required field is missing or empty
        """
        for key in REQUIRED_CONFIG:
            if not config.get(key):
                raise ConfigurationError(key)

        return cls(
            username=config[CONF_USERNAME],
            password=config[CONF_PASSWORD],
            controller_url=config[CONF_CONTROLLER_URL].rstrip("/"),
            site_name=config.get(CONF_SITE_NAME) or DEFAULT_SITE_NAME,
            polling_frequency=int(
                config.get(CONF_POLLING_FREQUENCY, DEFAULT_POLLING_FREQUENCY)
            ),
            clients=ClientReconciler.normalize(config.get(CONF_CLIENTS) or []),
            verify_ssl=config.get(CONF_VERIFY_SSL, DEFAULT_VERIFY_SSL),
            debug_logging=config.get(CONF_DEBUG_LOGGING, DEFAULT_DEBUG_LOGGING),
        )

    @classmethod
    def from_entry(cls, entry: ConfigEntry) -> BlockClientsConfig:
        """Build from a config entry."""
        return cls.from_mapping({**entry.data, **entry.options})


@dataclass
class ClientContext:
    """Persisted identity of one exposed switch."""

    unique_id: str
    identifier: str
    controller_record_id: str
    display_name: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for storage."""
        return {
            "unique_id": self.unique_id,
            "identifier": self.identifier,
            "controller_record_id": self.controller_record_id,
            "display_name": self.display_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientContext:
        """Restore from storage."""
        return cls(
            unique_id=data["unique_id"],
            identifier=data["identifier"],
            controller_record_id=data["controller_record_id"],
            display_name=data["display_name"],
        )


@dataclass
class BlockClientsState:
    """Runtime state of a config entry."""

    readiness: ReadinessState = ReadinessState.UNAUTHENTICATED
    last_poll: datetime | None = None
    last_error: str | None = None
    reconciled: bool = False

    @property
    def is_ready(self) -> bool:
        """Check if the controller session is authenticated."""
        return self.readiness is ReadinessState.READY

    def to_dict(self) -> dict[str, Any]:
        """Export state as dictionary."""
        return {
            "readiness": self.readiness.value,
            "last_poll": self.last_poll.isoformat() if self.last_poll else None,
            "last_error": self.last_error,
            "reconciled": self.reconciled,
        }
