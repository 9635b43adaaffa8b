"""Exceptions for UniFi Block Clients."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class BlockClientsError(HomeAssistantError):
    """Base error for the integration."""


class ConfigurationError(BlockClientsError):
    """A required configuration value is missing."""

    def __init__(self, field: str) -> None:
        """Initialize with the name of the missing field."""
        super().__init__(f"{field} is required")
        self.field = field


class UnifiApiError(BlockClientsError):
    """A call to the UniFi controller failed."""

    def __init__(self, action: str, message: str) -> None:
        """Initialize with the failed action."""
        super().__init__(f"{action} failed: {message}")
        self.action = action


class UnifiAuthError(UnifiApiError):
    """The controller refused the credentials."""
