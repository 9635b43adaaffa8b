"""Core module for UniFi Block Clients.

Contains the fundamental building blocks:
- State: configuration, readiness gate and switch contexts
- Events: event bus for component communication
- Controller: client for the UniFi controller API
- Registry: durable side of the exposed switches
"""

from .controller import UnifiController
from .events import ClientEvent, ClientEventBus
from .registry import ClientEntityRegistry
from .state import (
    BlockClientsConfig,
    BlockClientsState,
    ClientContext,
    ReadinessState,
)

__all__ = [
    "BlockClientsConfig",
    "BlockClientsState",
    "ClientContext",
    "ClientEntityRegistry",
    "ClientEvent",
    "ClientEventBus",
    "ReadinessState",
    "UnifiController",
]
