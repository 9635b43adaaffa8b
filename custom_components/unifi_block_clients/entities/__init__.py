"""Entities module - HA entity definitions.

Client switches are thin wrappers: the coordinator binds their handlers.
Diagnostic binary sensors are built from definitions.
"""

from .binary_sensors import BINARY_SENSOR_DEFINITIONS, async_setup_binary_sensors
from .switches import ClientBlockSwitch

__all__ = [
    "BINARY_SENSOR_DEFINITIONS",
    "ClientBlockSwitch",
    "async_setup_binary_sensors",
]
