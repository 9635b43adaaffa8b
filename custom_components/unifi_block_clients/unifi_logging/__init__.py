"""Unified logging module for UniFi Block Clients."""

from .unified_logger import UnifiBlockLogger, get_logger

__all__ = ["UnifiBlockLogger", "get_logger"]
