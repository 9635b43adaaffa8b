"""Data models for UniFi Block Clients."""

from .data_models import ClientRecord

__all__ = ["ClientRecord"]
