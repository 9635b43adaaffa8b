"""Tests for the UniFi Block Clients integration."""
