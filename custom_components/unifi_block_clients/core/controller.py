"""UniFi controller client - single point of access for the remote API.

Wraps the controller REST endpoints the integration depends on:
- Session login
- Known client listing
- Per-client block status
- Block / unblock commands

The session cookie lives in the aiohttp cookie jar. Every failure is
raised as UnifiApiError (UnifiAuthError for refused credentials); nothing
is retried here.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from ..const import (
    API_CLIENT,
    API_KNOWN_CLIENTS,
    API_LOGIN,
    API_STATION_MANAGER,
    CMD_BLOCK,
    CMD_UNBLOCK,
    REQUEST_TIMEOUT_SECONDS,
)
from ..exceptions import UnifiApiError, UnifiAuthError
from ..models import ClientRecord

_LOGGER = logging.getLogger(__name__)


class UnifiController:
    """Client for one site of a UniFi network controller."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        controller_url: str,
        username: str,
        password: str,
        site_name: str = "default",
    ) -> None:
        """Initialize the controller client.

        Args:
            session: aiohttp session (its cookie jar keeps the login)
            controller_url: Base URL, e.g. https://192.168.1.2:8443
            username: Controller account
            password: Controller password
            site_name: Site to operate on
        """
        self._session = session
        self.controller_url = controller_url.rstrip("/")
        self._username = username
        self._password = password
        self.site_name = site_name
        self.authenticated = False

    def _url(self, path: str, **kwargs: str) -> str:
        """Build a full URL for an API path."""
        return self.controller_url + path.format(site=self.site_name, **kwargs)

    async def _request(
        self,
        action: str,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
        **path_args: str,
    ) -> list[dict[str, Any]]:
        """Perform one API call and return its ``data`` list."""
        url = self._url(path, **path_args)
        _LOGGER.debug("%s %s (%s)", method, url, action)

        try:
            async with asyncio.timeout(REQUEST_TIMEOUT_SECONDS):
                async with self._session.request(method, url, json=payload) as response:
                    if response.status == 401:
                        self.authenticated = False
                        raise UnifiAuthError(action, "unauthorized")
                    if response.status >= 400:
                        raise UnifiApiError(action, f"HTTP {response.status}")
                    body = await response.json(content_type=None)
        except TimeoutError as ex:
            raise UnifiApiError(action, "timeout") from ex
        except aiohttp.ClientError as ex:
            raise UnifiApiError(action, str(ex) or type(ex).__name__) from ex
        except ValueError as ex:
            raise UnifiApiError(action, "invalid response") from ex

        if not isinstance(body, dict):
            raise UnifiApiError(action, "invalid response")

        meta = body.get("meta") or {}
        if meta.get("rc") != "ok":
            message = meta.get("msg", "unknown error")
            if action == "authenticate":
                raise UnifiAuthError(action, message)
            raise UnifiApiError(action, message)

        return body.get("data") or []

    async def async_authenticate(self) -> None:
        """Log in and keep the session cookie."""
        await self._request(
            "authenticate",
            "POST",
            API_LOGIN,
            {"username": self._username, "password": self._password},
        )
        self.authenticated = True
        _LOGGER.debug("Authenticated against %s", self.controller_url)

    async def async_get_known_clients(self) -> list[ClientRecord]:
        """Return every client the controller has ever seen on this site."""
        data = await self._request("get_known_clients", "GET", API_KNOWN_CLIENTS)
        records = []
        for item in data:
            try:
                records.append(ClientRecord.from_api(item))
            except (KeyError, AttributeError):
                _LOGGER.debug("Skipping malformed client entry: %s", item)
        return records

    async def async_get_client_block_status(self, record_id: str) -> bool:
        """Return True if the client with this controller id is blocked."""
        data = await self._request(
            "get_client_block_status", "GET", API_CLIENT, record_id=record_id
        )
        if not data:
            raise UnifiApiError("get_client_block_status", f"unknown client {record_id}")
        if not isinstance(data[0], dict):
            raise UnifiApiError("get_client_block_status", "invalid response")
        return bool(data[0].get("blocked", False))

    async def async_block_client(self, mac: str) -> None:
        """Block a client by MAC address."""
        await self._request(
            "block_client", "POST", API_STATION_MANAGER, {"cmd": CMD_BLOCK, "mac": mac}
        )

    async def async_unblock_client(self, mac: str) -> None:
        """Unblock a client by MAC address."""
        await self._request(
            "unblock_client", "POST", API_STATION_MANAGER, {"cmd": CMD_UNBLOCK, "mac": mac}
        )
