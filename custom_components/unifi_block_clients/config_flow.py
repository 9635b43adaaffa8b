"""Config flow for UniFi Block Clients integration."""
from __future__ import annotations

import logging
from typing import Any

import aiohttp
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector
from homeassistant.helpers.aiohttp_client import async_create_clientsession

from .const import (
    CONF_CLIENTS,
    CONF_CONTROLLER_URL,
    CONF_DEBUG_LOGGING,
    CONF_PASSWORD,
    CONF_POLLING_FREQUENCY,
    CONF_SITE_NAME,
    CONF_USERNAME,
    CONF_VERIFY_SSL,
    DEFAULT_DEBUG_LOGGING,
    DEFAULT_NAME,
    DEFAULT_POLLING_FREQUENCY,
    DEFAULT_SITE_NAME,
    DEFAULT_VERIFY_SSL,
    DOMAIN,
    MIN_POLLING_FREQUENCY,
)
from .core.controller import UnifiController
from .domain import ClientReconciler
from .exceptions import UnifiApiError, UnifiAuthError

_LOGGER = logging.getLogger(__name__)


def _polling_selector() -> selector.NumberSelector:
    return selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=MIN_POLLING_FREQUENCY,
            max=600000,
            step=500,
            unit_of_measurement="ms",
            mode=selector.NumberSelectorMode.BOX,
        )
    )


def _clients_selector() -> selector.TextSelector:
    return selector.TextSelector(
        selector.TextSelectorConfig(type=selector.TextSelectorType.TEXT, multiple=True)
    )


class ConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for UniFi Block Clients."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the config flow."""
        self.controller_info: dict[str, Any] = {}

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Step 1: Controller connection."""
        errors: dict[str, str] = {}

        if user_input is not None:
            url = user_input[CONF_CONTROLLER_URL].rstrip("/")
            site = user_input.get(CONF_SITE_NAME) or DEFAULT_SITE_NAME

            await self.async_set_unique_id(f"{url}|{site}")
            self._abort_if_unique_id_configured()

            session = async_create_clientsession(
                self.hass,
                verify_ssl=user_input.get(CONF_VERIFY_SSL, DEFAULT_VERIFY_SSL),
                cookie_jar=aiohttp.CookieJar(unsafe=True),
                auto_cleanup=False,
            )
            controller = UnifiController(
                session,
                url,
                user_input[CONF_USERNAME],
                user_input[CONF_PASSWORD],
                site,
            )
            # The entry opens its own session; this one only checks the login
            try:
                await controller.async_authenticate()
            except UnifiAuthError:
                errors["base"] = "invalid_auth"
            except UnifiApiError as ex:
                _LOGGER.debug("Controller %s not reachable: %s", url, ex)
                errors["base"] = "cannot_connect"
            finally:
                await session.close()

            if not errors:
                self.controller_info = {
                    **user_input,
                    CONF_CONTROLLER_URL: url,
                    CONF_SITE_NAME: site,
                }
                return await self.async_step_clients()

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_CONTROLLER_URL): selector.TextSelector(
                        selector.TextSelectorConfig(type=selector.TextSelectorType.URL)
                    ),
                    vol.Required(CONF_USERNAME): selector.TextSelector(),
                    vol.Required(CONF_PASSWORD): selector.TextSelector(
                        selector.TextSelectorConfig(
                            type=selector.TextSelectorType.PASSWORD
                        )
                    ),
                    vol.Required(
                        CONF_SITE_NAME, default=DEFAULT_SITE_NAME
                    ): selector.TextSelector(),
                    vol.Required(
                        CONF_VERIFY_SSL, default=DEFAULT_VERIFY_SSL
                    ): selector.BooleanSelector(),
                }
            ),
            errors=errors,
        )

    async def async_step_clients(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Step 2: Clients to expose and polling frequency."""
        if user_input is not None:
            data = {
                **self.controller_info,
                CONF_CLIENTS: ClientReconciler.normalize(user_input.get(CONF_CLIENTS, [])),
                CONF_POLLING_FREQUENCY: int(user_input[CONF_POLLING_FREQUENCY]),
            }
            return self.async_create_entry(
                title=f"{DEFAULT_NAME} ({data[CONF_SITE_NAME]})", data=data
            )

        return self.async_show_form(
            step_id="clients",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_CLIENTS, default=[]): _clients_selector(),
                    vol.Required(
                        CONF_POLLING_FREQUENCY, default=DEFAULT_POLLING_FREQUENCY
                    ): _polling_selector(),
                }
            ),
        )

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        """Create the options flow."""
        return OptionsFlowHandler(config_entry)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options flow for UniFi Block Clients."""

    def __init__(self, config_entry: config_entries.ConfigEntry) -> None:
        """Initialize options flow."""
        self._config_entry = config_entry

    def _get_value(self, key: str, default: Any) -> Any:
        """Get value from options or data with fallback to default."""
        return self._config_entry.options.get(
            key,
            self._config_entry.data.get(key, default)
        )

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Manage the options."""
        if user_input is not None:
            return self.async_create_entry(
                title="",
                data={
                    CONF_CLIENTS: ClientReconciler.normalize(
                        user_input.get(CONF_CLIENTS, [])
                    ),
                    CONF_POLLING_FREQUENCY: int(user_input[CONF_POLLING_FREQUENCY]),
                    CONF_DEBUG_LOGGING: user_input.get(
                        CONF_DEBUG_LOGGING, DEFAULT_DEBUG_LOGGING
                    ),
                },
            )

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_CLIENTS,
                        default=self._get_value(CONF_CLIENTS, []),
                    ): _clients_selector(),
                    vol.Required(
                        CONF_POLLING_FREQUENCY,
                        default=self._get_value(
                            CONF_POLLING_FREQUENCY, DEFAULT_POLLING_FREQUENCY
                        ),
                    ): _polling_selector(),
                    vol.Required(
                        CONF_DEBUG_LOGGING,
                        default=self._get_value(
                            CONF_DEBUG_LOGGING, DEFAULT_DEBUG_LOGGING
                        ),
                    ): selector.BooleanSelector(),
                }
            ),
        )
