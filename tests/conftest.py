"""Fixtures for testing."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from homeassistant.config_entries import ConfigEntryState
from homeassistant.core import HomeAssistant

from custom_components.unifi_block_clients.const import (
    CONF_CLIENTS,
    CONF_CONTROLLER_URL,
    CONF_PASSWORD,
    CONF_POLLING_FREQUENCY,
    CONF_SITE_NAME,
    CONF_USERNAME,
    CONF_VERIFY_SSL,
    DOMAIN,
    STORAGE_KEY,
    STORAGE_VERSION,
)
from custom_components.unifi_block_clients.models import ClientRecord

CONTROLLER_URL = "https://unifi.local:8443"
ENTRY_ID = "test_entry_id"

MOCK_CONFIG = {
    CONF_CONTROLLER_URL: CONTROLLER_URL,
    CONF_USERNAME: "admin",
    CONF_PASSWORD: "secret",
    CONF_SITE_NAME: "default",
    CONF_CLIENTS: ["aa:bb:cc"],
    CONF_POLLING_FREQUENCY: 5000,
    CONF_VERIFY_SSL: False,
}

LAPTOP = ClientRecord(record_id="rec-laptop", mac="aa:bb:cc", name="Laptop")
PHONE = ClientRecord(record_id="rec-phone", mac="dd:ee:ff", hostname="phone-host")


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations):
    """Enable custom integrations defined in the test dir."""
    yield


@pytest.fixture
def mock_config_entry(hass: HomeAssistant) -> MockConfigEntry:
    """Config entry for one controller site."""
    entry = MockConfigEntry(
        domain=DOMAIN,
        data=dict(MOCK_CONFIG),
        entry_id=ENTRY_ID,
        unique_id=f"{CONTROLLER_URL}|default",
        title="UniFi Block Clients (default)",
    )
    entry.add_to_hass(hass)
    return entry


@pytest.fixture
def mock_controller():
    """Controller double used by the integration setup."""
    controller = MagicMock()
    controller.controller_url = CONTROLLER_URL
    controller.site_name = "default"
    controller.authenticated = True
    controller.async_authenticate = AsyncMock()
    controller.async_get_known_clients = AsyncMock(return_value=[LAPTOP, PHONE])
    controller.async_get_client_block_status = AsyncMock(return_value=False)
    controller.async_block_client = AsyncMock()
    controller.async_unblock_client = AsyncMock()

    with patch(
        "custom_components.unifi_block_clients.UnifiController",
        return_value=controller,
    ):
        yield controller


@pytest.fixture
def stored_contexts(hass_storage):
    """Write switch contexts as if left over from a previous run."""

    def _store(*contexts: dict, entry_id: str = ENTRY_ID) -> None:
        hass_storage[f"{STORAGE_KEY}.{entry_id}"] = {
            "version": STORAGE_VERSION,
            "minor_version": 1,
            "key": f"{STORAGE_KEY}.{entry_id}",
            "data": {"clients": list(contexts)},
        }

    return _store


@pytest.fixture
async def setup_integration(
    hass: HomeAssistant, mock_config_entry: MockConfigEntry, mock_controller
):
    """Set up the integration with a mocked controller."""
    await hass.config_entries.async_setup(mock_config_entry.entry_id)
    await hass.async_block_till_done()

    yield mock_config_entry

    if mock_config_entry.state is ConfigEntryState.LOADED:
        await hass.config_entries.async_unload(mock_config_entry.entry_id)
        await hass.async_block_till_done()
