"""Test the reconciliation engine and the entity state adapter."""
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from homeassistant.core import HomeAssistant

from custom_components.unifi_block_clients.const import DOMAIN
from custom_components.unifi_block_clients.coordinator import BlockClientsCoordinator
from custom_components.unifi_block_clients.core import ClientContext, ReadinessState
from custom_components.unifi_block_clients.domain import generate_unique_id
from custom_components.unifi_block_clients.entities import ClientBlockSwitch
from custom_components.unifi_block_clients.exceptions import UnifiApiError, UnifiAuthError
from custom_components.unifi_block_clients.models import ClientRecord

from .conftest import LAPTOP, MOCK_CONFIG, PHONE


def _controller() -> MagicMock:
    controller = MagicMock()
    controller.async_authenticate = AsyncMock()
    controller.async_get_known_clients = AsyncMock(return_value=[LAPTOP, PHONE])
    controller.async_get_client_block_status = AsyncMock(return_value=False)
    controller.async_block_client = AsyncMock()
    controller.async_unblock_client = AsyncMock()
    return controller


def _coordinator(
    hass: HomeAssistant, clients: list[str], controller: MagicMock | None = None
) -> BlockClientsCoordinator:
    entry = MockConfigEntry(domain=DOMAIN, data={**MOCK_CONFIG, "clients": clients})
    coordinator = BlockClientsCoordinator(
        hass, entry, controller or _controller(), MagicMock()
    )
    return coordinator


def _switch(mac: str, record_id: str, name: str = "Client") -> ClientBlockSwitch:
    return ClientBlockSwitch(
        "test_entry_id",
        ClientContext(
            unique_id=generate_unique_id(record_id),
            identifier=mac,
            controller_record_id=record_id,
            display_name=name,
        ),
    )


@pytest.fixture
async def coordinator(hass: HomeAssistant):
    """Coordinator for one configured client, polling stopped on teardown."""
    coordinator = _coordinator(hass, ["aa:bb:cc"])
    yield coordinator
    coordinator.async_unload()


class TestReconciliation:
    """Reconciliation once the platform has restored its switches."""

    @pytest.mark.asyncio
    async def test_adds_missing_client(self, hass: HomeAssistant, coordinator):
        """A configured client with no switch gets one named after its alias."""
        await coordinator.async_on_ready()

        assert coordinator.state.readiness is ReadinessState.READY
        assert coordinator.state.reconciled
        assert [e.identifier for e in coordinator.entities] == ["aa:bb:cc"]
        entity = coordinator.entities[0]
        assert entity.display_name == "Laptop"
        assert entity.controller_record_id == "rec-laptop"
        assert entity.unique_id == generate_unique_id("rec-laptop")
        coordinator.registry.async_register.assert_called_once_with(entity)

    @pytest.mark.asyncio
    async def test_removes_stale_client(self, hass: HomeAssistant, coordinator):
        """A restored switch for an unconfigured client is removed, the rest stay."""
        kept = _switch("aa:bb:cc", "rec-laptop", "Laptop")
        stale = _switch("zz:zz:zz", "rec-old")
        coordinator.on_entity_restored(kept)
        coordinator.on_entity_restored(stale)

        await coordinator.async_on_ready()
        await hass.async_block_till_done()

        assert coordinator.entities == [kept]
        coordinator.registry.async_unregister.assert_called_once_with(stale)
        coordinator.registry.async_expose.assert_called_once_with([kept])
        coordinator.controller.async_get_known_clients.assert_not_called()

    @pytest.mark.asyncio
    async def test_removal_happens_even_if_auth_fails(self, hass: HomeAssistant):
        """Stale switches go before authentication resolves."""
        controller = _controller()
        order: list[str] = []

        async def _authenticate() -> None:
            order.append("auth")
            raise UnifiAuthError("authenticate", "refused")

        controller.async_authenticate.side_effect = _authenticate
        coordinator = _coordinator(hass, ["aa:bb:cc"], controller)
        coordinator.registry.async_unregister.side_effect = lambda entity: order.append(
            f"remove {entity.identifier}"
        )
        coordinator.on_entity_restored(_switch("zz:zz:zz", "rec-old"))

        await coordinator.async_on_ready()
        await hass.async_block_till_done()

        assert order == ["remove zz:zz:zz", "auth"]
        assert coordinator.entities == []
        assert coordinator.state.readiness is ReadinessState.UNAUTHENTICATED
        assert coordinator.state.last_error
        assert not coordinator.state.reconciled
        controller.async_get_known_clients.assert_not_called()
        coordinator.registry.async_register.assert_not_called()
        assert coordinator._listeners == []

    @pytest.mark.asyncio
    async def test_noop_when_in_sync(self, hass: HomeAssistant, coordinator):
        """No add and no remove when switches match the configuration."""
        coordinator.on_entity_restored(_switch("aa:bb:cc", "rec-laptop", "Laptop"))

        await coordinator.async_on_ready()

        coordinator.registry.async_unregister.assert_not_called()
        coordinator.registry.async_register.assert_not_called()
        coordinator.controller.async_get_known_clients.assert_not_called()
        assert coordinator.state.reconciled

    @pytest.mark.asyncio
    async def test_unknown_client_skipped(self, hass: HomeAssistant):
        """Clients the controller does not know are not exposed."""
        coordinator = _coordinator(hass, ["11:22:33", "dd:ee:ff"])

        await coordinator.async_on_ready()

        assert [e.identifier for e in coordinator.entities] == ["dd:ee:ff"]
        assert coordinator.entities[0].display_name == "phone-host"
        coordinator.async_unload()

    @pytest.mark.asyncio
    async def test_known_client_fetch_failure_aborts_add(self, hass: HomeAssistant):
        """A failed client listing adds nothing but keeps the session ready."""
        controller = _controller()
        controller.async_get_known_clients.side_effect = UnifiApiError(
            "get_known_clients", "timeout"
        )
        coordinator = _coordinator(hass, ["aa:bb:cc"], controller)

        await coordinator.async_on_ready()

        assert coordinator.entities == []
        assert coordinator.is_ready
        assert "timeout" in coordinator.state.last_error
        coordinator.async_unload()

    @pytest.mark.asyncio
    async def test_on_ready_runs_once(self, hass: HomeAssistant, coordinator):
        """A second readiness signal is ignored."""
        await coordinator.async_on_ready()
        await coordinator.async_on_ready()

        coordinator.controller.async_authenticate.assert_awaited_once()
        assert len(coordinator.entities) == 1

    @pytest.mark.asyncio
    async def test_unload_during_authentication(self, hass: HomeAssistant, coordinator):
        """An entry unloaded mid-login never starts polling."""

        async def _authenticate() -> None:
            coordinator.async_unload()

        coordinator.controller.async_authenticate.side_effect = _authenticate

        await coordinator.async_on_ready()

        assert not coordinator.is_ready
        assert coordinator._listeners == []
        coordinator.controller.async_get_known_clients.assert_not_called()

    @pytest.mark.asyncio
    async def test_initial_state_from_listing(self, hass: HomeAssistant):
        """A new switch starts with the blocked flag from the listing."""
        controller = _controller()
        controller.async_get_known_clients.return_value = [
            ClientRecord(record_id="r1", mac="aa:bb:cc", name="Laptop", blocked=True)
        ]
        coordinator = _coordinator(hass, ["aa:bb:cc"], controller)

        await coordinator.async_on_ready()

        assert coordinator.entities[0].is_on is True
        coordinator.async_unload()


class TestGate:
    """Operations requested before authentication are rejected."""

    @pytest.mark.asyncio
    async def test_operations_fail_before_ready(self, hass: HomeAssistant, coordinator):
        """Every remote operation returns the failure sentinel."""
        entity = _switch("aa:bb:cc", "rec-laptop")

        assert await coordinator.async_refresh(entity) is False
        assert await coordinator.async_toggle(entity, True) is False
        assert await coordinator.async_add_client(LAPTOP) is False
        assert await coordinator.async_remove_client(entity) is False
        assert await coordinator.async_poll() is False
        assert coordinator.async_update_reachability(False) is False

        coordinator.controller.async_get_client_block_status.assert_not_called()
        coordinator.controller.async_block_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_operations_fail_while_authenticating(self, hass: HomeAssistant, coordinator):
        """The gate stays closed until authentication completes."""
        coordinator.state.readiness = ReadinessState.AUTHENTICATING
        entity = _switch("aa:bb:cc", "rec-laptop")

        assert await coordinator.async_refresh(entity) is False
        assert await coordinator.async_toggle(entity, False) is False

    @pytest.mark.asyncio
    async def test_refresh_rejection_logged(self, hass: HomeAssistant, coordinator, caplog):
        """A refresh before authentication leaves a warning in the log."""
        entity = _switch("aa:bb:cc", "rec-laptop")

        with caplog.at_level(logging.WARNING):
            assert await coordinator.async_refresh(entity) is False

        assert "REFRESH_REJECTED_NOT_READY | client=aa:bb:cc" in caplog.text

    @pytest.mark.asyncio
    async def test_unload_closes_gate(self, hass: HomeAssistant, coordinator):
        """After unload nothing reaches the controller."""
        await coordinator.async_on_ready()
        coordinator.async_unload()

        assert not coordinator.is_ready
        assert coordinator._listeners == []
        assert await coordinator.async_poll() is False


class TestEntityState:
    """Refresh and toggle handlers."""

    @pytest.mark.asyncio
    async def test_refresh_is_idempotent(self, hass: HomeAssistant, coordinator):
        """Refreshing twice with no remote change keeps the state."""
        await coordinator.async_on_ready()
        entity = coordinator.entities[0]
        coordinator.controller.async_get_client_block_status.return_value = True

        assert await coordinator.async_refresh(entity)
        assert entity.is_on is True
        assert await coordinator.async_refresh(entity)
        assert entity.is_on is True
        coordinator.controller.async_get_client_block_status.assert_awaited_with("rec-laptop")

    @pytest.mark.asyncio
    async def test_toggle_then_refresh(self, hass: HomeAssistant, coordinator):
        """Blocking then refreshing reports the client blocked."""
        await coordinator.async_on_ready()
        entity = coordinator.entities[0]

        assert await coordinator.async_toggle(entity, True)
        coordinator.controller.async_block_client.assert_awaited_once_with("aa:bb:cc")

        coordinator.controller.async_get_client_block_status.return_value = True
        await coordinator.async_refresh(entity)
        assert entity.is_on is True

        assert await coordinator.async_toggle(entity, False)
        coordinator.controller.async_unblock_client.assert_awaited_once_with("aa:bb:cc")

    @pytest.mark.asyncio
    async def test_toggle_error_propagates(self, hass: HomeAssistant, coordinator):
        """A failed block command reaches the caller."""
        await coordinator.async_on_ready()
        entity = coordinator.entities[0]
        coordinator.controller.async_block_client.side_effect = UnifiApiError(
            "block_client", "timeout"
        )

        with pytest.raises(UnifiApiError):
            await coordinator.async_toggle(entity, True)

    @pytest.mark.asyncio
    async def test_refresh_error_marks_unreachable(self, hass: HomeAssistant, coordinator):
        """A failed status read leaves the state and marks the switch unreachable."""
        await coordinator.async_on_ready()
        entity = coordinator.entities[0]
        coordinator.controller.async_get_client_block_status.side_effect = UnifiApiError(
            "get_client_block_status", "timeout"
        )

        with pytest.raises(UnifiApiError):
            await coordinator.async_refresh(entity)
        assert entity.is_on is False
        assert not entity.reachable

        coordinator.controller.async_get_client_block_status.side_effect = None
        await coordinator.async_refresh(entity)
        assert entity.reachable

    @pytest.mark.asyncio
    async def test_reachability_update(self, hass: HomeAssistant, coordinator):
        """Reachability is applied to every switch."""
        await coordinator.async_on_ready()

        assert coordinator.async_update_reachability(False)
        assert all(not entity.reachable for entity in coordinator.entities)

    @pytest.mark.asyncio
    async def test_remove_client(self, hass: HomeAssistant, coordinator):
        """Removing a switch on request unregisters it."""
        await coordinator.async_on_ready()
        entity = coordinator.entities[0]

        assert await coordinator.async_remove_client(entity)
        await hass.async_block_till_done()

        assert coordinator.entities == []
        coordinator.registry.async_unregister.assert_called_once_with(entity)


class TestPolling:
    """Recurring refresh of every switch."""

    @pytest.mark.asyncio
    async def test_poll_refreshes_each_switch_once(self, hass: HomeAssistant):
        """One poll refreshes every exposed switch exactly once."""
        coordinator = _coordinator(hass, ["aa:bb:cc", "dd:ee:ff"])
        await coordinator.async_on_ready()
        status = coordinator.controller.async_get_client_block_status
        status.reset_mock()

        assert await coordinator.async_poll()

        assert sorted(call.args[0] for call in status.await_args_list) == [
            "rec-laptop",
            "rec-phone",
        ]
        assert coordinator.state.last_poll is not None
        coordinator.async_unload()

    @pytest.mark.asyncio
    async def test_poll_isolates_failures(self, hass: HomeAssistant):
        """One failing refresh does not stop the others."""
        coordinator = _coordinator(hass, ["aa:bb:cc", "dd:ee:ff"])
        await coordinator.async_on_ready()

        async def _status(record_id: str) -> bool:
            if record_id == "rec-laptop":
                raise UnifiApiError("get_client_block_status", "timeout")
            return True

        coordinator.controller.async_get_client_block_status.side_effect = _status

        assert await coordinator.async_poll()

        laptop, phone = coordinator.entities
        assert not laptop.reachable
        assert phone.is_on is True
        coordinator.async_unload()

    @pytest.mark.asyncio
    async def test_poll_uses_snapshot(self, hass: HomeAssistant):
        """A switch removed during a tick is not visited twice or skipped."""
        coordinator = _coordinator(hass, ["aa:bb:cc", "dd:ee:ff"])
        await coordinator.async_on_ready()
        laptop, phone = coordinator.entities

        async def _status(record_id: str) -> bool:
            if record_id == "rec-laptop":
                coordinator._remove_entity(laptop)
            return False

        coordinator.controller.async_get_client_block_status.side_effect = _status
        coordinator.controller.async_get_client_block_status.reset_mock()

        await coordinator.async_poll()
        await hass.async_block_till_done()

        assert coordinator.controller.async_get_client_block_status.await_count == 2
        assert coordinator.entities == [phone]
        coordinator.async_unload()
