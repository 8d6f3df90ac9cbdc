"""Tests for RegistrationCoordinator in core/registration.py

Discovery and the bridge are mocked; the config store is a real store in a
temporary directory.
"""

from unittest.mock import MagicMock

import pytest
import requests

from core.errors import (
    AlreadyRegistered,
    BridgeNotFound,
    NoBridgeFound,
    NotConfigured,
    RegistrationRejected,
)
from core.registration import RegistrationCoordinator
from models.types import ApplicationRecord, BridgeRecord


@pytest.fixture
def discoverer():
    discoverer = MagicMock()
    discoverer.discover.return_value = {'U1': 'http://10.0.0.5/api'}
    return discoverer


@pytest.fixture
def session():
    session = MagicMock()
    session.request.return_value.json.return_value = [{'success': {'username': 'abc123'}}]
    return session


@pytest.fixture
def coordinator(store, discoverer, session):
    return RegistrationCoordinator(store, discoverer, session=session, logger=MagicMock())


class TestRegisterDefault:
    """Registering the default application."""

    def test_end_to_end(self, coordinator, store, session):
        """Discovered bridge is persisted, registered with and stored as default."""
        handle = coordinator.register_default()

        assert store.find_bridge('U1') == BridgeRecord('U1', 'http://10.0.0.5/api')
        args, kwargs = session.request.call_args
        assert args == ('POST', 'http://10.0.0.5/api')
        assert kwargs['json'] == {'devicetype': 'hue-lib'}
        assert store.default_application() == ApplicationRecord('U1', 'abc123')
        assert handle.base_uri == 'http://10.0.0.5/api'
        assert handle.application_id == 'abc123'

    def test_second_call_rejected_without_network(self, coordinator, discoverer, session):
        coordinator.register_default()

        with pytest.raises(AlreadyRegistered):
            coordinator.register_default()

        assert discoverer.discover.call_count == 1
        assert session.request.call_count == 1

    def test_no_bridge_found(self, coordinator, discoverer, store):
        discoverer.discover.return_value = {}

        with pytest.raises(NoBridgeFound):
            coordinator.register_default()

        assert store.find_default_application() is None

    def test_persists_every_discovered_bridge(self, coordinator, discoverer, store, session):
        """All bridges are cached; the first one discovered is registered with."""
        discoverer.discover.return_value = {
            'U1': 'http://10.0.0.5/api',
            'U2': 'http://10.0.0.6/api',
        }

        coordinator.register_default()

        assert [b.id for b in store.bridges()] == ['U1', 'U2']
        assert session.request.call_args[0][1] == 'http://10.0.0.5/api'
        assert store.default_application().bridge_id == 'U1'

    def test_rejected_registration_not_persisted(self, coordinator, session, store):
        session.request.return_value.json.return_value = [{'error': {
            'type': 101, 'address': '', 'description': 'link button not pressed'}}]

        with pytest.raises(RegistrationRejected):
            coordinator.register_default()

        assert store.find_default_application() is None
        assert store.find_bridge('U1') is not None


class TestResolveDefault:
    """Building a handle from stored config."""

    def test_not_configured(self, coordinator, discoverer):
        with pytest.raises(NotConfigured):
            coordinator.resolve_default()
        discoverer.discover.assert_not_called()

    def test_uses_stored_bridge(self, coordinator, store, discoverer):
        store.write_bridge(BridgeRecord('U1', 'http://10.0.0.9/api'))
        store.write_application(ApplicationRecord('U1', 'abc123'))

        handle = coordinator.resolve_default()

        assert handle.base_uri == 'http://10.0.0.9/api'
        assert handle.application_id == 'abc123'
        discoverer.discover.assert_not_called()

    def test_rediscovers_missing_bridge(self, coordinator, store, discoverer):
        store.write_application(ApplicationRecord('U1', 'abc123'))

        handle = coordinator.resolve_default()

        assert handle.base_uri == 'http://10.0.0.5/api'
        discoverer.discover.assert_called_once()
        assert store.find_bridge('U1') is not None

    def test_bridge_not_found(self, coordinator, store, discoverer):
        store.write_application(ApplicationRecord('U9', 'abc123'))

        with pytest.raises(BridgeNotFound):
            coordinator.resolve_default()

    def test_bridge_not_found_when_discovery_empty(self, coordinator, store, discoverer):
        store.write_application(ApplicationRecord('U1', 'abc123'))
        discoverer.discover.return_value = {}

        with pytest.raises(BridgeNotFound):
            coordinator.resolve_default()


class TestRemoveDefault:
    """Removing the default application."""

    def test_unregisters_and_deletes(self, coordinator, session):
        coordinator.register_default()
        session.request.return_value.json.return_value = [
            {'success': '/config/whitelist/abc123 deleted'}]

        assert coordinator.remove_default() is True

        args, _ = session.request.call_args
        assert args == ('DELETE', 'http://10.0.0.5/api/abc123/config/whitelist/abc123')
        with pytest.raises(NotConfigured):
            coordinator.resolve_default()

    def test_deletes_even_if_unregister_fails(self, coordinator, session):
        """Local config is removed even when the bridge cannot be reached."""
        coordinator.register_default()
        session.request.side_effect = requests.exceptions.ConnectionError('unreachable')

        assert coordinator.remove_default() is False

        with pytest.raises(NotConfigured):
            coordinator.resolve_default()

    def test_deletes_even_if_bridge_rejects(self, coordinator, session):
        coordinator.register_default()
        session.request.return_value.json.return_value = [{'error': {
            'type': 1, 'address': '/config/whitelist/abc123', 'description': 'unauthorized user'}}]

        assert coordinator.remove_default() is False
        with pytest.raises(NotConfigured):
            coordinator.resolve_default()

    def test_register_again_after_remove(self, coordinator, session):
        coordinator.register_default()
        coordinator.remove_default()
        session.request.return_value.json.return_value = [{'success': {'username': 'def456'}}]

        handle = coordinator.register_default()

        assert handle.application_id == 'def456'

    def test_not_configured(self, coordinator):
        with pytest.raises(NotConfigured):
            coordinator.remove_default()
