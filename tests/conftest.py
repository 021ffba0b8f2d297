"""Shared fixtures for the merakiprov test suite."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from merakiprov.client.api import DashboardAPI
from merakiprov.client.configuration import ClientConfiguration
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.provider import MerakiProvider

# ── HTTP fakes ────────────────────────────────────────────────────────


@pytest.fixture()
def make_response():
    """Factory fixture returning a MagicMock ``requests.Response``."""

    def _make(status_code=200, json_data=None, text=None, links=None, headers=None):
        resp = MagicMock()
        resp.status_code = status_code
        resp.links = links or {}
        resp.headers = headers or {}
        if json_data is None and text is None:
            resp.content = b""
            resp.text = ""
            resp.json.side_effect = ValueError("no body")
        elif json_data is not None:
            resp.text = json.dumps(json_data)
            resp.content = resp.text.encode()
            resp.json.return_value = json_data
        else:
            resp.text = text
            resp.content = text.encode()
            resp.json.side_effect = ValueError("not json")
        resp.request.headers = {"Authorization": "Bearer secret-key", "Accept": "application/json"}
        return resp

    return _make


@pytest.fixture()
def client_config():
    return ClientConfiguration(api_key="test-key", maximum_retries=0)


# ── client mocks ──────────────────────────────────────────────────────


@pytest.fixture()
def mock_transport():
    """MagicMock of DashboardTransport with request/get_pages."""
    transport = MagicMock()
    transport.request.return_value = (None, MagicMock(status_code=200))
    transport.get_pages.return_value = ([], MagicMock(status_code=200))
    return transport


@pytest.fixture()
def mock_client():
    """MagicMock of DashboardAPI; endpoint groups are auto-created attributes."""
    return MagicMock(spec_set=["organizations", "networks", "devices", "appliance", "switch", "administered", "close"])


@pytest.fixture()
def api(mock_transport):
    """A real DashboardAPI on top of the mocked transport."""
    return DashboardAPI(mock_transport)


@pytest.fixture()
def ok():
    """Factory fixture for ``(data, response)`` tuples returned by client methods."""

    def _ok(data=None, status_code=200):
        return data, MagicMock(status_code=status_code, text="")

    return _ok


@pytest.fixture()
def diags():
    return Diagnostics()


@pytest.fixture()
def configured(mock_client):
    """Factory fixture: instantiate a registered resource/data source with the mock client."""

    def _make(cls):
        instance = cls()
        d = Diagnostics()
        instance.configure(mock_client, d)
        assert not d.has_error()
        return instance

    return _make


@pytest.fixture()
def provider(mock_client):
    """A MerakiProvider whose client is already the mock client."""
    p = MerakiProvider(version="test")
    p.client = mock_client
    return p
