"""Meraki Dashboard API client."""

from merakiprov.client.api import DashboardAPI
from merakiprov.client.base import BaseTransport
from merakiprov.client.configuration import ClientConfiguration
from merakiprov.client.transport import DashboardTransport, http_diagnostics

__all__ = [
    "BaseTransport",
    "ClientConfiguration",
    "DashboardAPI",
    "DashboardTransport",
    "http_diagnostics",
]
