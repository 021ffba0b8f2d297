"""Exception hierarchy for the Meraki provider."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from merakiprov.framework.diagnostics import Diagnostics


class ProviderError(Exception):
    """Base exception for all provider errors."""


class ConfigurationError(ProviderError):
    """Provider or workspace configuration is invalid."""


class APIError(ProviderError):
    """Dashboard API request failed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str = "",
        method: str = "",
        url: str = "",
        request_headers: dict[str, str] | None = None,
    ):
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url
        self.request_headers = request_headers or {}
        super().__init__(message)


class AuthenticationError(APIError):
    """The API key was rejected (401/403)."""


class NotFoundError(APIError):
    """The requested object does not exist (404)."""


class DecodeError(ProviderError):
    """A response body could not be decoded as JSON."""


class PlanError(ProviderError):
    """A plan could not be computed (bad references, dependency cycles)."""


class StateError(ProviderError):
    """The state file is unreadable or inconsistent."""


class DiagnosticsError(ProviderError):
    """An operation finished with error diagnostics."""

    def __init__(self, diagnostics: Diagnostics):
        self.diagnostics = diagnostics
        summaries = "; ".join(d.summary for d in diagnostics.errors())
        super().__init__(summaries or "operation failed")
