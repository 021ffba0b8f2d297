"""Meraki Dashboard REST transport (requests session with bearer auth)."""

from __future__ import annotations

from typing import Any

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from merakiprov.client.base import BaseTransport
from merakiprov.client.configuration import ClientConfiguration
from merakiprov.exceptions import APIError, AuthenticationError, DecodeError, NotFoundError

RETRY_STATUS_CODES = (500, 502, 503, 504)
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})
REDACTED = "<redacted>"


class DashboardRetry(Retry):
    """urllib3 retry policy that never resends a write after a server error.

    A 429 means the request was not processed, so it is retried for every
    method. A 5xx answer to a POST, PUT or DELETE may still have taken effect
    and is returned to the caller as is.
    """

    def is_retry(self, method: str, status_code: int, has_retry_after: bool = False) -> bool:
        if status_code != 429 and method.upper() not in IDEMPOTENT_METHODS:
            return False
        return super().is_retry(method, status_code, has_retry_after)


class DashboardTransport(BaseTransport):
    """HTTP transport for the Dashboard API.

    Every request carries ``Authorization: Bearer <api key>``. Rate-limited
    (429) answers and 5xx answers to reads are retried by a ``DashboardRetry``
    mounted on the session, honouring ``Retry-After``.
    """

    def __init__(self, config: ClientConfiguration):
        self.config = config
        self._session: requests.Session | None = None
        self._log = logger.bind(classname=self.__class__.__name__)

    def connect(self) -> None:
        """Create the session and mount the retrying adapter."""
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {self.config.api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": self.config.user_agent or "merakiprov",
            }
        )
        if self.config.certificate_path:
            self._session.verify = self.config.certificate_path
        if self.config.proxy:
            self._session.proxies = {"https": self.config.proxy, "http": self.config.proxy}
        adapter = HTTPAdapter(max_retries=self._build_retry())
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._log.debug(f"Dashboard session opened for {self.config.api_root}")

    def disconnect(self) -> None:
        """Close the session."""
        if self._session:
            self._session.close()
            self._session = None

    def is_connected(self) -> bool:
        return self._session is not None

    def _build_retry(self) -> Retry:
        status_codes = list(RETRY_STATUS_CODES)
        if self.config.wait_on_rate_limit:
            status_codes.insert(0, 429)
        return DashboardRetry(
            total=self.config.maximum_retries,
            connect=self.config.maximum_retries,
            read=0,
            status=self.config.maximum_retries,
            status_forcelist=status_codes,
            allowed_methods=None,
            backoff_factor=1,
            backoff_max=self.config.nginx_429_retry_wait_time,
            respect_retry_after_header=True,
            raise_on_status=False,
        )

    def url_for(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.config.api_root}{path}"

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> tuple[Any, requests.Response]:
        """Send a request to the Dashboard API.

        Args:
            method: HTTP method.
            path: Path below the API root (e.g. "/networks/N_1") or an absolute URL.
            json: JSON body payload.
            params: Query string parameters.

        Returns:
            The decoded JSON body (None for empty bodies) and the raw response.

        Raises:
            APIError: On transport failure or an error status.
            DecodeError: If a non-empty body is not JSON.
        """
        self._ensure_connected()
        assert self._session is not None
        url = self.url_for(path)
        if self.config.logging_enabled:
            self._log.debug(f"{method} {url} params={params} body={json}")
        try:
            resp = self._session.request(
                method, url, json=json, params=params, timeout=self.config.single_request_timeout
            )
        except requests.RequestException as e:
            raise APIError(f"{method} {path} failed: {e}", method=method, url=url) from e

        if self.config.logging_enabled:
            self._log.debug(f"{method} {url} -> {resp.status_code} {resp.text[:2000]}")
        if resp.status_code >= 400:
            raise self._error_for(resp, method, url)
        return self._decode(resp, method, url), resp

    def get_pages(self, path: str, params: dict[str, Any] | None = None) -> tuple[list[Any], requests.Response]:
        """Follow ``Link: rel=next`` headers and concatenate the list pages."""
        items: list[Any] = []
        data, resp = self.request("GET", path, params=params)
        while True:
            if isinstance(data, list):
                items.extend(data)
            next_url = resp.links.get("next", {}).get("url")
            if not next_url:
                return items, resp
            data, resp = self.request("GET", next_url)

    def _decode(self, resp: requests.Response, method: str, url: str) -> Any:
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError(f"{method} {url}: response is not JSON: {resp.text[:200]!r}") from e

    def _error_for(self, resp: requests.Response, method: str, url: str) -> APIError:
        body = resp.text
        message = f"{method} {url} returned {resp.status_code}"
        try:
            errors = resp.json().get("errors")
        except (ValueError, AttributeError):
            errors = None
        if errors:
            message += ": " + ", ".join(str(e) for e in errors)
        headers = dict(resp.request.headers) if resp.request is not None else {}
        kwargs: dict[str, Any] = dict(
            status_code=resp.status_code, body=body, method=method, url=url, request_headers=headers
        )
        if resp.status_code in (401, 403):
            return AuthenticationError(message, **kwargs)
        if resp.status_code == 404:
            return NotFoundError(message, **kwargs)
        return APIError(message, **kwargs)

    def _ensure_connected(self) -> None:
        if not self.is_connected():
            raise APIError("Not connected. Call connect() first.")


def http_diagnostics(error: APIError) -> str:
    """Render an API error for a diagnostic's detail, hiding credentials."""
    lines = []
    if error.method or error.url:
        lines.append(f"Request: {error.method} {error.url}")
    if error.request_headers:
        headers = {
            k: (REDACTED if k.lower() in ("authorization", "x-cisco-meraki-api-key") else v)
            for k, v in error.request_headers.items()
        }
        lines.append("Request headers: " + ", ".join(f"{k}: {v}" for k, v in sorted(headers.items())))
    if error.status_code is not None:
        lines.append(f"Status: {error.status_code}")
    if error.body:
        lines.append(f"Body: {error.body}")
    if not lines:
        lines.append(str(error))
    return "\n".join(lines)
