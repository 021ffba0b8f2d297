"""Provider root: provider schema, client configuration and type dispatch."""

from __future__ import annotations

import os
from typing import Any

from loguru import logger
from pydantic import ValidationError

from merakiprov import __version__
from merakiprov.client import ClientConfiguration, DashboardAPI
from merakiprov.client.configuration import DEFAULT_BASE_PATH, DEFAULT_BASE_URL
from merakiprov.framework.datasource import BaseDataSource
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.resource import BaseResource
from merakiprov.framework.schema import BoolAttribute, Int64Attribute, Schema, StringAttribute
from merakiprov.framework.validators import between, regex_matches
from merakiprov.framework.values import is_known, is_unknown
from merakiprov.registry import create_data_source, create_resource, list_data_sources, list_resources

BASE_URL_PATTERN = r"^(https://)(?:[a-zA-Z0-9]{1,62}(?:[-.][a-zA-Z0-9]{1,62})+)(:\d+)?$"
BASE_PATH_PATTERN = r"^/api/v1$"

ENV_FALLBACKS = {
    "api_key": "MERAKI_DASHBOARD_API_KEY",
    "base_url": "MERAKI_BASE_URL",
    "certificate_path": "MERAKI_CERTIFICATE_PATH",
    "proxy": "MERAKI_PROXY",
}

PROVIDER_SCHEMA = Schema(
    description="Declarative management of the Cisco Meraki Dashboard API",
    attributes={
        "api_key": StringAttribute(
            optional=True,
            sensitive=True,
            description="Meraki Dashboard API key. Can also be set with the MERAKI_DASHBOARD_API_KEY environment variable.",
        ),
        "base_url": StringAttribute(
            optional=True,
            description="Endpoint for Meraki Dashboard API. Can also be set with the MERAKI_BASE_URL environment variable.",
            validators=[regex_matches(BASE_URL_PATTERN, "The URL must start with https:// and may carry a port.")],
        ),
        "base_path": StringAttribute(
            optional=True,
            description="Base path pointing to the API version. Example: `/api/v1`",
            validators=[regex_matches(BASE_PATH_PATTERN, "The API version to be specified in the URL. Example: /api/v1")],
        ),
        "certificate_path": StringAttribute(
            optional=True,
            sensitive=True,
            description="Path to a CA bundle used when the API is reached through an intercepting proxy. Can also be set with MERAKI_CERTIFICATE_PATH.",
        ),
        "proxy": StringAttribute(
            optional=True,
            description="HTTPS proxy for API calls. Can also be set with the MERAKI_PROXY environment variable.",
        ),
        "single_request_timeout": Int64Attribute(
            optional=True, description="Maximum number of seconds for each API call", validators=[between(1, 3600)]
        ),
        "maximum_retries": Int64Attribute(
            optional=True, description="Retry up to this many times on rate-limited or 5xx answers", validators=[between(0, 100)]
        ),
        "nginx_429_retry_wait_time": Int64Attribute(
            optional=True, description="Maximum number of seconds to back off after a 429", validators=[between(0, 3600)]
        ),
        "wait_on_rate_limit": BoolAttribute(
            optional=True, description="Retry if 429 rate limit error encountered"
        ),
        "logging_enabled": BoolAttribute(optional=True, description="Log HTTP requests and responses at debug level"),
    },
)


class MerakiProvider:
    """Configures the Dashboard client and hands out configured resources.

    Example::

        provider = MerakiProvider()
        diags = Diagnostics()
        provider.configure({"api_key": "..."}, diags)
        network = provider.resource("meraki_network", diags)
    """

    type_name = "meraki"

    def __init__(self, version: str = __version__):
        self.version = version
        self.client: DashboardAPI | None = None
        self.config: ClientConfiguration | None = None
        self.log = logger.bind(classname=self.__class__.__name__)

    @classmethod
    def schema(cls) -> Schema:
        return PROVIDER_SCHEMA

    def _resolve(self, config: dict[str, Any]) -> dict[str, Any]:
        """Apply environment fallbacks and defaults to a provider block."""
        values = PROVIDER_SCHEMA.normalize(config)
        for key, env_var in ENV_FALLBACKS.items():
            if values.get(key) is None and os.getenv(env_var):
                values[key] = os.environ[env_var]
        if values.get("base_url") is None:
            values["base_url"] = DEFAULT_BASE_URL
        if values.get("base_path") is None:
            values["base_path"] = DEFAULT_BASE_PATH
        return values

    def build_configuration(self, config: dict[str, Any], diags: Diagnostics) -> ClientConfiguration | None:
        """Validate a provider block and turn it into a ``ClientConfiguration``."""
        PROVIDER_SCHEMA.validate_config(config, diags)
        if diags.has_error():
            return None
        unknown = [k for k, v in config.items() if is_unknown(v)]
        if unknown:
            diags.add_error(
                "Unknown Provider Configuration",
                f"Provider attributes {', '.join(sorted(unknown))} depend on values that are only known after apply.",
            )
            return None

        values = self._resolve(config)
        for key in ("base_url", "base_path"):
            if config.get(key) is None:
                PROVIDER_SCHEMA.attributes[key].validate(values[key], key, diags)
        if not values.get("api_key"):
            diags.add_error(
                "Missing Meraki Dashboard API Key",
                "Set the api_key provider attribute or the MERAKI_DASHBOARD_API_KEY environment variable.",
                "api_key",
            )
        if diags.has_error():
            return None

        settings = {k: v for k, v in values.items() if is_known(v)}
        settings["user_agent"] = f"merakiprov/{self.version}"
        try:
            return ClientConfiguration(**settings)
        except ValidationError as err:
            for error in err.errors():
                location = ".".join(str(part) for part in error["loc"])
                diags.add_error("Invalid Provider Configuration", error["msg"], location)
            return None

    def configure(self, config: dict[str, Any], diags: Diagnostics) -> DashboardAPI | None:
        """Build the shared API client from the provider block."""
        client_config = self.build_configuration(config, diags)
        if client_config is None:
            return None
        self.config = client_config
        self.client = DashboardAPI.from_config(client_config)
        self.log.debug(f"configured for {client_config.api_root} (user agent {client_config.user_agent})")
        return self.client

    def resource(self, type_name: str, diags: Diagnostics) -> BaseResource:
        """Instantiate a resource type and give it the configured client."""
        resource = create_resource(type_name)
        resource.configure(self.client, diags)
        return resource

    def data_source(self, type_name: str, diags: Diagnostics) -> BaseDataSource:
        data_source = create_data_source(type_name)
        data_source.configure(self.client, diags)
        return data_source

    @staticmethod
    def resources() -> list[str]:
        return list_resources()

    @staticmethod
    def data_sources() -> list[str]:
        return list_data_sources()

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
