"""Declarative infrastructure provider for the Cisco Meraki Dashboard API.

Exposes organizations, networks, devices, switch ports, VLANs, SNMP,
firewall rules and more as declarative resources with plan/apply semantics.
"""

__version__ = "0.1.0"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink with a convenient format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "INFO")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


# Import resources and data sources to trigger registration
import merakiprov.datasources  # noqa: F401, E402
import merakiprov.resources  # noqa: F401, E402
from merakiprov.exceptions import (  # noqa: E402
    APIError,
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    DiagnosticsError,
    NotFoundError,
    PlanError,
    ProviderError,
    StateError,
)
from merakiprov.provider import MerakiProvider  # noqa: E402
from merakiprov.registry import list_data_sources, list_resources  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "MerakiProvider",
    "list_resources",
    "list_data_sources",
    "ProviderError",
    "ConfigurationError",
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "DecodeError",
    "PlanError",
    "StateError",
    "DiagnosticsError",
]
