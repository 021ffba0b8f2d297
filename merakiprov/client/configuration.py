"""Pydantic model of the settings used to build a Dashboard API client."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://api.meraki.com"
DEFAULT_BASE_PATH = "/api/v1"


class ClientConfiguration(BaseModel):
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    base_path: str = DEFAULT_BASE_PATH
    certificate_path: Optional[str] = None
    proxy: Optional[str] = None
    single_request_timeout: int = Field(default=60, ge=1)
    maximum_retries: int = Field(default=2, ge=0)
    nginx_429_retry_wait_time: int = Field(default=60, ge=0)
    wait_on_rate_limit: bool = True
    logging_enabled: bool = False
    user_agent: str = ""

    @property
    def api_root(self) -> str:
        return self.base_url.rstrip("/") + self.base_path
