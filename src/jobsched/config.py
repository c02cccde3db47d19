from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, model_validator

DEFAULT_ADDRESS = "http://127.0.0.1:4646"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 60.0


def _env_text(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _env_float(environ: Mapping[str, str], name: str) -> float | None:
    raw = _env_text(environ, name)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got: {raw!r}") from exc


class ClientConfig(BaseModel):
    """Connection settings shared by every request a Client makes."""

    address: str = DEFAULT_ADDRESS
    region: str | None = None
    wait_time_seconds: float | None = None
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    @model_validator(mode="after")
    def validate_config(self) -> "ClientConfig":
        address = self.address.strip().rstrip("/")
        if not address.startswith(("http://", "https://")):
            raise ValueError(f"address must start with http:// or https://: {self.address}")
        self.address = address
        if self.region is not None:
            self.region = self.region.strip() or None
        if self.wait_time_seconds is not None and self.wait_time_seconds < 0:
            raise ValueError("wait_time_seconds must be >= 0")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ClientConfig":
        env = os.environ if environ is None else environ
        request_timeout = _env_float(env, "JOBSCHED_REQUEST_TIMEOUT_SECONDS")
        return cls(
            address=_env_text(env, "JOBSCHED_ADDR") or DEFAULT_ADDRESS,
            region=_env_text(env, "JOBSCHED_REGION"),
            wait_time_seconds=_env_float(env, "JOBSCHED_WAIT_TIME_SECONDS"),
            request_timeout_seconds=(
                request_timeout if request_timeout is not None else DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
        )
