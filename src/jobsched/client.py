from __future__ import annotations

import json
import time
from typing import Any

import httpx

from jobsched.hooks.observability import EventLogger

from .config import ClientConfig
from .errors import NotFoundError, RequestError, ValidationError
from .jobs import Jobs
from .models import QueryMeta, QueryOptions, WriteMeta, WriteOptions

INDEX_HEADER = "X-Nomad-Index"
LAST_CONTACT_HEADER = "X-Nomad-LastContact"
KNOWN_LEADER_HEADER = "X-Nomad-KnownLeader"


class Client:
    """
    Stateless HTTP client for the scheduler API.
    Every call is a single request; only the configuration is shared between calls.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        self.config = config or ClientConfig.from_env()
        self.http_client = http_client
        self.transport = transport
        self.logger = logger or EventLogger()

    def jobs(self) -> Jobs:
        return Jobs(self)

    def query(self, path: str, options: QueryOptions | None = None) -> tuple[Any, QueryMeta]:
        options = options or QueryOptions()
        params = self._region_params(options.region)
        if options.allow_stale:
            params["stale"] = ""
        if options.wait_index > 0:
            params["index"] = str(options.wait_index)
        wait_time = options.wait_time if options.wait_time is not None else self.config.wait_time_seconds
        if wait_time:
            params["wait"] = f"{int(wait_time * 1000)}ms"

        timeout = options.timeout
        if timeout is None:
            timeout = self.config.request_timeout_seconds
            if wait_time:
                # The server may hold a blocking query for wait + wait/16.
                timeout = max(timeout, wait_time + wait_time / 16 + 1.0)

        response, elapsed = self._do("GET", path, params=params, timeout=timeout)
        meta = QueryMeta(
            last_index=_parse_index(response.headers),
            last_contact=_parse_last_contact(response.headers),
            known_leader=response.headers.get(KNOWN_LEADER_HEADER, "").lower() == "true",
            request_time=elapsed,
        )
        return _decode_body(response, "GET", path), meta

    def write(
        self,
        path: str,
        body: Any = None,
        options: WriteOptions | None = None,
    ) -> tuple[Any, WriteMeta]:
        return self._write("PUT", path, body, options)

    def delete(self, path: str, options: WriteOptions | None = None) -> tuple[Any, WriteMeta]:
        return self._write("DELETE", path, None, options)

    def _write(
        self,
        method: str,
        path: str,
        body: Any,
        options: WriteOptions | None,
    ) -> tuple[Any, WriteMeta]:
        options = options or WriteOptions()
        timeout = options.timeout or self.config.request_timeout_seconds
        response, elapsed = self._do(
            method,
            path,
            params=self._region_params(options.region),
            body=body,
            timeout=timeout,
        )
        meta = WriteMeta(last_index=_parse_index(response.headers), request_time=elapsed)
        return _decode_body(response, method, path), meta

    def _region_params(self, region: str | None) -> dict[str, str]:
        resolved = region or self.config.region
        return {"region": resolved} if resolved else {}

    def _do(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str],
        timeout: float,
        body: Any = None,
    ) -> tuple[httpx.Response, float]:
        url = f"{self.config.address}{path}"
        self.logger.on_request(method=method, path=path, phase="start")
        started = time.monotonic()
        try:
            response = self._send(method, url, params=params, body=body, timeout=timeout)
        except httpx.HTTPError as exc:
            self.logger.on_request(
                method=method,
                path=path,
                phase="error",
                error=type(exc).__name__,
            )
            raise RequestError(f"{method} {path} failed: {exc}") from exc
        elapsed = time.monotonic() - started

        if not 200 <= response.status_code < 300:
            error = _error_from_response(response, path)
            self.logger.on_request(
                method=method,
                path=path,
                phase="error",
                status_code=response.status_code,
                error=type(error).__name__,
            )
            raise error

        self.logger.on_request(
            method=method,
            path=path,
            phase="success",
            status_code=response.status_code,
            index=_parse_index(response.headers),
        )
        return response, elapsed

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str],
        body: Any,
        timeout: float,
    ) -> httpx.Response:
        request_timeout = httpx.Timeout(timeout)
        if self.http_client is not None:
            return self.http_client.request(
                method,
                url,
                params=params,
                json=body,
                timeout=request_timeout,
            )
        with httpx.Client(timeout=request_timeout, transport=self.transport) as client:
            return client.request(method, url, params=params, json=body)


def _error_from_response(response: httpx.Response, path: str) -> RequestError:
    status_code = response.status_code
    detail = response.text.strip()[:300]
    message = f"Unexpected response code: {status_code} ({detail})"
    if status_code == 404:
        if "not found" not in message:
            message = f"{message}: {path} not found"
        return NotFoundError(message, status_code=status_code)
    if status_code in {400, 422}:
        return ValidationError(message, status_code=status_code)
    return RequestError(message, status_code=status_code)


def _decode_body(response: httpx.Response, method: str, path: str) -> Any:
    if not response.content.strip():
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError(
            f"{method} {path} returned an undecodable body: {exc}",
            status_code=response.status_code,
        ) from exc


def _parse_index(headers: httpx.Headers) -> int:
    try:
        return max(0, int(headers.get(INDEX_HEADER, "0")))
    except ValueError:
        return 0


def _parse_last_contact(headers: httpx.Headers) -> float:
    try:
        return max(0.0, int(headers.get(LAST_CONTACT_HEADER, "0")) / 1000)
    except ValueError:
        return 0.0
