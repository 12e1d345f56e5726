"""Transport Protocol and the httpx client that talks to snapd."""

import json
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from snapperms.lib.errors import TransportError
from snapperms.lib.models import AppConfig

log = logging.getLogger("snapperms.transport")


@dataclass(frozen=True)
class Request:
    method: str
    path: str
    body: bytes | None = None


@dataclass(frozen=True)
class Response:
    status: int
    body: bytes


class Transport(Protocol):
    def do(self, request: Request) -> Response:
        """Perform one exchange. Raises TransportError if it cannot complete."""
        ...


class HttpxTransport:
    """Send requests to the snapd REST API over its unix socket."""

    def __init__(
        self, config: AppConfig, transport: httpx.BaseTransport | None = None
    ) -> None:
        if transport is None:
            transport = httpx.HTTPTransport(uds=str(config.socket_path))
        self._client = httpx.Client(
            transport=transport,
            base_url=config.base_url,
            timeout=config.timeout,
        )

    def do(self, request: Request) -> Response:
        headers = {"Content-Type": "application/json"} if request.body else {}
        try:
            resp = self._client.request(
                request.method, request.path, content=request.body, headers=headers
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{request.method} {request.path}: {e}") from e

        log.debug("%s %s -> %d", request.method, request.path, resp.status_code)
        if not resp.is_success:
            raise TransportError(
                f"{request.method} {request.path}: {_error_message(resp)}",
                status=resp.status_code,
            )
        return Response(status=resp.status_code, body=resp.content)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _error_message(resp: httpx.Response) -> str:
    """Pull snapd's result.message out of an error body, else the status line."""
    try:
        message = resp.json().get("result", {}).get("message")
    except (json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        message = None
    return message or f"HTTP {resp.status_code} {resp.reason_phrase}"
