#  StyleMirror Gateway - Forwarder Base Class
#
#  Abstract base class for per-route forwarders, plus the shared outbound
#  call and JSON relay helpers used by the upstream forwarders.
#
#  Depends on: exceptions.py
#  Used by:    forwarders/*, services/gateway.py

import json
import logging
from abc import ABC, abstractmethod

import httpx
from starlette.requests import Request
from starlette.responses import Response

from gateway.exceptions import (
    MethodNotAllowedError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)

logger = logging.getLogger("gateway.forwarders")


class Forwarder(ABC):
    """Turns one inbound request into a response for a single route."""

    name: str = ""

    @abstractmethod
    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        """Produce the response for this route. Raise GatewayError subclasses on failure."""
        ...


class UpstreamForwarder(Forwarder):
    """Forwarder backed by an external HTTP API through a shared httpx client."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float):
        self._http = http_client
        self._timeout = timeout

    async def _send(self, method: str, url: str | httpx.URL, **kwargs) -> httpx.Response:
        """Single outbound call with an explicit timeout. No retries."""
        try:
            return await self._http.request(method, url, timeout=self._timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning("%s upstream timed out after %ss", self.name, self._timeout)
            raise UpstreamTimeoutError(f"{self.name} upstream timed out") from e
        except httpx.HTTPError as e:
            logger.warning("%s upstream request failed: %s", self.name, e)
            raise UpstreamError(f"{self.name} upstream request failed") from e

    def _relay_json(self, resp: httpx.Response) -> Response:
        """Return the upstream JSON body verbatim with the upstream status."""
        try:
            resp.json()
        except ValueError as e:
            logger.warning(
                "%s upstream returned non-JSON body (status %s): %s",
                self.name, resp.status_code, resp.text[:200],
            )
            raise UpstreamError(f"{self.name} upstream returned an invalid response") from e
        if resp.status_code >= 400:
            logger.warning("%s upstream returned %s", self.name, resp.status_code)
        return Response(
            content=resp.content,
            status_code=resp.status_code,
            media_type="application/json",
        )


def require_post(request: Request):
    if request.method != "POST":
        raise MethodNotAllowedError("Method not allowed")


async def read_json_body(request: Request) -> dict:
    """Parse the request body as a JSON object."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON body")
    return body
