#  StyleMirror Gateway - Local Responders
#
#  Health check and not-found responders. Neither touches an upstream.
#
#  Depends on: forwarders/base.py, models/schemas.py
#  Used by:    container.py

from datetime import datetime, timezone

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from gateway.exceptions import NotFoundError
from gateway.forwarders.base import Forwarder
from gateway.models.schemas import HealthOut


class HealthForwarder(Forwarder):
    name = "health"

    def __init__(self, service_name: str, version: str):
        self._service_name = service_name
        self._version = version

    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        body = HealthOut(
            service=self._service_name,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            version=self._version,
        )
        return JSONResponse(body.model_dump())


class NotFoundForwarder(Forwarder):
    name = "not_found"

    async def forward(self, request: Request, sub_path: str | None = None) -> Response:
        raise NotFoundError("Not found")
