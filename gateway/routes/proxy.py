#  StyleMirror Gateway - Proxy Route
#
#  Catch-all route handing every request to the Gateway orchestrator.
#  Route classification happens in services/routing.py, not in FastAPI.
#
#  Depends on: container.py, services/gateway.py
#  Used by:    app.py

from dependency_injector.wiring import inject, Provide
from fastapi import APIRouter, Depends
from starlette.requests import Request
from starlette.responses import Response

from gateway.container import Container
from gateway.services.gateway import Gateway

router = APIRouter(tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


@router.api_route("/{full_path:path}", methods=PROXY_METHODS, include_in_schema=False)
@inject
async def proxy(
    request: Request,
    gateway: Gateway = Depends(Provide[Container.gateway]),
) -> Response:
    return await gateway.handle(request)
