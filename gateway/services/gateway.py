#  StyleMirror Gateway - Request Orchestrator
#
#  Single-pass request lifecycle:
#    preflight -> client identity -> classify -> rate check -> forward
#    -> CORS overlay -> uniform JSON errors.
#  Every response leaving handle(), success or failure, is CORS decorated.
#
#  Depends on: services/routing.py, services/rate_limiter.py, services/cors.py,
#              forwarders/*, logging_config.py
#  Used by:    container.py, routes/proxy.py

import logging
from typing import Mapping

from starlette.requests import Request
from starlette.responses import Response

from gateway.exceptions import GatewayError, RateLimitExceededError, StoreUnavailableError
from gateway.forwarders.base import Forwarder
from gateway.logging_config import request_context
from gateway.models.enums import RouteKind
from gateway.responses import json_error
from gateway.services.cors import CorsPolicy
from gateway.services.rate_limiter import RateLimitDecision, RateLimiter, RoutePolicy
from gateway.services.routing import classify

logger = logging.getLogger("gateway.orchestrator")

USER_ID_HEADER = "x-user-id"
CONNECTING_IP_HEADER = "cf-connecting-ip"
ANONYMOUS = "anonymous"


def client_identity(request: Request) -> str:
    """Explicit user id > connecting IP > "anonymous"."""
    return (
        request.headers.get(USER_ID_HEADER)
        or request.headers.get(CONNECTING_IP_HEADER)
        or ANONYMOUS
    )


class Gateway:
    """Routes, rate-limits and forwards one request at a time.

    All collaborators are passed in; nothing here reads config or globals.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        cors: CorsPolicy,
        policies: Mapping[str, RoutePolicy],
        forwarders: Mapping[RouteKind, Forwarder],
    ):
        missing = set(RouteKind) - set(forwarders)
        if missing:
            raise ValueError(f"No forwarder registered for: {sorted(k.value for k in missing)}")
        self._limiter = rate_limiter
        self._cors = cors
        self._policies = policies
        self._forwarders = forwarders

    async def handle(self, request: Request) -> Response:
        origin = request.headers.get("origin") or ""

        if request.method == "OPTIONS":
            return self._cors.apply(Response(status_code=200), origin)

        client_id = client_identity(request)
        route = classify(request.method, request.url.path, request.scope.get("raw_path"))

        decision: RateLimitDecision | None = None
        with request_context(client_id=client_id, route=route.kind.value, namespace=route.namespace):
            try:
                if route.needs_quota:
                    policy = self._policies[route.namespace]
                    decision = await self._limiter.check(f"{route.namespace}:{client_id}", policy)
                    if not decision.admitted:
                        logger.info(
                            "Rate limit exceeded (%d per %ds)",
                            policy.requests_per_window, policy.window_seconds,
                        )
                        raise RateLimitExceededError("Rate limit exceeded")

                response = await self._forwarders[route.kind].forward(request, route.sub_path)
            except StoreUnavailableError as e:
                logger.warning("Failing request, counter store unavailable: %s", e)
                response = json_error(e.status_code, str(e))
            except GatewayError as e:
                response = json_error(e.status_code, str(e))
            except Exception as e:
                logger.error("Unhandled gateway error: %s", e, exc_info=True)
                response = json_error(500, "Internal server error", message=str(e) or "Unknown error")

        if decision is not None:
            response.headers["X-RateLimit-Limit"] = str(decision.limit)
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return self._cors.apply(response, origin)
