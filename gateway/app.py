#  StyleMirror Gateway - FastAPI Application
#
#  Main app setup: lifespan, request IDs, proxy route.
#  Creates the DI container and manages client/store lifecycle.
#  CORS is applied by the orchestrator, not by CORSMiddleware, so that
#  rejected and failed requests carry the same headers.
#
#  Depends on: config.py, container.py, routes/proxy.py, logging_config.py
#  Used by:    run.py

import logging
import uuid
from contextlib import AsyncExitStack, asynccontextmanager

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from gateway.config import SERVICE_VERSION, validate_config
from gateway.container import Container
from gateway.logging_config import set_request_id
from gateway.routes.proxy import router as proxy_router

logger = logging.getLogger("gateway.app")

# Create and wire the DI container
container = Container()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle.

    Uses AsyncExitStack so that if any startup step fails, all previously
    initialized resources are cleaned up in reverse order.
    """
    logger.info("StyleMirror gateway starting...")

    # Validate critical config before anything else
    validate_config()

    http_client = container.http_client()
    counter_store = container.counter_store()

    async with AsyncExitStack() as stack:
        stack.push_async_callback(http_client.aclose)
        stack.push_async_callback(counter_store.close)

        yield

    logger.info("StyleMirror gateway shutting down")


app = FastAPI(
    title="StyleMirror API Gateway",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)


# Request ID tracing
class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = uuid.uuid4().hex[:12]
        set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            set_request_id(None)

app.add_middleware(RequestIDMiddleware)

app.include_router(proxy_router)
