#  StyleMirror Gateway - Dependency Injection Container
#
#  DeclarativeContainer wiring credentials, the shared HTTP client and the
#  counter store into the forwarders and the orchestrator.
#
#  Depends on: config.py, services/*, forwarders/*
#  Used by:    app.py, routes/proxy.py

import httpx
from dependency_injector import containers, providers

from gateway.config import (
    ALLOWED_ORIGINS,
    COUNTER_STORE_BACKEND,
    COUNTER_STORE_URL,
    N8N_BASE_URL,
    OPENROUTER_KEY,
    OPENROUTER_REFERER,
    OPENROUTER_TITLE,
    OPENROUTER_URL,
    PERPLEXITY_DEFAULT_MODEL,
    PERPLEXITY_KEY,
    PERPLEXITY_URL,
    SERPAPI_KEY,
    SERPAPI_URL,
    SERVICE_NAME,
    SERVICE_VERSION,
    UPSTREAM_TIMEOUT,
    VISION_DEFAULT_MODEL,
)
from gateway.forwarders.health import HealthForwarder, NotFoundForwarder
from gateway.forwarders.n8n import N8nForwarder
from gateway.forwarders.perplexity import PerplexityForwarder
from gateway.forwarders.search import SearchForwarder
from gateway.forwarders.vision import VisionForwarder
from gateway.models.enums import RouteKind
from gateway.services.cors import CorsPolicy
from gateway.services.counter_store import build_counter_store
from gateway.services.gateway import Gateway
from gateway.services.rate_limiter import RateLimiter
from gateway.services.routing import build_policies


class Container(containers.DeclarativeContainer):
    """DI container for the gateway.

    The HTTP client and counter store are Singletons, one per application
    lifecycle. Everything built on top of them is a Factory so that test
    overrides of the Singletons take effect on the next request.
    Tests override via container.xxx.override(providers.Object(mock)).
    """

    wiring_config = containers.WiringConfiguration(
        modules=[
            "gateway.routes.proxy",
        ]
    )

    # --- Core ---
    http_client = providers.Singleton(httpx.AsyncClient, timeout=UPSTREAM_TIMEOUT)
    counter_store = providers.Singleton(
        build_counter_store,
        backend=COUNTER_STORE_BACKEND,
        redis_url=COUNTER_STORE_URL,
    )

    # --- Decision layer ---
    rate_limiter = providers.Factory(RateLimiter, store=counter_store)
    policies = providers.Singleton(build_policies)
    cors = providers.Singleton(CorsPolicy, allowed_origins=ALLOWED_ORIGINS)

    # --- Forwarders ---
    health = providers.Factory(HealthForwarder, service_name=SERVICE_NAME, version=SERVICE_VERSION)
    not_found = providers.Factory(NotFoundForwarder)
    search = providers.Factory(
        SearchForwarder,
        http_client=http_client,
        api_key=SERPAPI_KEY,
        url=SERPAPI_URL,
        timeout=UPSTREAM_TIMEOUT,
    )
    vision = providers.Factory(
        VisionForwarder,
        http_client=http_client,
        api_key=OPENROUTER_KEY,
        url=OPENROUTER_URL,
        default_model=VISION_DEFAULT_MODEL,
        timeout=UPSTREAM_TIMEOUT,
        referer=OPENROUTER_REFERER,
        title=OPENROUTER_TITLE,
    )
    perplexity = providers.Factory(
        PerplexityForwarder,
        http_client=http_client,
        api_key=PERPLEXITY_KEY,
        url=PERPLEXITY_URL,
        default_model=PERPLEXITY_DEFAULT_MODEL,
        timeout=UPSTREAM_TIMEOUT,
    )
    n8n = providers.Factory(
        N8nForwarder,
        http_client=http_client,
        base_url=N8N_BASE_URL,
        timeout=UPSTREAM_TIMEOUT,
    )

    # --- Orchestrator ---
    gateway = providers.Factory(
        Gateway,
        rate_limiter=rate_limiter,
        cors=cors,
        policies=policies,
        forwarders=providers.Dict({
            RouteKind.HEALTH: health,
            RouteKind.SEARCH: search,
            RouteKind.VISION: vision,
            RouteKind.PERPLEXITY: perplexity,
            RouteKind.N8N_PROXY: n8n,
            RouteKind.NOT_FOUND: not_found,
        }),
    )
