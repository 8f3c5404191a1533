#  StyleMirror Gateway - Route Classifier
#
#  Maps an inbound path to a RouteDecision, and each quota-bearing route
#  to its rate-limit namespace and policy.
#
#  Depends on: config.py, models/enums.py, services/rate_limiter.py
#  Used by:    container.py, services/gateway.py

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping
from urllib.parse import quote_from_bytes, unquote

from gateway.config import RATE_LIMITS
from gateway.models.enums import RouteKind
from gateway.services.rate_limiter import RoutePolicy

N8N_PREFIX = "/api/n8n"
WEBHOOK_PREFIX = "/webhook"

# Percent-escapes and path sub-delimiters pass through; "?" and "#" do not
_RAW_PATH_SAFE = "/%:@!$&'()*+,;="
_DOT_SEGMENTS = frozenset({".", ".."})

_EXACT_ROUTES: Mapping[str, RouteKind] = MappingProxyType({
    "/": RouteKind.HEALTH,
    "/health": RouteKind.HEALTH,
    "/api/search": RouteKind.SEARCH,
    "/api/vision": RouteKind.VISION,
    "/api/perplexity": RouteKind.PERPLEXITY,
})

# Perplexity deliberately shares the search namespace (same budget, same counters)
ROUTE_NAMESPACES: Mapping[RouteKind, str] = MappingProxyType({
    RouteKind.SEARCH: "search",
    RouteKind.PERPLEXITY: "search",
    RouteKind.VISION: "vision",
    RouteKind.N8N_PROXY: "n8n",
})


@dataclass(frozen=True)
class RouteDecision:
    kind: RouteKind
    sub_path: str | None = None

    @property
    def needs_quota(self) -> bool:
        return self.kind in ROUTE_NAMESPACES

    @property
    def namespace(self) -> str | None:
        return ROUTE_NAMESPACES.get(self.kind)


def classify(method: str, path: str, raw_path: bytes | None = None) -> RouteDecision:
    """Classify a request by path alone. `method` does not affect the result.

    `path` is the decoded request path, `raw_path` the bytes as sent on the
    wire (ASGI scope["raw_path"]). The n8n sub-path is built from the raw
    form so that escapes like %2F and %3F reach the webhook still encoded.
    Dot segments, literal or escaped, never classify as an n8n proxy.
    """
    kind = _EXACT_ROUTES.get(path)
    if kind is not None:
        return RouteDecision(kind)
    if path.startswith(N8N_PREFIX + "/"):
        sub_path = _webhook_path(path, raw_path)
        if sub_path is not None:
            return RouteDecision(RouteKind.N8N_PROXY, sub_path)
    return RouteDecision(RouteKind.NOT_FOUND)


def _webhook_path(path: str, raw_path: bytes | None) -> str | None:
    raw = quote_from_bytes(raw_path if raw_path else path.encode("utf-8"), safe=_RAW_PATH_SAFE)
    if not raw.startswith(N8N_PREFIX + "/"):
        return None
    if _has_dot_segment(path) or _has_dot_segment(unquote(raw)):
        return None
    return WEBHOOK_PREFIX + raw[len(N8N_PREFIX):]


def _has_dot_segment(path: str) -> bool:
    return any(seg in _DOT_SEGMENTS for seg in path.split("/"))


def build_policies(limits: Mapping[str, Mapping] | None = None) -> Mapping[str, RoutePolicy]:
    """Build the immutable namespace -> RoutePolicy table from config-shaped dicts."""
    limits = RATE_LIMITS if limits is None else limits
    return MappingProxyType({
        tag: RoutePolicy(int(spec["requests"]), int(spec["window_seconds"]))
        for tag, spec in limits.items()
    })
