#  StyleMirror Gateway - Enums
#
#  Route and store enumerations used across the system.
#
#  Depends on: (none)
#  Used by:    services/routing.py, services/gateway.py, container.py

from enum import Enum


class RouteKind(str, Enum):
    HEALTH = "health"
    SEARCH = "search"
    VISION = "vision"
    PERPLEXITY = "perplexity"
    N8N_PROXY = "n8n_proxy"
    NOT_FOUND = "not_found"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"
