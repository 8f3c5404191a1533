#  StyleMirror Gateway - CORS Decoration
#
#  Resolves Access-Control-Allow-Origin against the configured allow-list
#  and builds the fixed CORS header set attached to every response.
#
#  Depends on: (none)
#  Used by:    container.py, services/gateway.py

from starlette.responses import Response

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type, Authorization, X-User-ID"
MAX_AGE = "86400"


class CorsPolicy:
    """Allow-list based CORS headers.

    An origin outside the list is answered with the first configured origin,
    never echoed back, unless the list contains "*".
    """

    def __init__(self, allowed_origins: list[str]):
        if not allowed_origins:
            raise ValueError("CorsPolicy needs at least one allowed origin")
        self._allowed = list(allowed_origins)

    @classmethod
    def from_string(cls, raw: str) -> "CorsPolicy":
        return cls([o.strip() for o in raw.split(",") if o.strip()])

    def resolve_origin(self, origin: str) -> str:
        if "*" in self._allowed or origin in self._allowed:
            return origin
        return self._allowed[0]

    def headers(self, origin: str) -> dict[str, str]:
        return {
            "Access-Control-Allow-Origin": self.resolve_origin(origin),
            "Access-Control-Allow-Methods": ALLOW_METHODS,
            "Access-Control-Allow-Headers": ALLOW_HEADERS,
            "Access-Control-Max-Age": MAX_AGE,
        }

    def apply(self, response: Response, origin: str) -> Response:
        """Overlay CORS headers, replacing any same-named headers already set."""
        for name, value in self.headers(origin).items():
            response.headers[name] = value
        return response
