#  StyleMirror Gateway - Custom Exceptions
#
#  Typed exception hierarchy so the gateway can map failures to HTTP
#  status codes without pattern-matching on message strings.
#
#  Depends on: (none)
#  Used by:    forwarders/*, services/counter_store.py, services/gateway.py

class GatewayError(Exception):
    """Base exception for all gateway errors that map to a client response."""

    status_code: int = 500


class ValidationError(GatewayError):
    """Required field or query parameter is missing or malformed."""

    status_code = 400


class MethodNotAllowedError(GatewayError):
    """Wrong HTTP verb for a POST-only route."""

    status_code = 405


class NotFoundError(GatewayError):
    """No route matches the request path."""

    status_code = 404


class RateLimitExceededError(GatewayError):
    """Client used up its budget for the current window."""

    status_code = 429


class UpstreamError(GatewayError):
    """A forwarded call failed or returned something unusable."""

    status_code = 502

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class UpstreamTimeoutError(UpstreamError):
    """A forwarded call did not complete within the configured timeout."""

    status_code = 504


class StoreUnavailableError(GatewayError):
    """Counter store could not be reached. Requests fail rather than bypass limits."""

    status_code = 503
