#  StyleMirror Gateway - Logging Configuration
#
#  Configures structured logging with JSON or text format.
#  Per-request context (request id, client, route, quota namespace) lives in
#  context variables and is stamped onto every record logged while a
#  request is in flight.
#
#  Depends on: (none)
#  Used by:    run.py, app.py, services/gateway.py

import contextvars
import json
import logging
import sys
import time
from contextlib import contextmanager

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
client_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("client_id", default=None)
route_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("route", default=None)
namespace_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("namespace", default=None)

# Output order of context fields in both formats
_CONTEXT_VARS: dict[str, contextvars.ContextVar] = {
    "request_id": request_id_var,
    "client_id": client_id_var,
    "route": route_var,
    "namespace": namespace_var,
}


def set_request_id(rid: str | None):
    request_id_var.set(rid)


@contextmanager
def request_context(**fields: str | None):
    """Bind context fields for the duration of the block.

    Only keys in _CONTEXT_VARS are accepted. Previous values are restored
    on exit, so nested blocks and concurrent requests do not leak.
    """
    unknown = set(fields) - set(_CONTEXT_VARS)
    if unknown:
        raise TypeError(f"Unknown log context fields: {sorted(unknown)}")
    tokens = [(_CONTEXT_VARS[k], _CONTEXT_VARS[k].set(v)) for k, v in fields.items()]
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def current_context() -> dict[str, str]:
    """The context fields that are currently set, in output order."""
    ctx = {}
    for key, var in _CONTEXT_VARS.items():
        value = var.get()
        if value:
            ctx[key] = value
    return ctx


class ContextFilter(logging.Filter):
    """Attach the request context to each record as `record.context`.

    Text output renders it as " key=value ..." after the message.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = current_context()
        record.context = "".join(f" {k}={v}" for k, v in ctx.items())
        record.context_fields = ctx
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; context fields sit at the top level."""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "context_fields", None) or current_context())
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


_TEXT_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s%(context)s"


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure the "gateway" logger tree.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        fmt: "json" for one object per line, "text" for human-readable.
    """
    root = logging.getLogger("gateway")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.addFilter(ContextFilter())
        if fmt == "json":
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt="%H:%M:%S"))
        root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
