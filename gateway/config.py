#  StyleMirror Gateway - Configuration
#
#  Loads config.json and provides typed access to all settings.
#  Dot-notation path lookup: cfg("upstream.timeout")
#  Provider credentials are read from the environment only.
#
#  Depends on: config.json
#  Used by:    all gateway modules

import json
import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Path resolution
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).parent.parent
CONFIG_PATH = PROJECT_ROOT / "config.json"

# ---------------------------------------------------------------------------
# Load config
# ---------------------------------------------------------------------------

_config: dict = {}


def _load_config(path: Path | None = None):
    """Load configuration from JSON file (internal, called once at import time).

    Module-level constants below are snapshots from _config.
    Do not call this function after import; constants won't update.
    """
    global _config
    config_path = path or CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}. "
            "Copy config.example.json to config.json."
        )
    with open(config_path) as f:
        _config = json.load(f)


# Auto-load if config exists at import time; every key has a default
if CONFIG_PATH.exists():
    _load_config()


def cfg(path: str, default=None):
    """Get a config value by dot-notation path.

    Example: cfg("rate_limits.search.requests") -> 100
    """
    keys = path.split(".")
    val = _config
    for key in keys:
        if isinstance(val, dict) and key in val:
            val = val[key]
        else:
            return default
    return val


def _split_origins(raw) -> list[str]:
    if isinstance(raw, (list, tuple)):
        return [str(o).strip() for o in raw if str(o).strip()]
    return [o.strip() for o in str(raw).split(",") if o.strip()]


# ---------------------------------------------------------------------------
# Convenience constants
# ---------------------------------------------------------------------------

HOST = cfg("server.host", "0.0.0.0")
PORT = cfg("server.port", 8787)

SERVICE_NAME = cfg("gateway.service_name", "stylemirror-api-gateway")
SERVICE_VERSION = cfg("gateway.version", "1.0.0")

# CORS (env var wins so deployments can change it without a config file)
ALLOWED_ORIGINS = _split_origins(
    os.environ.get("ALLOWED_ORIGINS") or cfg("gateway.allowed_origins", "http://localhost:5173")
)

# Provider credentials
SERPAPI_KEY = os.environ.get("SERPAPI_KEY", "")
OPENROUTER_KEY = os.environ.get("OPENROUTER_KEY", "")
PERPLEXITY_KEY = os.environ.get("PERPLEXITY_KEY", "")

# Upstreams
UPSTREAM_TIMEOUT = cfg("upstream.timeout", 30.0)
SERPAPI_URL = cfg("upstream.serpapi_url", "https://serpapi.com/search.json")
OPENROUTER_URL = cfg("upstream.openrouter_url", "https://openrouter.ai/api/v1/chat/completions")
OPENROUTER_REFERER = cfg("upstream.openrouter_referer", "https://stylemirror.app")
OPENROUTER_TITLE = cfg("upstream.openrouter_title", "StyleMirror Vision")
PERPLEXITY_URL = cfg("upstream.perplexity_url", "https://api.perplexity.ai/chat/completions")
N8N_BASE_URL = (os.environ.get("N8N_BASE_URL") or cfg("upstream.n8n_base_url", "")).rstrip("/")

# Default models
VISION_DEFAULT_MODEL = cfg("models.vision_default", "openai/gpt-4o-mini")
PERPLEXITY_DEFAULT_MODEL = cfg("models.perplexity_default", "sonar-pro")

# Counter store
COUNTER_STORE_BACKEND = cfg("counter_store.backend", "memory")
COUNTER_STORE_URL = os.environ.get("COUNTER_STORE_URL") or cfg("counter_store.redis_url", "")

# Rate limits: {namespace tag: {"requests": int, "window_seconds": int}}
_DEFAULT_RATE_LIMITS = {
    "search": {"requests": 100, "window_seconds": 3600},
    "vision": {"requests": 50, "window_seconds": 3600},
    "n8n": {"requests": 200, "window_seconds": 3600},
}
RATE_LIMITS: dict[str, dict] = {
    tag: {**defaults, **(cfg(f"rate_limits.{tag}", {}) or {})}
    for tag, defaults in _DEFAULT_RATE_LIMITS.items()
}


# ---------------------------------------------------------------------------
# Startup validation
# ---------------------------------------------------------------------------

def validate_config():
    """Validate critical config values. Call during app startup (not at import time).

    Raises ConfigError for fatal issues, logs warnings for non-fatal ones.
    """
    import logging
    _logger = logging.getLogger("gateway.config")

    # Fatal: port must be valid
    if not isinstance(PORT, int) or not (1 <= PORT <= 65535):
        raise ConfigError(f"server.port must be 1-65535, got {PORT}")

    # Fatal: timeout must be positive
    if not isinstance(UPSTREAM_TIMEOUT, (int, float)) or UPSTREAM_TIMEOUT <= 0:
        raise ConfigError(f"upstream.timeout must be > 0, got {UPSTREAM_TIMEOUT}")

    # Fatal: every policy needs positive integer fields
    for tag, policy in RATE_LIMITS.items():
        for field in ("requests", "window_seconds"):
            val = policy.get(field)
            if not isinstance(val, int) or isinstance(val, bool) or val <= 0:
                raise ConfigError(f"rate_limits.{tag}.{field} must be a positive integer, got {val!r}")

    # Fatal: store backend must be known and usable
    if COUNTER_STORE_BACKEND not in ("memory", "redis"):
        raise ConfigError(
            f"counter_store.backend must be 'memory' or 'redis', got '{COUNTER_STORE_BACKEND}'"
        )
    if COUNTER_STORE_BACKEND == "redis" and not COUNTER_STORE_URL:
        raise ConfigError(
            "counter_store.backend is 'redis' but no counter_store.redis_url "
            "or COUNTER_STORE_URL is set"
        )
    if COUNTER_STORE_BACKEND == "memory":
        _logger.warning(
            "Using in-memory counter store: rate limits are per-process "
            "and reset on restart"
        )

    # Fatal: CORS needs a fallback origin
    if not ALLOWED_ORIGINS:
        raise ConfigError("gateway.allowed_origins must list at least one origin")
    if "*" in ALLOWED_ORIGINS:
        _logger.warning("CORS origin '*' allows all origins, not recommended for production")

    # Warning: provider credentials not set (routes will fail upstream)
    for env_name, val in [("SERPAPI_KEY", SERPAPI_KEY),
                          ("OPENROUTER_KEY", OPENROUTER_KEY),
                          ("PERPLEXITY_KEY", PERPLEXITY_KEY)]:
        if not val:
            _logger.warning("%s is not set. Calls to that provider will be rejected upstream.", env_name)

    if not N8N_BASE_URL:
        _logger.warning("N8N_BASE_URL is not set. /api/n8n/* requests will fail with 502.")


class ConfigError(Exception):
    """Raised when critical configuration is invalid."""
