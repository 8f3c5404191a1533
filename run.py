#  StyleMirror Gateway - Entry Point
#
#  Launches the FastAPI server via uvicorn.
#
#  Depends on: gateway/app.py, gateway/config.py, gateway/logging_config.py
#  Used by:    (run directly)

import sys

import uvicorn

from gateway.logging_config import setup_logging


def main():
    try:
        from gateway.config import cfg
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(
        level=cfg("server.log_level", "INFO"),
        fmt=cfg("server.log_format", "json"),
    )

    uvicorn.run(
        "gateway.app:app",
        host=cfg("server.host", "0.0.0.0"),
        port=cfg("server.port", 8787),
        reload=cfg("server.reload", False),
    )


if __name__ == "__main__":
    main()
