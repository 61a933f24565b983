#!/usr/bin/env python3
"""Script to run the HTTP API.

This script loads the configuration, configures logging and serves the
FastAPI application with uvicorn.
"""

import argparse
import sys

import structlog
import uvicorn

from dbsync.api.app import create_app
from dbsync.utils.config_loader import ConfigLoader, ConfigurationError
from dbsync.utils.logging_config import configure_logging

log = structlog.stdlib.get_logger()


def parse_arguments() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the dbsync HTTP API")
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to configuration file")
    parser.add_argument("--host", type=str, default=None, help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config)")
    return parser.parse_args()


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    args = parse_arguments()

    try:
        config = ConfigLoader().load_config(args.config)
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        return 1

    configure_logging(
        log_level=config.logging.log_level,
        json_logs=config.logging.json_logs,
        log_file=config.logging.log_file,
    )

    host = args.host or config.server.host
    port = args.port or config.server.port

    try:
        app = create_app(config)
    except Exception as e:
        log.error("app_creation_failed", error=str(e))
        print(f"❌ Error creating application: {e}")
        return 1

    log.info("starting_http_server", host=host, port=port, api_prefix=config.server.api_prefix)
    print("🚀 Starting dbsync API...")
    print(f"   URL: http://{host}:{port}{config.server.api_prefix}")
    print("\nPress Ctrl+C to stop the server\n")

    # uvicorn handles Ctrl+C itself and returns normally
    uvicorn.run(app, host=host, port=port, log_config=None)
    log.info("http_server_stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
