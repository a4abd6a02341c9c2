"""
Startup script for the MCP Senado HTTP server (``mcp-senado-http``).

Runs the FastAPI application under uvicorn, which handles SIGTERM/SIGINT with
a graceful shutdown.
"""

import logging
import sys

import uvicorn

from mcp_senado.config.settings import load_config
from mcp_senado.core.errors import ConfigurationError
from mcp_senado.utils.logging_utils import configure_logging

logger = logging.getLogger(__name__)


def serve(config) -> None:
    logger.info(f"Starting {config.server.name} v{config.server.version} HTTP server...")
    logger.info(f"Environment: {config.environment}")
    logger.info(f"Host: {config.http.host}")
    logger.info(f"Port: {config.http.port}")
    logger.info(f"CORS Origins: {config.http.cors_origins if config.http.cors_enabled else 'disabled'}")
    logger.info(f"Authentication: {'enabled' if config.http.auth_enabled else 'disabled'}")

    uvicorn.run(
        "mcp_senado.api:create_app",
        factory=True,
        host=config.http.host,
        port=config.http.port,
        log_config=None,
        log_level=config.logging.level.lower(),
        access_log=False,
    )


def main() -> None:
    """Start the HTTP server."""
    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging, service=config.server.name)

    try:
        serve(config)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
