"""
Startup script for the MCP Senado stdio server (``mcp-senado``).

Speaks newline-delimited JSON-RPC on stdin/stdout; logs go to stderr. With
``MCP_TRANSPORT=http`` the HTTP server is started instead.
"""

import asyncio
import logging
import signal
import sys

from mcp_senado.config.settings import AppConfig, load_config
from mcp_senado.core.errors import ConfigurationError
from mcp_senado.core.stdio import StdioTransport
from mcp_senado.services import ServiceFactory
from mcp_senado.utils.logging_utils import configure_logging

from .http_server import serve

logger = logging.getLogger(__name__)


async def run_stdio(config: AppConfig, factory: ServiceFactory = None, reader=None, writer=None) -> None:
    """Serve MCP over stdio until EOF or a termination signal."""
    factory = factory or ServiceFactory(config)
    server = factory.initialize()
    transport = StdioTransport(server, reader=reader, writer=writer)

    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, transport.close)
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            # Signal handlers are only available on Unix main threads
            logger.debug(f"Cannot install handler for {sig.name}")

    await server.start()
    try:
        await transport.run()
    finally:
        logger.info("Shutting down stdio server...")
        for sig in installed:
            loop.remove_signal_handler(sig)
        await factory.shutdown()


def main() -> None:
    """Start the stdio server."""
    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        sys.exit(1)

    configure_logging(config.logging, service=config.server.name)

    if config.server.transport == "http":
        serve(config)
        return

    try:
        asyncio.run(run_stdio(config))
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error in stdio server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
