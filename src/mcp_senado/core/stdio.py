"""
Stdio transport: newline-delimited JSON-RPC over stdin/stdout.
"""

import asyncio
import json
import logging
import sys
from typing import Any, Optional, TextIO, Union

from .protocol import parse_error_response, process_mcp_request

logger = logging.getLogger(__name__)

# Largest accepted message line, same as the HTTP body limit
MAX_MESSAGE_BYTES = 10 * 1024 * 1024


class StdioTransport:
    """
    Reads one JSON-RPC message per line and writes one response per line.

    Undecodable or oversized lines are answered with a parse error and the
    transport carries on with the next line.

    Args:
        server: ``SenadoMCPServer`` answering requests
        reader: Input stream, connected to stdin by ``connect_stdin`` when omitted
        writer: Output text stream, stdout by default
    """

    def __init__(self, server, reader: Optional[asyncio.StreamReader] = None, writer: Optional[TextIO] = None):
        self.server = server
        self.reader = reader
        self.writer = writer or sys.stdout
        self._closing = False

    async def connect_stdin(self) -> asyncio.StreamReader:
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=MAX_MESSAGE_BYTES)
        protocol = asyncio.StreamReaderProtocol(reader)
        await loop.connect_read_pipe(lambda: protocol, sys.stdin)
        self.reader = reader
        return reader

    def close(self) -> None:
        """Stop after the message being processed."""
        self._closing = True
        if self.reader is not None:
            self.reader.feed_eof()

    def send(self, message: Any) -> None:
        self.writer.write(json.dumps(message, ensure_ascii=False) + "\n")
        self.writer.flush()

    async def handle_line(self, line: Union[bytes, str]) -> Optional[dict]:
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError as e:
                logger.warning("Discarded message that is not valid UTF-8")
                return parse_error_response(str(e))

        line = line.strip()
        if not line:
            return None

        try:
            payload = json.loads(line)
        except ValueError as e:
            return parse_error_response(str(e))

        return await process_mcp_request(payload, self.server)

    async def _skip_line(self) -> None:
        """Drop input up to and including the next newline."""
        while True:
            try:
                await self.reader.readuntil(b"\n")
                return
            except asyncio.LimitOverrunError as e:
                await self.reader.readexactly(e.consumed)
            except asyncio.IncompleteReadError:
                return

    async def run(self) -> None:
        """Serve requests until stdin reaches EOF or ``close`` is called."""
        if self.reader is None:
            await self.connect_stdin()

        logger.info("Stdio transport ready")
        while not self._closing:
            try:
                raw = await self.reader.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                # Last line without a trailing newline, empty at EOF
                raw = e.partial
                if not raw:
                    break
            except asyncio.LimitOverrunError:
                await self._skip_line()
                logger.warning("Discarded message larger than the stream limit")
                self.send(parse_error_response("Message exceeds the maximum line length"))
                continue

            response = await self.handle_line(raw)
            if response is not None:
                self.send(response)
        logger.info("Stdio transport closed")
