# gofast_planner/__main__.py
"""
Entry point for the gofast-planner MCP server.

CRITICAL: Server imports configure_logging() first to prevent stdout pollution.

FastMCP doesn't have built-in lifecycle hooks, so startup and shutdown are
handled here around the stdio transport.
"""

import asyncio
import logging

# Import server (which configures logging before anything else)
from gofast_planner.server import initialize_lifecycle, mcp

logger = logging.getLogger(__name__)


async def main() -> None:
    """Initialize lifecycle (DB + LLM client) and then run the MCP server."""
    lifecycle = await initialize_lifecycle()
    try:
        logger.info("Starting MCP server on stdio transport")
        await mcp.run_stdio_async()
    finally:
        await lifecycle.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
