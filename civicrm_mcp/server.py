"""
MCP Server - How the agent talks to CiviCRM.

MCP (Model Context Protocol) is the phone line between the agent host and
this server. Two requests arrive over it:

1. list_tools - "What can you do?"  -> the static registry in tools.py
2. call_tool  - "Do this one thing" -> a handler from handlers.py

Calls are handled one at a time over stdio. An unknown tool is answered with
a JSON-RPC METHOD_NOT_FOUND error. Handler failures are logged and come back
as an error result ("Tool execution failed: ..."); they never take the
process down. Only a missing configuration at startup does that.
"""

import sys
import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from mcp.types import (
    CallToolRequest,
    ErrorData,
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    TextContent,
    Tool,
)

from civicrm_mcp import __version__
from civicrm_mcp.client import CiviCRMClient
from civicrm_mcp.config import Config, load_config
from civicrm_mcp.custom_fields import CustomFieldResolver
from civicrm_mcp.errors import ConfigurationError
from civicrm_mcp.handlers import HANDLERS
from civicrm_mcp.tools import TOOLS


# Logs go to stderr; stdout carries the MCP JSON-RPC stream.
logger = logging.getLogger("civicrm_mcp")
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

log = logging.getLogger("civicrm_mcp.server")


# Create the MCP server
server = Server("civicrm", version=__version__)

# One client and one resolver per process (lazy - created on first use)
_client: CiviCRMClient | None = None
_resolver: CustomFieldResolver | None = None


def configure(config: Config) -> None:
    """Create the process-wide client and resolver from a validated config."""
    global _client, _resolver
    logger.setLevel(getattr(logging, config.log_level, logging.INFO))
    _client = CiviCRMClient(config)
    _resolver = CustomFieldResolver(_client)


def get_client() -> CiviCRMClient:
    """Get the CiviCRM client, configuring from the environment if needed."""
    if _client is None:
        configure(load_config().validate())
    return _client


def get_resolver() -> CustomFieldResolver:
    """Get the custom field resolver shared by every handler."""
    if _resolver is None:
        get_client()
    return _resolver


# =============================================================================
# TOOL DISCOVERY
# =============================================================================

@server.list_tools()
async def list_tools() -> list[Tool]:
    """Tell the host what tools are available."""
    return TOOLS


# =============================================================================
# TOOL DISPATCH
# =============================================================================

@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    """Run one tool and return its text.

    Raises:
        McpError: METHOD_NOT_FOUND for an unknown tool, INTERNAL_ERROR
            (carrying the original message) for anything a handler raised
    """
    handler = HANDLERS.get(name)
    if handler is None:
        raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))

    log.info(f"{name} called")
    try:
        text = await handler(get_client(), get_resolver(), arguments or {})
    except McpError:
        raise
    except Exception as e:
        log.error(f"Tool execution error in {name}: {e}", exc_info=True)
        raise McpError(ErrorData(code=INTERNAL_ERROR, message=f"Tool execution failed: {e}")) from e

    return [TextContent(type="text", text=text)]


# The SDK's call_tool wrapper turns every exception into an isError result.
# Unknown tools must surface as a JSON-RPC METHOD_NOT_FOUND error instead, so
# they are rejected here before the wrapper runs.
_run_tool_request = server.request_handlers[CallToolRequest]


async def handle_call_tool_request(req: CallToolRequest):
    name = req.params.name
    if name not in HANDLERS:
        log.warning(f"Unknown tool requested: {name}")
        raise McpError(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))
    return await _run_tool_request(req)


server.request_handlers[CallToolRequest] = handle_call_tool_request


# =============================================================================
# SERVER STARTUP
# =============================================================================

def serve():
    """Start the MCP server.

    Reads configuration first; if the API key or base URL is missing the
    process exits with status 1 before serving anything. Uses stdio
    (standard input/output) to communicate.
    """
    try:
        config = load_config().validate()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    configure(config)

    async def main():
        try:
            async with stdio_server() as (read_stream, write_stream):
                log.info(f"CiviCRM MCP server {__version__} running on stdio ({config.base_url})")
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options()
                )
        finally:
            await get_client().aclose()

    asyncio.run(main())


if __name__ == "__main__":
    serve()
