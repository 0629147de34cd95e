"""Huly MCP Server - Expose Huly project management to AI assistants."""
import asyncio
import logging
import signal
import sys
from typing import Optional

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import (
    CallToolResult,
    GetPromptResult,
    Prompt,
    ResourceTemplate,
    TextContent,
    Tool,
)
from pydantic import AnyUrl

from . import __version__
from . import handlers, prompts, resources, tools
from .config import HulySettings, get_settings
from .context import GatewayContext

logger = logging.getLogger("huly-mcp")


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr; stdout carries the MCP stdio protocol."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
        force=True
    )


def create_server(ctx: GatewayContext) -> Server:
    """Build the MCP server with every tool, resource and prompt bound to ``ctx``."""
    app = Server("huly-mcp-server", version=__version__)

    @app.list_tools()
    async def list_tools() -> list[Tool]:
        """List available MCP tools."""
        return tools.get_tools()

    # Arguments are validated by each handler's envelope so that invalid input
    # is reported like any other tool failure.
    @app.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: Optional[dict]) -> CallToolResult:
        """Dispatch a tool call to its handler."""
        logger.info(f"Tool call: {name} with arguments: {arguments}")
        handler = handlers.TOOL_HANDLERS.get(name)
        if handler is None:
            logger.warning(f"Unknown tool requested: {name}")
            return CallToolResult(content=[TextContent(type="text", text=f"Unknown tool: {name}")], isError=True)
        return await handler(arguments, ctx)

    @app.list_resource_templates()
    async def list_resource_templates() -> list[ResourceTemplate]:
        return resources.get_resource_templates()

    @app.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        return await resources.read_resource(str(uri), ctx)

    @app.list_prompts()
    async def list_prompts() -> list[Prompt]:
        return prompts.get_prompts()

    @app.get_prompt()
    async def get_prompt(name: str, arguments: Optional[dict[str, str]]) -> GetPromptResult:
        logger.info(f"Prompt request: {name} with arguments: {arguments}")
        return prompts.get_prompt(name, arguments)

    return app


async def serve(settings: HulySettings) -> None:
    """Run the MCP server over stdio until the client disconnects or a signal arrives."""
    ctx = GatewayContext.create(settings)
    app = create_server(ctx)

    main_task = asyncio.current_task()
    loop = asyncio.get_running_loop()
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, main_task.cancel)

    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    except asyncio.CancelledError:
        logger.info("Shutting down Huly MCP Server...")
    finally:
        await ctx.teardown()
        logger.info("Huly MCP Server stopped")


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info(f"MCP Server starting with HULY_URL: {settings.url}")
    logger.info(f"Workspace: {settings.workspace}")
    if settings.auth_method:
        logger.info(f"Authentication method: {settings.auth_method}")
    else:
        logger.warning("No HULY_TOKEN or HULY_EMAIL/HULY_PASSWORD found; tool calls will fail until configured")

    try:
        asyncio.run(serve(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
