"""Huly MCP Server - Model Context Protocol gateway for the Huly platform.

This package exposes Huly's document API to AI assistants as MCP tools,
resources and prompts.

Modules:
- server: stdio MCP server implementation
- bridge: generic document operations on top of the connection
- classpath: dotted class-path resolution
- connection: the cached Huly session
- envelope: uniform tool result / error wrapping
- handlers: tool implementation handlers
- tools: MCP tool definitions
- formatters: response formatting utilities
"""

__version__ = "1.0.0"

# Export shared modules for use by other MCP transports
from . import formatters
from . import tools
from . import handlers

__all__ = ["formatters", "tools", "handlers", "__version__"]
