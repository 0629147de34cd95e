"""Operation envelope shared by every MCP tool.

A tool handler is an async function ``(args, ctx) -> str``. Wrapping it with
``tool_operation`` gives it the uniform contract the MCP layer relies on:

- raw arguments are validated against the tool's pydantic model
- the body runs under the per-operation deadline
- returned text becomes a single ``TextContent`` block
- any exception becomes ``"Error <action>: <message>"`` with ``isError`` set

Nothing raised inside a tool body reaches the protocol transport.
"""
import asyncio
import functools
import logging
import traceback
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, TypeVar

from mcp.types import CallToolResult, TextContent
from pydantic import BaseModel

from .errors import HulyMCPError

if TYPE_CHECKING:
    from .context import GatewayContext

logger = logging.getLogger("huly-mcp.envelope")

ArgsT = TypeVar("ArgsT", bound=BaseModel)
ToolBody = Callable[[ArgsT, "GatewayContext"], Awaitable[str]]
ToolHandler = Callable[[Optional[dict], "GatewayContext"], Awaitable[CallToolResult]]


def error_message(error: BaseException) -> str:
    """Best human-readable message for ``error``."""
    if isinstance(error, HulyMCPError):
        return error.message
    return str(error) or type(error).__name__


def success(text: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)])


def failure(action: str, message: str) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=f"Error {action}: {message}")], isError=True)


def tool_operation(action: str, schema: type[ArgsT]) -> Callable[[ToolBody], ToolHandler]:
    """Wrap a tool body in the operation envelope.

    Args:
        action: phrase completing "Error ...", e.g. "finding document"
        schema: pydantic model the raw arguments are validated against
    """

    def decorator(func: ToolBody) -> ToolHandler:
        @functools.wraps(func)
        async def handler(arguments: Optional[dict], ctx: "GatewayContext") -> CallToolResult:
            timeout_ms = ctx.settings.operation_timeout
            try:
                args = schema.model_validate(arguments or {})
                body = asyncio.ensure_future(func(args, ctx))
                try:
                    done, _ = await asyncio.wait({body}, timeout=timeout_ms / 1000)
                except asyncio.CancelledError:
                    body.cancel()
                    raise
                if not done:
                    # Deadline expired; the body is abandoned.
                    body.cancel()
                    body.add_done_callback(_discard_result)
                    logger.error(f"{func.__name__} timed out after {timeout_ms} ms")
                    return failure(action, f"Operation timed out after {timeout_ms} ms")
                text = body.result()
            except Exception as e:
                _log_failure(func.__name__, arguments, e)
                return failure(action, error_message(e))
            return success(text)

        handler.schema = schema
        handler.action = action
        return handler

    return decorator


def _log_failure(name: str, arguments: Any, error: Exception) -> None:
    if isinstance(error, HulyMCPError):
        # Expected failures: bad input, missing records, remote rejections
        logger.warning(f"{name} failed: {type(error).__name__}: {error_message(error)}")
        return
    logger.error(f"Unexpected error during {name}:")
    logger.error(f"  Error type: {type(error).__name__}")
    logger.error(f"  Error message: {error}")
    logger.error(f"  Arguments: {arguments}")
    logger.error(f"  Traceback:\n{traceback.format_exc()}")


def _discard_result(task: "asyncio.Future") -> None:
    if not task.cancelled():
        task.exception()
