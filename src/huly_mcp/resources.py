"""MCP resources: read-only JSON views of projects and issues.

Unlike tools, resource reads fail fast: lookup errors are raised as
``ResourceLookupError`` and reported by the MCP host as protocol errors.
"""
import logging
import re
from typing import Awaitable, Callable
from urllib.parse import unquote

from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.types import ResourceTemplate

from . import formatters
from .context import GatewayContext
from .envelope import error_message
from .errors import ResourceLookupError
from .handlers import ISSUE, PROJECT, PROJECT_TYPE, class_of

logger = logging.getLogger("huly-mcp.resources")

JSON_MIME_TYPE = "application/json"

RESOURCE_URI = re.compile(r"^huly://(?P<kind>project|issue)/(?P<identifier>[^/?#]+)$")


def get_resource_templates() -> list[ResourceTemplate]:
    return [
        ResourceTemplate(
            uriTemplate="huly://project/{identifier}",
            name="project-info",
            title="Project Information",
            description="Detailed information about a Huly project",
            mimeType=JSON_MIME_TYPE,
        ),
        ResourceTemplate(
            uriTemplate="huly://issue/{identifier}",
            name="issue-details",
            title="Issue Details",
            description="Detailed information about a Huly issue",
            mimeType=JSON_MIME_TYPE,
        ),
    ]


async def _project_info(identifier: str, ctx: GatewayContext) -> dict:
    bridge = ctx.bridge
    project = await bridge.find_one(
        PROJECT, {"identifier": identifier}, {"lookup": {"type": bridge.resolve_class(PROJECT_TYPE)}}
    )
    if not project:
        raise ResourceLookupError(f"Project '{identifier}' not found")

    return {
        "identifier": project.get("identifier"),
        "name": project.get("name"),
        "description": project.get("description"),
        "type": formatters.project_type_name(project),
        "private": project.get("private"),
        "archived": project.get("archived"),
        "defaultIssueStatus": project.get("defaultIssueStatus"),
        "sequence": project.get("sequence"),
        "createdOn": project.get("createdOn"),
        "modifiedOn": project.get("modifiedOn"),
    }


async def _issue_details(identifier: str, ctx: GatewayContext) -> dict:
    bridge = ctx.bridge
    issue = await bridge.find_one(ISSUE, {"identifier": identifier})
    if not issue:
        raise ResourceLookupError(f"Issue '{identifier}' not found")

    description = None
    if issue.get("description"):
        description = await bridge.fetch_markup(
            class_of(bridge, issue, ISSUE), issue["_id"], "description", issue["description"], "markdown"
        )

    details = {"identifier": issue.get("identifier"), "title": issue.get("title"), "description": description}
    for field in ("priority", "status", "assignee", "estimation", "remainingTime", "reportedTime",
                  "number", "createdOn", "modifiedOn", "dueDate", "subIssues", "reports"):
        details[field] = issue.get(field)
    return details


# kind -> (reader, action phrase used in error messages)
_READERS: dict[str, tuple[Callable[[str, GatewayContext], Awaitable[dict]], str]] = {
    "project": (_project_info, "fetching project info"),
    "issue": (_issue_details, "fetching issue details"),
}


async def read_resource(uri: str, ctx: GatewayContext) -> list[ReadResourceContents]:
    """Read a ``huly://`` resource.

    Raises:
        ResourceLookupError: unknown URI, missing record, or any remote failure
    """
    match = RESOURCE_URI.match(uri)
    if not match:
        raise ResourceLookupError(f"Unknown resource: {uri}")

    reader, action = _READERS[match["kind"]]
    identifier = unquote(match["identifier"])
    logger.info(f"Resource read: {uri}")
    try:
        payload = await reader(identifier, ctx)
    except Exception as e:
        logger.error(f"Error {action} for {uri}: {error_message(e)}")
        raise ResourceLookupError(f"Error {action}: {error_message(e)}") from e

    return [ReadResourceContents(content=formatters.format_json(payload), mime_type=JSON_MIME_TYPE)]
