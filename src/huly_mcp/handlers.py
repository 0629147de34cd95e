"""MCP tool handlers.

Every handler follows the same pattern:
- Accept: validated arguments (a ``schemas`` model) and the ``GatewayContext``
- Delegate all remote work to ``ctx.bridge`` (class paths are resolved there)
- Return: the response text; ``tool_operation`` turns it into a tool result
  and turns any exception into an error payload

Multi-step handlers issue their remote calls strictly in sequence and do not
roll back earlier steps when a later one fails.
"""
import logging
from typing import Optional

from . import formatters, schemas
from .bridge import DocumentBridge
from .context import GatewayContext
from .envelope import ToolHandler, tool_operation
from .errors import DocumentNotFoundError, HulyMCPError
from .platform import PRIORITY_BY_NAME, IssuePriority, Ref, SortingOrder, generate_id, make_rank

logger = logging.getLogger("huly-mcp.handlers")

PROJECT = "tracker.class.Project"
ISSUE = "tracker.class.Issue"
ISSUE_STATUS = "tracker.class.IssueStatus"
ISSUE_TASK_TYPE = "tracker.taskTypes.Issue"
PROJECT_TYPE = "task.class.ProjectType"
MODEL_SPACE = "core.space.Space"


# ============================================================================
# Lookup helpers
# ============================================================================

def class_of(bridge: DocumentBridge, doc: dict, default_path: str) -> Ref:
    """The remote class of ``doc``, falling back to a known class path."""
    if doc.get("_class"):
        return Ref(doc["_class"])
    return bridge.resolve_class(default_path)


async def _find_project(bridge: DocumentBridge, identifier: str, with_type: bool = False) -> dict:
    options = {"lookup": {"type": bridge.resolve_class(PROJECT_TYPE)}} if with_type else None
    project = await bridge.find_one(PROJECT, {"identifier": identifier}, options)
    if not project:
        raise DocumentNotFoundError(f"Project '{identifier}' not found")
    return project


async def _find_issue(bridge: DocumentBridge, identifier: str) -> dict:
    issue = await bridge.find_one(ISSUE, {"identifier": identifier})
    if not issue:
        raise DocumentNotFoundError(f"Issue '{identifier}' not found")
    return issue


async def _issue_description(bridge: DocumentBridge, issue: dict, default: Optional[str]) -> Optional[str]:
    """Fetch the markdown description of ``issue``, or ``default`` when it has none."""
    if not issue.get("description"):
        return default
    return await bridge.fetch_markup(
        class_of(bridge, issue, ISSUE), issue["_id"], "description", issue["description"], "markdown"
    )


# ============================================================================
# Issue and project tools
# ============================================================================

@tool_operation("listing issues", schemas.ListIssuesArgs)
async def handle_list_issues(args: schemas.ListIssuesArgs, ctx: GatewayContext) -> str:
    """List issues in a project with a short description preview."""
    bridge = ctx.bridge
    project = await _find_project(bridge, args.project_identifier, with_type=True)

    order = SortingOrder.ASCENDING if args.sort_order == "asc" else SortingOrder.DESCENDING
    issues = await bridge.find_all(
        ISSUE,
        {"space": project["_id"]},
        {"limit": args.limit, "sort": {args.sort_by: order}},
    )

    entries = []
    for issue in issues:
        description = await _issue_description(bridge, issue, "No description")
        entries.append(formatters.format_issue_summary(issue, description))
    logger.info(f"Listed {len(issues)} issues in project {project['identifier']}")

    return f"Found {len(issues)} issues in project '{project['identifier']}':\n\n" + "\n".join(entries)


@tool_operation("creating issue", schemas.CreateIssueArgs)
async def handle_create_issue(args: schemas.CreateIssueArgs, ctx: GatewayContext) -> str:
    """Create an issue: bump the project sequence, rank it last, attach it to the project.

    Steps run in order; a failure part-way leaves earlier steps applied
    (e.g. a consumed sequence number).
    """
    bridge = ctx.bridge
    project = await _find_project(bridge, args.project_identifier)
    project_id = Ref(project["_id"])
    issue_id = generate_id()

    inc_result = await bridge.update_doc(PROJECT, MODEL_SPACE, project_id, {"$inc": {"sequence": 1}}, retrieve=True)
    try:
        sequence = inc_result["object"]["sequence"]
    except (KeyError, TypeError):
        raise HulyMCPError(f"Huly did not return the next sequence number for project '{args.project_identifier}'")

    last_issue = await bridge.find_one(ISSUE, {"space": project_id}, {"sort": {"rank": SortingOrder.DESCENDING}})

    description_ref = None
    if args.description:
        description_ref = await bridge.upload_markup(ISSUE, issue_id, "description", args.description)

    identifier = f"{project['identifier']}-{sequence}"
    attributes = {
        "title": args.title,
        "description": description_ref,
        "status": project.get("defaultIssueStatus"),
        "number": sequence,
        "kind": bridge.resolve_class(ISSUE_TASK_TYPE),
        "identifier": identifier,
        "priority": PRIORITY_BY_NAME.get(args.priority, IssuePriority.MEDIUM),
        "assignee": args.assignee,
        "component": None,
        "estimation": 0,
        "remainingTime": 0,
        "reportedTime": 0,
        "reports": 0,
        "subIssues": 0,
        "parents": [],
        "childInfo": [],
        "dueDate": None,
        "rank": make_rank(last_issue.get("rank") if last_issue else None, None),
    }
    await bridge.add_collection(
        ISSUE, project_id, project_id, class_of(bridge, project, PROJECT), "issues", attributes, issue_id
    )

    created = await bridge.find_one(ISSUE, {"_id": issue_id})
    created_identifier = created.get("identifier", identifier) if created else "unknown"
    logger.info(f"Created issue {created_identifier} in project {args.project_identifier}")

    return (f"Successfully created issue: {created_identifier}\n"
            f"Title: {args.title}\n"
            f"Priority: {args.priority}\n"
            f"Project: {args.project_identifier}")


@tool_operation("listing projects", schemas.ListProjectsArgs)
async def handle_list_projects(args: schemas.ListProjectsArgs, ctx: GatewayContext) -> str:
    """List projects with their project type."""
    bridge = ctx.bridge
    projects = await bridge.find_all(
        PROJECT, {}, {"limit": args.limit, "lookup": {"type": bridge.resolve_class(PROJECT_TYPE)}}
    )
    logger.info(f"Listed {len(projects)} projects")

    entries = "\n".join(formatters.format_project_summary(project) for project in projects)
    return f"Found {len(projects)} projects:\n\n{entries}"


@tool_operation("getting issue details", schemas.GetIssueArgs)
async def handle_get_issue(args: schemas.GetIssueArgs, ctx: GatewayContext) -> str:
    issue = await _find_issue(ctx.bridge, args.issue_identifier)
    description = await _issue_description(ctx.bridge, issue, "No description")
    return formatters.format_issue_details(issue, description)


@tool_operation("updating issue", schemas.UpdateIssueArgs)
async def handle_update_issue(args: schemas.UpdateIssueArgs, ctx: GatewayContext) -> str:
    """Update title, description, priority or assignee of an issue."""
    bridge = ctx.bridge
    issue = await _find_issue(bridge, args.issue_identifier)

    operations: dict = {}
    if args.title is not None:
        operations["title"] = args.title
    if args.priority is not None:
        operations["priority"] = PRIORITY_BY_NAME[args.priority]
    if args.assignee is not None:
        operations["assignee"] = args.assignee
    if args.description is not None:
        operations["description"] = await bridge.upload_markup(
            class_of(bridge, issue, ISSUE), issue["_id"], "description", args.description
        )
    if not operations:
        raise HulyMCPError("No fields to update")

    await bridge.update_doc(class_of(bridge, issue, ISSUE), Ref(issue["space"]), issue["_id"], operations)
    logger.info(f"Updated issue {args.issue_identifier}: {', '.join(operations)}")

    return f"Updated issue {args.issue_identifier}\nChanged fields: {', '.join(operations)}"


@tool_operation("changing issue status", schemas.ChangeIssueStatusArgs)
async def handle_change_issue_status(args: schemas.ChangeIssueStatusArgs, ctx: GatewayContext) -> str:
    """Move an issue to another status.

    Workflow transition rules are not checked; any existing status is accepted.
    """
    bridge = ctx.bridge
    issue = await _find_issue(bridge, args.issue_identifier)

    status = await bridge.find_one(ISSUE_STATUS, {"name": args.status})
    if not status:
        status = await bridge.find_one(ISSUE_STATUS, {"_id": args.status})
    if not status:
        raise DocumentNotFoundError(f"Status '{args.status}' not found")

    await bridge.update_doc(
        class_of(bridge, issue, ISSUE), Ref(issue["space"]), issue["_id"], {"status": status["_id"]}
    )
    logger.info(f"Changed status of {args.issue_identifier} to {status['_id']}")

    return (f"Changed status of {args.issue_identifier}\n"
            f"From: {issue.get('status')}\n"
            f"To: {status.get('name') or status['_id']}")


@tool_operation("checking connection", schemas.ConnectionStatusArgs)
async def handle_connection_status(args: schemas.ConnectionStatusArgs, ctx: GatewayContext) -> str:
    """Report the connection state without connecting."""
    connection = ctx.connection
    connected = connection.is_connected()
    ping_result = await connection.ping() if args.ping and connected else None

    lines = ["Connection Status:", f"Connected: {str(connected).lower()}"]
    if ping_result is not None:
        lines.append(f"Ping successful: {str(ping_result).lower()}")
    lines.append(f"Server URL: {ctx.settings.url}")
    lines.append(f"Workspace: {ctx.settings.workspace}")
    return "\n".join(lines)


# ============================================================================
# Generic document tools
# ============================================================================

@tool_operation("finding document", schemas.FindArgs)
async def handle_find_one(args: schemas.FindArgs, ctx: GatewayContext) -> str:
    document = await ctx.bridge.find_one(args.class_name, args.query, args.options)
    if not document:
        return "No document found matching the criteria"
    return f"Document found:\n{formatters.format_json(document)}"


@tool_operation("finding documents", schemas.FindArgs)
async def handle_find_all(args: schemas.FindArgs, ctx: GatewayContext) -> str:
    documents = await ctx.bridge.find_all(args.class_name, args.query, args.options)
    return f"Found {len(documents)} documents:\n{formatters.format_json(documents)}"


@tool_operation("creating document", schemas.CreateDocArgs)
async def handle_create_doc(args: schemas.CreateDocArgs, ctx: GatewayContext) -> str:
    created_id = await ctx.bridge.create_doc(args.class_name, args.space_name, args.attributes, args.id)
    return (f"Document created successfully with ID: {created_id}\n"
            f"Class: {args.class_name}\n"
            f"Space: {args.space_name}\n"
            f"Attributes: {formatters.format_json(args.attributes)}")


@tool_operation("updating document", schemas.UpdateDocArgs)
async def handle_update_doc(args: schemas.UpdateDocArgs, ctx: GatewayContext) -> str:
    result = await ctx.bridge.update_doc(
        args.class_name, args.space_name, args.object_id, args.operations, args.retrieve
    )
    return (f"Document updated successfully\n"
            f"ID: {args.object_id}\n"
            f"Operations: {formatters.format_json(args.operations)}\n"
            f"Result: {formatters.format_json(result)}")


@tool_operation("removing document", schemas.RemoveDocArgs)
async def handle_remove_doc(args: schemas.RemoveDocArgs, ctx: GatewayContext) -> str:
    await ctx.bridge.remove_doc(args.class_name, args.space_name, args.object_id)
    return (f"Document removed successfully\n"
            f"ID: {args.object_id}\n"
            f"Class: {args.class_name}\n"
            f"Space: {args.space_name}")


@tool_operation("adding to collection", schemas.AddCollectionArgs)
async def handle_add_collection(args: schemas.AddCollectionArgs, ctx: GatewayContext) -> str:
    created_id = await ctx.bridge.add_collection(
        args.class_name, args.space_name, args.attached_to, args.attached_to_class,
        args.collection, args.attributes, args.id,
    )
    return (f"Collection item created successfully\n"
            f"ID: {created_id}\n"
            f"Attached to: {args.attached_to}\n"
            f"Collection: {args.collection}\n"
            f"Attributes: {formatters.format_json(args.attributes)}")


@tool_operation("updating collection", schemas.UpdateCollectionArgs)
async def handle_update_collection(args: schemas.UpdateCollectionArgs, ctx: GatewayContext) -> str:
    await ctx.bridge.update_collection(
        args.class_name, args.space_name, args.object_id, args.attached_to,
        args.attached_to_class, args.collection, args.attributes,
    )
    return (f"Collection item updated successfully\n"
            f"ID: {args.object_id}\n"
            f"Collection: {args.collection}\n"
            f"Updated attributes: {formatters.format_json(args.attributes)}")


@tool_operation("removing from collection", schemas.RemoveCollectionArgs)
async def handle_remove_collection(args: schemas.RemoveCollectionArgs, ctx: GatewayContext) -> str:
    await ctx.bridge.remove_collection(
        args.class_name, args.space_name, args.object_id, args.attached_to,
        args.attached_to_class, args.collection,
    )
    return (f"Collection item removed successfully\n"
            f"ID: {args.object_id}\n"
            f"Collection: {args.collection}\n"
            f"Removed from: {args.attached_to}")


@tool_operation("creating mixin", schemas.MixinArgs)
async def handle_create_mixin(args: schemas.MixinArgs, ctx: GatewayContext) -> str:
    await ctx.bridge.create_mixin(args.object_id, args.object_class, args.object_space, args.mixin, args.attributes)
    return (f"Mixin created successfully\n"
            f"Object ID: {args.object_id}\n"
            f"Mixin: {args.mixin}\n"
            f"Attributes: {formatters.format_json(args.attributes)}")


@tool_operation("updating mixin", schemas.MixinArgs)
async def handle_update_mixin(args: schemas.MixinArgs, ctx: GatewayContext) -> str:
    await ctx.bridge.update_mixin(args.object_id, args.object_class, args.object_space, args.mixin, args.attributes)
    return (f"Mixin updated successfully\n"
            f"Object ID: {args.object_id}\n"
            f"Mixin: {args.mixin}\n"
            f"Updated attributes: {formatters.format_json(args.attributes)}")


# Map tool names to handler functions
TOOL_HANDLERS: dict[str, ToolHandler] = {
    # Issue and project tools
    "list-issues": handle_list_issues,
    "create-issue": handle_create_issue,
    "list-projects": handle_list_projects,
    "get-issue": handle_get_issue,
    "update-issue": handle_update_issue,
    "change-issue-status": handle_change_issue_status,
    "connection-status": handle_connection_status,
    # Generic document tools
    "find-one": handle_find_one,
    "find-all": handle_find_all,
    "create-doc": handle_create_doc,
    "update-doc": handle_update_doc,
    "remove-doc": handle_remove_doc,
    "add-collection": handle_add_collection,
    "update-collection": handle_update_collection,
    "remove-collection": handle_remove_collection,
    "create-mixin": handle_create_mixin,
    "update-mixin": handle_update_mixin,
}
