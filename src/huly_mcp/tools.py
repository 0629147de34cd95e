"""MCP tool definitions.

Input schemas are generated from the argument models in ``schemas`` so the
advertised schema and the validation applied by the handlers cannot drift.
"""
from mcp.types import Tool
from pydantic import BaseModel

from . import schemas


def _input_schema(model: type[BaseModel]) -> dict:
    schema = model.model_json_schema(by_alias=True)
    schema.pop("title", None)
    return schema


def get_tools() -> list[Tool]:
    """Get the list of all MCP tools exposed by the gateway."""
    return [
        # ============================================================================
        # Issue and Project Tools
        # ============================================================================
        Tool(
            name="list-issues",
            title="List Issues",
            description="List issues in a Huly project. "
                        "Common pattern: list-projects() → pick an identifier → list-issues(projectIdentifier=...).",
            inputSchema=_input_schema(schemas.ListIssuesArgs),
        ),
        Tool(
            name="create-issue",
            title="Create Issue",
            description="Create a new issue in a Huly project. "
                        "The issue gets the next project sequence number (e.g. HULY-124) and is ranked last.",
            inputSchema=_input_schema(schemas.CreateIssueArgs),
        ),
        Tool(
            name="list-projects",
            title="List Projects",
            description="List all Huly projects with their identifier, type and visibility.",
            inputSchema=_input_schema(schemas.ListProjectsArgs),
        ),
        Tool(
            name="get-issue",
            title="Get Issue Details",
            description="Get detailed information about a specific issue, including its full description.",
            inputSchema=_input_schema(schemas.GetIssueArgs),
        ),
        Tool(
            name="update-issue",
            title="Update Issue",
            description="Update the title, description, priority or assignee of an issue. "
                        "Only the fields provided are changed.",
            inputSchema=_input_schema(schemas.UpdateIssueArgs),
        ),
        Tool(
            name="change-issue-status",
            title="Change Issue Status",
            description="Move an issue to another status, given by name or ID. "
                        "Workflow transition rules are not enforced.",
            inputSchema=_input_schema(schemas.ChangeIssueStatusArgs),
        ),
        Tool(
            name="connection-status",
            title="Connection Status",
            description="Check the current connection status to Huly. Does not open a connection.",
            inputSchema=_input_schema(schemas.ConnectionStatusArgs),
        ),
        # ============================================================================
        # Generic Document Tools
        # ============================================================================
        Tool(
            name="find-one",
            title="Find One Document",
            description="Find a single document by class and query criteria. "
                        "Class names use the form 'module.kind.Name' (e.g. 'tracker.class.Issue').",
            inputSchema=_input_schema(schemas.FindArgs),
        ),
        Tool(
            name="find-all",
            title="Find All Documents",
            description="Find multiple documents by class and query criteria.",
            inputSchema=_input_schema(schemas.FindArgs),
        ),
        Tool(
            name="create-doc",
            title="Create Document",
            description="Create a new document in the specified space. "
                        "A fresh ID is generated when none is given.",
            inputSchema=_input_schema(schemas.CreateDocArgs),
        ),
        Tool(
            name="update-doc",
            title="Update Document",
            description="Update an existing document. Operations may include '$inc' style instructions.",
            inputSchema=_input_schema(schemas.UpdateDocArgs),
        ),
        Tool(
            name="remove-doc",
            title="Remove Document",
            description="Remove an existing document.",
            inputSchema=_input_schema(schemas.RemoveDocArgs),
        ),
        Tool(
            name="add-collection",
            title="Add Collection Item",
            description="Create a new attached document in a collection of a parent document.",
            inputSchema=_input_schema(schemas.AddCollectionArgs),
        ),
        Tool(
            name="update-collection",
            title="Update Collection Item",
            description="Update an existing attached document in a collection.",
            inputSchema=_input_schema(schemas.UpdateCollectionArgs),
        ),
        Tool(
            name="remove-collection",
            title="Remove Collection Item",
            description="Remove an existing attached document from a collection.",
            inputSchema=_input_schema(schemas.RemoveCollectionArgs),
        ),
        Tool(
            name="create-mixin",
            title="Create Mixin",
            description="Create a new mixin for a specified document.",
            inputSchema=_input_schema(schemas.MixinArgs),
        ),
        Tool(
            name="update-mixin",
            title="Update Mixin",
            description="Update an existing mixin on a document.",
            inputSchema=_input_schema(schemas.MixinArgs),
        ),
    ]
