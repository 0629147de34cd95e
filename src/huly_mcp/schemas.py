"""Pydantic argument models for the MCP tools.

Field aliases are the camelCase names exposed in the tool input schemas.
Query, attribute and operation maps are deliberately untyped: their shape
belongs to the remote class being addressed.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolArgs(BaseModel):
    """Base for tool arguments: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ============================================================================
# Issue and project tools
# ============================================================================

class ListIssuesArgs(ToolArgs):
    project_identifier: str = Field(..., alias="projectIdentifier", description="Project identifier (e.g., 'HULY')")
    limit: int = Field(20, ge=1, description="Maximum number of issues to return")
    sort_by: Literal["modifiedOn", "createdOn", "title"] = Field(
        "modifiedOn", alias="sortBy", description="Field to sort by"
    )
    sort_order: Literal["asc", "desc"] = Field("desc", alias="sortOrder", description="Sort order")


class CreateIssueArgs(ToolArgs):
    project_identifier: str = Field(..., alias="projectIdentifier", description="Project identifier (e.g., 'HULY')")
    title: str = Field(..., min_length=1, description="Issue title")
    description: Optional[str] = Field(None, description="Issue description in markdown format")
    priority: Literal["Urgent", "High", "Normal", "Low"] = Field("Normal", description="Issue priority")
    assignee: Optional[str] = Field(None, description="Assignee person ID")


class ListProjectsArgs(ToolArgs):
    limit: int = Field(50, ge=1, description="Maximum number of projects to return")


class GetIssueArgs(ToolArgs):
    issue_identifier: str = Field(..., alias="issueIdentifier", description="Issue identifier (e.g., 'HULY-123')")


class UpdateIssueArgs(ToolArgs):
    issue_identifier: str = Field(..., alias="issueIdentifier", description="Issue identifier (e.g., 'HULY-123')")
    title: Optional[str] = Field(None, min_length=1, description="New issue title")
    description: Optional[str] = Field(None, description="New description in markdown format")
    priority: Optional[Literal["Urgent", "High", "Normal", "Low"]] = Field(None, description="New priority")
    assignee: Optional[str] = Field(None, description="New assignee person ID")


class ChangeIssueStatusArgs(ToolArgs):
    issue_identifier: str = Field(..., alias="issueIdentifier", description="Issue identifier (e.g., 'HULY-123')")
    status: str = Field(..., min_length=1, description="Target status name (e.g., 'In Progress') or status ID")


class ConnectionStatusArgs(ToolArgs):
    ping: bool = Field(False, description="Whether to perform a ping test")


# ============================================================================
# Generic document tools
# ============================================================================

class FindArgs(ToolArgs):
    class_name: str = Field(
        ..., alias="className",
        description="Full class name (e.g., 'tracker.class.Issue', 'contact.class.Person')",
    )
    query: dict[str, Any] = Field(..., description="Query criteria as JSON object")
    options: Optional[dict[str, Any]] = Field(
        None, description="Find options (limit, sort, lookup, projection)"
    )


class CreateDocArgs(ToolArgs):
    class_name: str = Field(..., alias="className", description="Full class name (e.g., 'contact.class.Person')")
    space_name: str = Field(..., alias="spaceName", description="Space name (e.g., 'contact.space.Contacts')")
    attributes: dict[str, Any] = Field(..., description="Document attributes as JSON object")
    id: Optional[str] = Field(None, description="Optional custom ID for the document")


class UpdateDocArgs(ToolArgs):
    class_name: str = Field(..., alias="className", description="Full class name")
    space_name: str = Field(..., alias="spaceName", description="Space name")
    object_id: str = Field(..., alias="objectId", description="ID of the object to update")
    operations: dict[str, Any] = Field(
        ..., description="Update operations as JSON object (supports $inc, $push, $pull, ...)"
    )
    retrieve: bool = Field(False, description="Whether to retrieve the updated object")


class RemoveDocArgs(ToolArgs):
    class_name: str = Field(..., alias="className", description="Full class name")
    space_name: str = Field(..., alias="spaceName", description="Space name")
    object_id: str = Field(..., alias="objectId", description="ID of the object to remove")


class AddCollectionArgs(ToolArgs):
    class_name: str = Field(..., alias="className", description="Class of the object to create")
    space_name: str = Field(..., alias="spaceName", description="Space of the object to create")
    attached_to: str = Field(..., alias="attachedTo", description="ID of the object to attach to")
    attached_to_class: str = Field(..., alias="attachedToClass", description="Class of the object to attach to")
    collection: str = Field(..., description="Name of the collection")
    attributes: dict[str, Any] = Field(..., description="Attributes of the object")
    id: Optional[str] = Field(None, description="Optional custom ID")


class UpdateCollectionArgs(ToolArgs):
    class_name: str = Field(..., alias="className", description="Class of the object to update")
    space_name: str = Field(..., alias="spaceName", description="Space of the object")
    object_id: str = Field(..., alias="objectId", description="ID of the object to update")
    attached_to: str = Field(..., alias="attachedTo", description="ID of the parent object")
    attached_to_class: str = Field(..., alias="attachedToClass", description="Class of the parent object")
    collection: str = Field(..., description="Name of the collection")
    attributes: dict[str, Any] = Field(..., description="Attributes to update")


class RemoveCollectionArgs(ToolArgs):
    class_name: str = Field(..., alias="className", description="Class of the object to remove")
    space_name: str = Field(..., alias="spaceName", description="Space of the object")
    object_id: str = Field(..., alias="objectId", description="ID of the object to remove")
    attached_to: str = Field(..., alias="attachedTo", description="ID of the parent object")
    attached_to_class: str = Field(..., alias="attachedToClass", description="Class of the parent object")
    collection: str = Field(..., description="Name of the collection")


class MixinArgs(ToolArgs):
    object_id: str = Field(..., alias="objectId", description="ID of the object the mixin is attached to")
    object_class: str = Field(..., alias="objectClass", description="Class of the object the mixin is attached to")
    object_space: str = Field(..., alias="objectSpace", description="Space of the object the mixin is attached to")
    mixin: str = Field(..., description="Mixin class name (e.g., 'contact.mixin.Employee')")
    attributes: dict[str, Any] = Field(..., description="Attributes of the mixin")
