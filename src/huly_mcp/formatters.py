"""Text formatting for MCP responses."""
import json
from datetime import datetime, timezone
from typing import Any, Optional

from .platform import IssuePriority

DESCRIPTION_PREVIEW_LENGTH = 200


def format_json(value: Any) -> str:
    """Pretty-print a remote document (or any JSON-like value)."""
    return json.dumps(value, indent=2, default=str, ensure_ascii=False)


def format_timestamp(millis: Optional[float]) -> str:
    """Render a remote epoch-milliseconds timestamp as ISO-8601 UTC."""
    if not millis:
        return "Unknown"
    moment = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_priority(priority: Any) -> str:
    """Render a stored priority using its tool-facing name when known."""
    try:
        value = IssuePriority(priority)
    except (ValueError, TypeError):
        return str(priority)
    return {
        IssuePriority.NO_PRIORITY: "No priority",
        IssuePriority.URGENT: "Urgent",
        IssuePriority.HIGH: "High",
        IssuePriority.MEDIUM: "Normal",
        IssuePriority.LOW: "Low",
    }[value]


def truncate(text: str, length: int = DESCRIPTION_PREVIEW_LENGTH) -> str:
    return text[:length] + ("..." if len(text) > length else "")


def format_issue_summary(issue: dict, description: str) -> str:
    """Format an issue as a list entry."""
    return (f"• {issue.get('identifier')}: {issue.get('title')}\n"
            f"  Priority: {format_priority(issue.get('priority'))}, Status: {issue.get('status')}\n"
            f"  {truncate(description)}\n")


def format_issue_details(issue: dict, description: str) -> str:
    """Format an issue with all tracked fields and its full description."""
    return f"""Issue Details: {issue.get('identifier')}

Title: {issue.get('title')}
Priority: {format_priority(issue.get('priority'))}
Status: {issue.get('status')}
Assignee: {issue.get('assignee') or 'Unassigned'}
Estimation: {issue.get('estimation', 0)}h
Remaining Time: {issue.get('remainingTime', 0)}h
Reported Time: {issue.get('reportedTime', 0)}h
Created: {format_timestamp(issue.get('createdOn'))}
Modified: {format_timestamp(issue.get('modifiedOn'))}

Description:
{description}"""


def project_type_name(project: dict) -> str:
    lookup = project.get("$lookup") or {}
    project_type = lookup.get("type") or {}
    return project_type.get("name") or "Unknown"


def format_project_summary(project: dict) -> str:
    """Format a project as a list entry."""
    return (f"• {project.get('identifier')} - {project.get('name')}\n"
            f"  Description: {project.get('description') or 'No description'}\n"
            f"  Type: {project_type_name(project)}, Private: {project.get('private', False)}, "
            f"Archived: {project.get('archived', False)}\n")
