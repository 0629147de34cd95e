"""MCP prompts: templated messages for writing issues and reviewing projects.

Prompts are pure text rendering; they never touch the Huly connection. The
template text lives in ``templates/prompts.yaml``.
"""
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

TEMPLATES_DIR = Path(__file__).parent / "templates"

ISSUE_TYPES = ("bug", "feature", "task", "improvement")
URGENCY_LEVELS = ("low", "medium", "high", "critical")
REVIEW_TYPES = ("sprint", "milestone", "quarterly")


class PromptArgumentError(ValueError):
    """Raised when a prompt is requested with a missing or invalid argument."""


@lru_cache
def load_prompt_templates() -> dict[str, Any]:
    """Load the prompt template file.

    Raises:
        FileNotFoundError: If the template file doesn't exist
    """
    template_path = TEMPLATES_DIR / "prompts.yaml"
    if not template_path.exists():
        raise FileNotFoundError(f"Template not found: {template_path}")
    return yaml.safe_load(template_path.read_text())


def get_prompts() -> list[Prompt]:
    return [
        Prompt(
            name="create-issue-template",
            title="Issue Creation Template",
            description="Template for creating well-structured issues",
            arguments=[
                PromptArgument(
                    name="projectType",
                    description=f"Type of issue to create ({', '.join(ISSUE_TYPES)})",
                    required=True,
                ),
                PromptArgument(
                    name="urgency",
                    description=f"Urgency level ({', '.join(URGENCY_LEVELS)})",
                    required=True,
                ),
            ],
        ),
        Prompt(
            name="project-review-template",
            title="Project Review Template",
            description="Template for reviewing project status and health",
            arguments=[
                PromptArgument(name="projectIdentifier", description="Project identifier to review", required=True),
                PromptArgument(
                    name="reviewType",
                    description=f"Type of review ({', '.join(REVIEW_TYPES)})",
                    required=True,
                ),
            ],
        ),
    ]


def _argument(arguments: dict[str, str], name: str, choices: Optional[tuple[str, ...]] = None) -> str:
    value = arguments.get(name)
    if not value:
        raise PromptArgumentError(f"Missing required argument: {name}")
    if choices is not None and value not in choices:
        raise PromptArgumentError(f"Invalid {name}: {value}. Expected one of: {', '.join(choices)}")
    return value


def _user_message(text: str) -> PromptMessage:
    return PromptMessage(role="user", content=TextContent(type="text", text=text))


def render_create_issue_template(arguments: dict[str, str]) -> GetPromptResult:
    issue_type = _argument(arguments, "projectType", ISSUE_TYPES)
    urgency = _argument(arguments, "urgency", URGENCY_LEVELS)
    templates = load_prompt_templates()

    text = (f"Please help me create a {issue_type} issue. "
            f"Use this template and remember this is {urgency} urgency.\n\n"
            f"{templates['issue_templates'][issue_type]}\n\n"
            f"**Priority Note**: {templates['urgency_notes'][urgency]}")
    return GetPromptResult(description="Issue Creation Template", messages=[_user_message(text)])


def render_project_review_template(arguments: dict[str, str]) -> GetPromptResult:
    project = _argument(arguments, "projectIdentifier")
    review_type = _argument(arguments, "reviewType", REVIEW_TYPES)
    framework = load_prompt_templates()["review_frameworks"][review_type].format(project=project)

    text = (f"Please help me conduct a {review_type} review for project {project}. "
            f"Use the following framework:\n\n{framework}\n\n"
            f"Please gather the relevant data and provide insights for each section.")
    return GetPromptResult(description="Project Review Template", messages=[_user_message(text)])


PROMPT_RENDERERS = {
    "create-issue-template": render_create_issue_template,
    "project-review-template": render_project_review_template,
}


def get_prompt(name: str, arguments: Optional[dict[str, str]]) -> GetPromptResult:
    renderer = PROMPT_RENDERERS.get(name)
    if renderer is None:
        raise ValueError(f"Unknown prompt: {name}")
    return renderer(arguments or {})
