"""Tests for the huly:// resources."""
import json

import pytest

from huly_mcp.errors import ResourceLookupError
from huly_mcp.resources import get_resource_templates, read_resource


class TestResourceTemplates:
    def test_templates(self):
        templates = {t.uriTemplate: t for t in get_resource_templates()}

        assert set(templates) == {"huly://project/{identifier}", "huly://issue/{identifier}"}
        assert all(t.mimeType == "application/json" for t in templates.values())


class TestReadResource:
    """Test resource reads and their fail-fast errors."""

    @pytest.mark.asyncio
    async def test_project_info(self, ctx, platform_client):
        platform_client.find_one.return_value = {
            "_id": "p1",
            "identifier": "ABC",
            "name": "Alpha",
            "private": False,
            "archived": False,
            "sequence": 12,
            "$lookup": {"type": {"name": "Classic project"}},
        }

        contents = await read_resource("huly://project/ABC", ctx)

        assert len(contents) == 1
        assert contents[0].mime_type == "application/json"
        payload = json.loads(contents[0].content)
        assert payload["identifier"] == "ABC"
        assert payload["type"] == "Classic project"
        assert payload["sequence"] == 12

    @pytest.mark.asyncio
    async def test_issue_details(self, ctx, platform_client):
        platform_client.find_one.return_value = {
            "_id": "i1",
            "_class": "tracker:class:Issue",
            "identifier": "ABC-1",
            "title": "Fix login",
            "description": "markup-1",
            "priority": 2,
        }
        platform_client.fetch_markup.return_value = "Steps to reproduce"

        contents = await read_resource("huly://issue/ABC-1", ctx)

        payload = json.loads(contents[0].content)
        assert payload["identifier"] == "ABC-1"
        assert payload["description"] == "Steps to reproduce"
        assert payload["priority"] == 2
        platform_client.find_one.assert_awaited_once_with("tracker:class:Issue", {"identifier": "ABC-1"}, None)

    @pytest.mark.asyncio
    async def test_unknown_uri(self, ctx, connector):
        with pytest.raises(ResourceLookupError) as exc_info:
            await read_resource("huly://milestone/M1", ctx)

        assert exc_info.value.message == "Unknown resource: huly://milestone/M1"
        connector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_project(self, ctx):
        with pytest.raises(ResourceLookupError) as exc_info:
            await read_resource("huly://project/NOPE", ctx)

        assert exc_info.value.message == "Error fetching project info: Project 'NOPE' not found"

    @pytest.mark.asyncio
    async def test_remote_failure(self, ctx, platform_client):
        platform_client.find_one.side_effect = RuntimeError("socket closed")

        with pytest.raises(ResourceLookupError) as exc_info:
            await read_resource("huly://issue/ABC-1", ctx)

        assert exc_info.value.message == "Error fetching issue details: socket closed"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
