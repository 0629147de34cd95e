"""Tests for the MCP tool handlers."""
from unittest.mock import AsyncMock

import pytest

from conftest import make_settings
from huly_mcp.context import GatewayContext
from huly_mcp.errors import RemoteCallRejectedError
from huly_mcp.handlers import TOOL_HANDLERS
from huly_mcp.platform import IssuePriority, Ref

PROJECT = {
    "_id": "proj-1",
    "_class": "tracker:class:Project",
    "identifier": "ABC",
    "name": "Alpha",
    "defaultIssueStatus": "status-backlog",
}

ISSUE = {
    "_id": "issue-1",
    "_class": "tracker:class:Issue",
    "space": "proj-1",
    "identifier": "ABC-1",
    "title": "Fix login",
    "priority": IssuePriority.HIGH,
    "status": "status-backlog",
    "description": "markup-9",
    "createdOn": 1700000000000,
    "modifiedOn": 1700000000000,
}

# Smallest valid argument set for every tool that touches the remote store
MINIMAL_ARGS = {
    "list-issues": {"projectIdentifier": "ABC"},
    "create-issue": {"projectIdentifier": "ABC", "title": "T"},
    "list-projects": {},
    "get-issue": {"issueIdentifier": "ABC-1"},
    "update-issue": {"issueIdentifier": "ABC-1", "title": "New"},
    "change-issue-status": {"issueIdentifier": "ABC-1", "status": "Done"},
    "find-one": {"className": "tracker.class.Issue", "query": {}},
    "find-all": {"className": "tracker.class.Issue", "query": {}},
    "create-doc": {"className": "tracker.class.Project", "spaceName": "core.space.Space", "attributes": {}},
    "update-doc": {
        "className": "tracker.class.Project", "spaceName": "core.space.Space",
        "objectId": "p1", "operations": {"name": "B"},
    },
    "remove-doc": {"className": "tracker.class.Project", "spaceName": "core.space.Space", "objectId": "p1"},
    "add-collection": {
        "className": "tracker.class.Issue", "spaceName": "core.space.Space", "attachedTo": "p1",
        "attachedToClass": "tracker.class.Project", "collection": "issues", "attributes": {},
    },
    "update-collection": {
        "className": "tracker.class.Issue", "spaceName": "core.space.Space", "objectId": "i1",
        "attachedTo": "p1", "attachedToClass": "tracker.class.Project", "collection": "issues",
        "attributes": {},
    },
    "remove-collection": {
        "className": "tracker.class.Issue", "spaceName": "core.space.Space", "objectId": "i1",
        "attachedTo": "p1", "attachedToClass": "tracker.class.Project", "collection": "issues",
    },
    "create-mixin": {
        "objectId": "e1", "objectClass": "contact.class.Person", "objectSpace": "contact.space.Contacts",
        "mixin": "contact.mixin.Employee", "attributes": {},
    },
    "update-mixin": {
        "objectId": "e1", "objectClass": "contact.class.Person", "objectSpace": "contact.space.Contacts",
        "mixin": "contact.mixin.Employee", "attributes": {},
    },
}


async def call(name, arguments, ctx):
    result = await TOOL_HANDLERS[name](arguments, ctx)
    assert len(result.content) == 1
    return result, result.content[0].text


def called_methods(platform_client):
    return [name for name, _, _ in platform_client.mock_calls]


class TestGenericDocumentTools:
    """Test find/create/update/remove passthrough tools."""

    @pytest.mark.asyncio
    async def test_find_one_unknown_module(self, ctx, connector):
        result, text = await call(
            "find-one", {"className": "unknown.class.Foo", "query": {}}, ctx
        )

        assert result.isError is True
        assert text == "Error finding document: Unknown module: unknown"
        connector.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_credentials_reported_before_bad_class(self, connector):
        ctx = GatewayContext.create(make_settings(token=None), connector)

        result, text = await call("find-one", {"className": "unknown.class.Foo", "query": {}}, ctx)

        assert result.isError is True
        assert text == (
            "Error finding document: Either token or email/password must be provided for Huly authentication"
        )

    @pytest.mark.asyncio
    async def test_find_one_invalid_path(self, ctx):
        result, text = await call("find-one", {"className": "Issue", "query": {}}, ctx)

        assert result.isError is True
        assert text.startswith("Error finding document: Invalid class name format")

    @pytest.mark.asyncio
    async def test_find_one_not_found(self, ctx):
        result, text = await call(
            "find-one", {"className": "tracker.class.Issue", "query": {"identifier": "NOPE-1"}}, ctx
        )

        assert not result.isError
        assert text == "No document found matching the criteria"

    @pytest.mark.asyncio
    async def test_find_one_found(self, ctx, platform_client):
        platform_client.find_one.return_value = {"_id": "i1", "title": "T"}

        result, text = await call("find-one", {"className": "tracker.class.Issue", "query": {"_id": "i1"}}, ctx)

        assert not result.isError
        assert text.startswith("Document found:\n{")
        assert '"title": "T"' in text

    @pytest.mark.asyncio
    async def test_find_all(self, ctx, platform_client):
        platform_client.find_all.return_value = [{"_id": "1"}, {"_id": "2"}, {"_id": "3"}]

        result, text = await call(
            "find-all",
            {"className": "tracker.class.Issue", "query": {}, "options": {"limit": 3}},
            ctx,
        )

        assert text.startswith("Found 3 documents:\n[")
        platform_client.find_all.assert_awaited_once_with("tracker:class:Issue", {}, {"limit": 3})

    @pytest.mark.asyncio
    async def test_create_doc(self, ctx, platform_client):
        result, text = await call(
            "create-doc",
            {"className": "tracker.class.Project", "spaceName": "core.space.Space",
             "attributes": {"name": "P"}, "id": "custom-id"},
            ctx,
        )

        assert not result.isError
        assert text.startswith("Document created successfully with ID: custom-id\n")
        assert "Class: tracker.class.Project" in text

    @pytest.mark.asyncio
    async def test_update_doc_reports_result(self, ctx, platform_client):
        platform_client.update_doc.return_value = {"object": {"sequence": 2}}

        arguments = dict(MINIMAL_ARGS["update-doc"], retrieve=True)
        result, text = await call("update-doc", arguments, ctx)

        assert not result.isError
        assert "ID: p1" in text
        assert '"sequence": 2' in text
        platform_client.update_doc.assert_awaited_once_with(
            "tracker:class:Project", "core:space:Space", "p1", {"name": "B"}, True
        )

    @pytest.mark.asyncio
    async def test_remote_rejection(self, ctx, platform_client):
        platform_client.remove_doc.side_effect = RemoteCallRejectedError("remove-doc", "Access denied", 403)

        result, text = await call("remove-doc", MINIMAL_ARGS["remove-doc"], ctx)

        assert result.isError is True
        assert text == "Error removing document: Access denied"

    @pytest.mark.asyncio
    async def test_mixin_tools(self, ctx, platform_client):
        created, created_text = await call("create-mixin", MINIMAL_ARGS["create-mixin"], ctx)
        updated, updated_text = await call("update-mixin", MINIMAL_ARGS["update-mixin"], ctx)

        assert created_text.startswith("Mixin created successfully")
        assert updated_text.startswith("Mixin updated successfully")
        platform_client.create_mixin.assert_awaited_once()
        platform_client.update_mixin.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_collection_tools(self, ctx, platform_client):
        _, added = await call("add-collection", MINIMAL_ARGS["add-collection"], ctx)
        _, updated = await call("update-collection", MINIMAL_ARGS["update-collection"], ctx)
        _, removed = await call("remove-collection", MINIMAL_ARGS["remove-collection"], ctx)

        assert added.startswith("Collection item created successfully")
        assert "Attached to: p1" in added
        assert updated.startswith("Collection item updated successfully")
        assert removed.startswith("Collection item removed successfully")


class TestIssueTools:
    """Test the purpose-built issue and project tools."""

    @pytest.mark.asyncio
    async def test_list_issues(self, ctx, platform_client):
        platform_client.find_one.return_value = PROJECT
        platform_client.find_all.return_value = [ISSUE, dict(ISSUE, identifier="ABC-2", description=None)]
        platform_client.fetch_markup.return_value = "x" * 250

        result, text = await call("list-issues", {"projectIdentifier": "ABC", "limit": 5}, ctx)

        assert not result.isError
        assert text.startswith("Found 2 issues in project 'ABC':")
        assert "• ABC-1: Fix login" in text
        assert "Priority: High" in text
        assert "x" * 200 + "..." in text
        assert "No description" in text
        platform_client.find_all.assert_awaited_once_with(
            "tracker:class:Issue", {"space": "proj-1"}, {"limit": 5, "sort": {"modifiedOn": -1}}
        )
        platform_client.fetch_markup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_issues_unknown_project(self, ctx):
        result, text = await call("list-issues", {"projectIdentifier": "NOPE"}, ctx)

        assert result.isError is True
        assert text == "Error listing issues: Project 'NOPE' not found"

    @pytest.mark.asyncio
    async def test_create_issue(self, ctx, platform_client):
        platform_client.find_one.side_effect = [
            PROJECT,
            {"_id": "issue-0", "rank": "P"},
            {"_id": "issue-new", "identifier": "ABC-7"},
        ]
        platform_client.update_doc.return_value = {"object": {"sequence": 7}}

        result, text = await call(
            "create-issue",
            {"projectIdentifier": "ABC", "title": "New bug", "description": "Steps", "priority": "Urgent"},
            ctx,
        )

        assert not result.isError
        assert text == (
            "Successfully created issue: ABC-7\n"
            "Title: New bug\n"
            "Priority: Urgent\n"
            "Project: ABC"
        )
        assert called_methods(platform_client) == [
            "find_one", "update_doc", "find_one", "upload_markup", "add_collection", "find_one",
        ]

        update_args = platform_client.update_doc.await_args.args
        assert update_args[3] == {"$inc": {"sequence": 1}}
        assert update_args[4] is True

        _class, space, attached_to, parent_class, collection, attributes, doc_id = (
            platform_client.add_collection.await_args.args
        )
        assert (_class, space, attached_to, collection) == ("tracker:class:Issue", "proj-1", "proj-1", "issues")
        assert parent_class == "tracker:class:Project"
        assert attributes["number"] == 7
        assert attributes["identifier"] == "ABC-7"
        assert attributes["priority"] == IssuePriority.URGENT
        assert attributes["description"] == "markup-1"
        assert attributes["status"] == "status-backlog"
        assert attributes["rank"] > "P"
        assert isinstance(doc_id, Ref)

    @pytest.mark.asyncio
    async def test_create_issue_without_description_skips_markup(self, ctx, platform_client):
        platform_client.find_one.side_effect = [PROJECT, None, {"identifier": "ABC-1"}]
        platform_client.update_doc.return_value = {"object": {"sequence": 1}}

        result, _ = await call("create-issue", {"projectIdentifier": "ABC", "title": "T"}, ctx)

        assert not result.isError
        platform_client.upload_markup.assert_not_awaited()
        attributes = platform_client.add_collection.await_args.args[5]
        assert attributes["description"] is None
        assert attributes["priority"] == IssuePriority.MEDIUM

    @pytest.mark.asyncio
    async def test_create_issue_stops_at_failing_step(self, ctx, platform_client):
        platform_client.find_one.return_value = PROJECT
        platform_client.update_doc.return_value = {}

        result, text = await call("create-issue", {"projectIdentifier": "ABC", "title": "T"}, ctx)

        assert result.isError is True
        assert text.startswith("Error creating issue: ")
        platform_client.add_collection.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_issue_rejects_unknown_priority(self, ctx, connector):
        result, text = await call(
            "create-issue", {"projectIdentifier": "ABC", "title": "T", "priority": "Critical"}, ctx
        )

        assert result.isError is True
        connector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_list_projects(self, ctx, platform_client):
        platform_client.find_all.return_value = [
            dict(PROJECT, **{"$lookup": {"type": {"name": "Classic project"}}}),
        ]

        _, text = await call("list-projects", {}, ctx)

        assert text.startswith("Found 1 projects:")
        assert "• ABC - Alpha" in text
        assert "Type: Classic project" in text
        options = platform_client.find_all.await_args.args[2]
        assert options["limit"] == 50

    @pytest.mark.asyncio
    async def test_get_issue(self, ctx, platform_client):
        platform_client.find_one.return_value = ISSUE
        platform_client.fetch_markup.return_value = "Full description"

        _, text = await call("get-issue", {"issueIdentifier": "ABC-1"}, ctx)

        assert text.startswith("Issue Details: ABC-1")
        assert "Created: 2023-11-14T22:13:20.000Z" in text
        assert "Assignee: Unassigned" in text
        assert text.endswith("Description:\nFull description")

    @pytest.mark.asyncio
    async def test_get_issue_not_found(self, ctx):
        result, text = await call("get-issue", {"issueIdentifier": "ABC-99"}, ctx)

        assert result.isError is True
        assert text == "Error getting issue details: Issue 'ABC-99' not found"

    @pytest.mark.asyncio
    async def test_update_issue(self, ctx, platform_client):
        platform_client.find_one.return_value = ISSUE

        _, text = await call(
            "update-issue", {"issueIdentifier": "ABC-1", "title": "Renamed", "priority": "Low"}, ctx
        )

        assert "Changed fields: title, priority" in text
        platform_client.update_doc.assert_awaited_once_with(
            "tracker:class:Issue", "proj-1", "issue-1",
            {"title": "Renamed", "priority": IssuePriority.LOW}, False,
        )

    @pytest.mark.asyncio
    async def test_update_issue_without_fields(self, ctx, platform_client):
        platform_client.find_one.return_value = ISSUE

        result, text = await call("update-issue", {"issueIdentifier": "ABC-1"}, ctx)

        assert result.isError is True
        assert text == "Error updating issue: No fields to update"
        platform_client.update_doc.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_change_issue_status_by_name(self, ctx, platform_client):
        platform_client.find_one.side_effect = [ISSUE, {"_id": "status-done", "name": "Done"}]

        result, text = await call("change-issue-status", {"issueIdentifier": "ABC-1", "status": "Done"}, ctx)

        assert not result.isError
        assert "From: status-backlog" in text
        assert "To: Done" in text
        platform_client.update_doc.assert_awaited_once_with(
            "tracker:class:Issue", "proj-1", "issue-1", {"status": "status-done"}, False
        )

    @pytest.mark.asyncio
    async def test_change_issue_status_by_id(self, ctx, platform_client):
        platform_client.find_one.side_effect = [ISSUE, None, {"_id": "status-done"}]

        result, text = await call(
            "change-issue-status", {"issueIdentifier": "ABC-1", "status": "status-done"}, ctx
        )

        assert not result.isError
        assert "To: status-done" in text

    @pytest.mark.asyncio
    async def test_change_issue_status_unknown(self, ctx, platform_client):
        platform_client.find_one.side_effect = [ISSUE, None, None]

        result, text = await call("change-issue-status", {"issueIdentifier": "ABC-1", "status": "Limbo"}, ctx)

        assert result.isError is True
        assert text == "Error changing issue status: Status 'Limbo' not found"
        platform_client.update_doc.assert_not_awaited()


class TestConnectionStatus:
    """connection-status reports state without connecting."""

    @pytest.mark.asyncio
    async def test_disconnected(self, ctx, connector):
        result, text = await call("connection-status", {}, ctx)

        assert not result.isError
        assert "Connected: false" in text
        assert "Server URL: http://huly.test" in text
        assert "Workspace: ws-test" in text
        assert "Ping" not in text
        connector.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_connected_with_ping(self, ctx):
        await ctx.connection.connect()

        _, text = await call("connection-status", {"ping": True}, ctx)

        assert "Connected: true" in text
        assert "Ping successful: true" in text

    @pytest.mark.asyncio
    async def test_ping_skipped_when_disconnected(self, ctx, platform_client):
        _, text = await call("connection-status", {"ping": True}, ctx)

        assert "Connected: false" in text
        assert "Ping" not in text
        platform_client.get_account.assert_not_awaited()


class TestEnvelopeCoverage:
    """Every tool turns failures into an error result."""

    def test_minimal_args_cover_every_remote_tool(self):
        assert set(MINIMAL_ARGS) == set(TOOL_HANDLERS) - {"connection-status"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", sorted(MINIMAL_ARGS))
    async def test_remote_failure_is_caught(self, name, ctx, platform_client):
        for method in ("find_one", "find_all", "create_doc", "update_doc", "remove_doc", "add_collection",
                       "update_collection", "remove_collection", "create_mixin", "update_mixin"):
            getattr(platform_client, method).side_effect = RuntimeError("remote exploded")

        result, text = await call(name, MINIMAL_ARGS[name], ctx)

        assert result.isError is True
        assert text.startswith(f"Error {TOOL_HANDLERS[name].action}: ")
        assert "remote exploded" in text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", sorted(MINIMAL_ARGS))
    async def test_connect_failure_is_caught(self, name, settings):
        ctx = GatewayContext.create(settings, AsyncMock(side_effect=OSError("refused")))

        result, text = await call(name, MINIMAL_ARGS[name], ctx)

        assert result.isError is True
        assert text.endswith("Failed to connect to Huly: refused")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", sorted(set(MINIMAL_ARGS) - {"list-projects"}))
    async def test_missing_arguments_do_not_connect(self, name, ctx, connector):
        result, _ = await call(name, {}, ctx)

        assert result.isError is True
        connector.assert_not_awaited()
