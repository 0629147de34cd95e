"""Shared fixtures: settings, a fake Huly session and a gateway context wired to it."""
from unittest.mock import AsyncMock

import pytest

from huly_mcp.client import RestPlatformClient
from huly_mcp.config import HulySettings
from huly_mcp.context import GatewayContext
from huly_mcp.platform import Ref


def make_settings(**overrides) -> HulySettings:
    values = {
        "url": "http://huly.test",
        "workspace": "ws-test",
        "token": "t",
        "email": None,
        "password": None,
    }
    values.update(overrides)
    return HulySettings(_env_file=None, **values)


def make_platform_client() -> AsyncMock:
    """A fake session whose primitives are AsyncMocks with neutral defaults."""
    client = AsyncMock(spec=RestPlatformClient)
    client.find_one.return_value = None
    client.find_all.return_value = []
    client.create_doc.side_effect = lambda _class, space, attributes, doc_id=None: doc_id
    client.add_collection.side_effect = (
        lambda _class, space, attached_to, attached_to_class, collection, attributes, doc_id=None: doc_id
    )
    client.update_doc.return_value = None
    client.upload_markup.return_value = Ref("markup-1")
    client.fetch_markup.return_value = ""
    client.get_account.return_value = {"email": "user@example.com"}
    return client


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def platform_client():
    return make_platform_client()


@pytest.fixture
def connector(platform_client):
    return AsyncMock(return_value=platform_client)


@pytest.fixture
def ctx(settings, connector):
    return GatewayContext.create(settings, connector)
