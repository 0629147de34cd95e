"""Huly platform client.

The gateway talks to the remote document store through the ``PlatformClient``
protocol. ``RestPlatformClient`` implements it over HTTP with httpx: every
primitive is a ``POST /api/v1/<operation>/<workspace>`` carrying its
parameters as JSON and answering ``{"result": ...}``.
"""
import logging
from typing import Any, Optional, Protocol

import httpx
from pydantic import BaseModel

from .errors import RemoteCallRejectedError
from .platform import Ref

logger = logging.getLogger("huly-mcp.client")

API_PREFIX = "/api/v1"


class ConnectOptions(BaseModel):
    """Options handed to the connect primitive."""

    workspace: str
    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    connection_timeout: int = 30000  # milliseconds


class PlatformClient(Protocol):
    """The remote document-store session consumed by the gateway."""

    async def find_one(self, _class: Ref, query: dict, options: Optional[dict] = None) -> Optional[dict]: ...

    async def find_all(self, _class: Ref, query: dict, options: Optional[dict] = None) -> list[dict]: ...

    async def create_doc(self, _class: Ref, space: Ref, attributes: dict, doc_id: Optional[Ref] = None) -> Ref: ...

    async def update_doc(
        self, _class: Ref, space: Ref, object_id: Ref, operations: dict, retrieve: bool = False
    ) -> Any: ...

    async def remove_doc(self, _class: Ref, space: Ref, object_id: Ref) -> Any: ...

    async def add_collection(
        self, _class: Ref, space: Ref, attached_to: Ref, attached_to_class: Ref,
        collection: str, attributes: dict, doc_id: Optional[Ref] = None,
    ) -> Ref: ...

    async def update_collection(
        self, _class: Ref, space: Ref, object_id: Ref, attached_to: Ref, attached_to_class: Ref,
        collection: str, attributes: dict,
    ) -> Any: ...

    async def remove_collection(
        self, _class: Ref, space: Ref, object_id: Ref, attached_to: Ref, attached_to_class: Ref,
        collection: str,
    ) -> Any: ...

    async def create_mixin(
        self, object_id: Ref, object_class: Ref, object_space: Ref, mixin: Ref, attributes: dict
    ) -> Any: ...

    async def update_mixin(
        self, object_id: Ref, object_class: Ref, object_space: Ref, mixin: Ref, attributes: dict
    ) -> Any: ...

    async def upload_markup(self, _class: Ref, object_id: Ref, field: str, value: str, format: str) -> Ref: ...

    async def fetch_markup(self, _class: Ref, object_id: Ref, field: str, value: Ref, format: str) -> str: ...

    async def get_account(self) -> dict: ...

    async def close(self) -> None: ...


def _error_detail(response: httpx.Response) -> str:
    """Pull the most specific error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        if body.get("detail"):
            return str(body["detail"])
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if error:
            return str(error)
    return response.text or f"HTTP {response.status_code}"


class RestPlatformClient:
    """``PlatformClient`` over the Huly REST transport."""

    def __init__(self, http: httpx.AsyncClient, workspace: str):
        self._http = http
        self._workspace = workspace

    async def _request(self, method: str, operation: str, payload: Optional[dict] = None) -> Any:
        url = f"{API_PREFIX}/{operation}/{self._workspace}"
        try:
            response = await self._http.request(method, url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.error(f"Huly {operation} rejected with HTTP {e.response.status_code}: {detail}")
            raise RemoteCallRejectedError(operation, detail, e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Huly {operation} request failed: {type(e).__name__}: {e}")
            raise RemoteCallRejectedError(operation, f"Connection failed - {e}") from e

        if not response.content:
            return None
        body = response.json()
        if isinstance(body, dict) and "result" in body:
            return body["result"]
        return body

    async def _call(self, operation: str, **params: Any) -> Any:
        return await self._request("POST", operation, params)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_one(self, _class, query, options=None):
        return await self._call("find-one", _class=_class, query=query, options=options or {})

    async def find_all(self, _class, query, options=None):
        result = await self._call("find-all", _class=_class, query=query, options=options or {})
        return list(result or [])

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def create_doc(self, _class, space, attributes, doc_id=None):
        result = await self._call("create-doc", _class=_class, space=space, attributes=attributes, id=doc_id)
        return Ref(result if result is not None else doc_id)

    async def update_doc(self, _class, space, object_id, operations, retrieve=False):
        return await self._call(
            "update-doc", _class=_class, space=space, objectId=object_id,
            operations=operations, retrieve=retrieve,
        )

    async def remove_doc(self, _class, space, object_id):
        return await self._call("remove-doc", _class=_class, space=space, objectId=object_id)

    # ------------------------------------------------------------------
    # Collections and mixins
    # ------------------------------------------------------------------

    async def add_collection(self, _class, space, attached_to, attached_to_class, collection, attributes, doc_id=None):
        result = await self._call(
            "add-collection", _class=_class, space=space, attachedTo=attached_to,
            attachedToClass=attached_to_class, collection=collection, attributes=attributes, id=doc_id,
        )
        return Ref(result if result is not None else doc_id)

    async def update_collection(self, _class, space, object_id, attached_to, attached_to_class, collection, attributes):
        return await self._call(
            "update-collection", _class=_class, space=space, objectId=object_id, attachedTo=attached_to,
            attachedToClass=attached_to_class, collection=collection, attributes=attributes,
        )

    async def remove_collection(self, _class, space, object_id, attached_to, attached_to_class, collection):
        return await self._call(
            "remove-collection", _class=_class, space=space, objectId=object_id, attachedTo=attached_to,
            attachedToClass=attached_to_class, collection=collection,
        )

    async def create_mixin(self, object_id, object_class, object_space, mixin, attributes):
        return await self._call(
            "create-mixin", objectId=object_id, objectClass=object_class,
            objectSpace=object_space, mixin=mixin, attributes=attributes,
        )

    async def update_mixin(self, object_id, object_class, object_space, mixin, attributes):
        return await self._call(
            "update-mixin", objectId=object_id, objectClass=object_class,
            objectSpace=object_space, mixin=mixin, attributes=attributes,
        )

    # ------------------------------------------------------------------
    # Markup, introspection, lifecycle
    # ------------------------------------------------------------------

    async def upload_markup(self, _class, object_id, field, value, format):
        result = await self._call(
            "upload-markup", _class=_class, objectId=object_id, field=field, value=value, format=format,
        )
        return Ref(result)

    async def fetch_markup(self, _class, object_id, field, value, format):
        result = await self._call(
            "fetch-markup", _class=_class, objectId=object_id, field=field, value=value, format=format,
        )
        return result or ""

    async def get_account(self):
        return await self._request("GET", "account")

    async def close(self):
        await self._http.aclose()


async def _login(url: str, options: ConnectOptions, timeout: float,
                 transport: Optional[httpx.AsyncBaseTransport]) -> str:
    """Exchange an email/password pair for a workspace token."""
    async with httpx.AsyncClient(base_url=url, timeout=timeout, transport=transport) as http:
        response = await http.post(
            f"{API_PREFIX}/login",
            json={"email": options.email, "password": options.password, "workspace": options.workspace},
        )
        if response.is_error:
            raise RemoteCallRejectedError("login", _error_detail(response), response.status_code)
        return response.json()["token"]


async def connect(
    url: str,
    options: ConnectOptions,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RestPlatformClient:
    """Open an authenticated session against a Huly server.

    Uses ``options.token`` when present, otherwise logs in with email and
    password. The session is verified with an account lookup before it is
    returned.
    """
    timeout = options.connection_timeout / 1000
    token = options.token
    if not token:
        token = await _login(url, options, timeout, transport)

    http = httpx.AsyncClient(
        base_url=url,
        timeout=timeout,
        headers={"Authorization": f"Bearer {token}"},
        transport=transport,
    )
    client = RestPlatformClient(http, options.workspace)
    try:
        account = await client.get_account()
    except BaseException:
        await http.aclose()
        raise
    logger.info(f"Authenticated to workspace {options.workspace} as {(account or {}).get('email', 'unknown')}")
    return client
