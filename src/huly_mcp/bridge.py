"""Generic document bridge.

Pass-through document operations against the Huly store. Class and space
arguments are either dotted class paths supplied by callers (resolved through
the namespace root table) or ``Ref`` values read back from remote records,
which are forwarded untouched. Queries, attributes and update operations are
opaque: the bridge does not know the shape of remote types.
"""
import logging
from typing import Any, Mapping, Optional

from .classpath import resolve_class_path
from .connection import HulyConnection
from .namespaces import NAMESPACE_ROOTS, NamespaceNode
from .platform import ClassRef, Ref, generate_id

logger = logging.getLogger("huly-mcp.bridge")


class DocumentBridge:
    """Resolve class names and run document operations on the shared session."""

    def __init__(self, connection: HulyConnection, roots: Mapping[str, NamespaceNode] = NAMESPACE_ROOTS):
        self.connection = connection
        self._roots = roots

    def resolve(self, value: str) -> Ref:
        """Map a class argument to the reference sent to the store.

        A ``Ref`` (read back from a remote record) is passed through untouched;
        any other string is a dotted class path and goes through the resolver.
        """
        if isinstance(value, Ref):
            return value
        return resolve_class_path(value, self._roots)

    def resolve_class(self, path: str) -> ClassRef:
        return resolve_class_path(path, self._roots)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def find_one(self, _class: str, query: dict, options: Optional[dict] = None) -> Optional[dict]:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        return await client.find_one(class_ref, query, options)

    async def find_all(self, _class: str, query: dict, options: Optional[dict] = None) -> list[dict]:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        documents = await client.find_all(class_ref, query, options)
        logger.debug(f"find_all {class_ref} returned {len(documents)} documents")
        return documents

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def create_doc(
        self, _class: str, space: str, attributes: dict, doc_id: Optional[str] = None
    ) -> Ref:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        space_ref = self.resolve(space)
        doc_id = Ref(doc_id) if doc_id else generate_id()
        created_id = await client.create_doc(class_ref, space_ref, attributes, doc_id)
        logger.info(f"Created {class_ref} document {created_id}")
        return created_id

    async def update_doc(
        self, _class: str, space: str, object_id: str, operations: dict, retrieve: bool = False
    ) -> Any:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        space_ref = self.resolve(space)
        result = await client.update_doc(class_ref, space_ref, Ref(object_id), operations, retrieve)
        logger.info(f"Updated {class_ref} document {object_id}")
        return result

    async def remove_doc(self, _class: str, space: str, object_id: str) -> Any:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        space_ref = self.resolve(space)
        result = await client.remove_doc(class_ref, space_ref, Ref(object_id))
        logger.info(f"Removed {class_ref} document {object_id}")
        return result

    # ------------------------------------------------------------------
    # Collections (attached sub-documents)
    # ------------------------------------------------------------------

    async def add_collection(
        self,
        _class: str,
        space: str,
        attached_to: str,
        attached_to_class: str,
        collection: str,
        attributes: dict,
        doc_id: Optional[str] = None,
    ) -> Ref:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        space_ref = self.resolve(space)
        parent_class_ref = self.resolve(attached_to_class)
        doc_id = Ref(doc_id) if doc_id else generate_id()
        created_id = await client.add_collection(
            class_ref, space_ref, Ref(attached_to), parent_class_ref, collection, attributes, doc_id
        )
        logger.info(f"Added {class_ref} {created_id} to {collection} of {attached_to}")
        return created_id

    async def update_collection(
        self,
        _class: str,
        space: str,
        object_id: str,
        attached_to: str,
        attached_to_class: str,
        collection: str,
        attributes: dict,
    ) -> Any:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        space_ref = self.resolve(space)
        parent_class_ref = self.resolve(attached_to_class)
        return await client.update_collection(
            class_ref, space_ref, Ref(object_id), Ref(attached_to), parent_class_ref, collection, attributes
        )

    async def remove_collection(
        self,
        _class: str,
        space: str,
        object_id: str,
        attached_to: str,
        attached_to_class: str,
        collection: str,
    ) -> Any:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        space_ref = self.resolve(space)
        parent_class_ref = self.resolve(attached_to_class)
        return await client.remove_collection(
            class_ref, space_ref, Ref(object_id), Ref(attached_to), parent_class_ref, collection
        )

    # ------------------------------------------------------------------
    # Mixins
    # ------------------------------------------------------------------

    async def create_mixin(
        self, object_id: str, object_class: str, object_space: str, mixin: str, attributes: dict
    ) -> Any:
        client = await self.connection.connect()
        class_ref = self.resolve(object_class)
        space_ref = self.resolve(object_space)
        mixin_ref = self.resolve(mixin)
        return await client.create_mixin(Ref(object_id), class_ref, space_ref, mixin_ref, attributes)

    async def update_mixin(
        self, object_id: str, object_class: str, object_space: str, mixin: str, attributes: dict
    ) -> Any:
        client = await self.connection.connect()
        class_ref = self.resolve(object_class)
        space_ref = self.resolve(object_space)
        mixin_ref = self.resolve(mixin)
        return await client.update_mixin(Ref(object_id), class_ref, space_ref, mixin_ref, attributes)

    # ------------------------------------------------------------------
    # Markup
    # ------------------------------------------------------------------

    async def upload_markup(
        self, _class: str, object_id: str, field: str, value: str, format: str = "markdown"
    ) -> Ref:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        return await client.upload_markup(class_ref, Ref(object_id), field, value, format)

    async def fetch_markup(
        self, _class: str, object_id: str, field: str, value: str, format: str = "markdown"
    ) -> str:
        client = await self.connection.connect()
        class_ref = self.resolve(_class)
        return await client.fetch_markup(class_ref, Ref(object_id), field, Ref(value), format)
