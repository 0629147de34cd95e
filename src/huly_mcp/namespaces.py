"""Namespace Root Table.

Maps each registered namespace (``tracker``, ``core``, ...) to the class
references it exposes, keyed by kind (``class``, ``space``, ``mixin``, ...)
and member name. The table is built once at import and exposed through
read-only mapping proxies.
"""
from types import MappingProxyType
from typing import Mapping, Union

from .platform import ClassRef

NamespaceNode = Union[ClassRef, Mapping[str, "NamespaceNode"]]


def _members(namespace: str, kind: str, *names: str) -> dict[str, ClassRef]:
    return {name: ClassRef(f"{namespace}:{kind}:{name}") for name in names}


def _freeze(node: dict) -> Mapping[str, NamespaceNode]:
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, dict) else value
        for key, value in node.items()
    })


_ROOTS = {
    "core": {
        "class": _members(
            "core", "class",
            "Doc", "AttachedDoc", "Class", "Mixin", "Space", "TypedSpace",
            "SystemSpace", "Account", "Status", "Tx", "TxCUD", "Blob",
        ),
        "space": _members("core", "space", "Space", "Model", "Tx", "Workspace", "Configuration"),
    },
    "tracker": {
        "class": _members(
            "tracker", "class",
            "Project", "Issue", "IssueStatus", "IssueTemplate", "IssueParentInfo",
            "Component", "Milestone", "TimeSpendReport", "TypeIssuePriority",
        ),
        "mixin": _members("tracker", "mixin", "ClassicProjectTypeData", "IssueTypeData"),
        "taskTypes": _members("tracker", "taskTypes", "Issue"),
        "project": _members("tracker", "project", "DefaultProject"),
        "ids": _members("tracker", "ids", "ClassingProjectType"),
    },
    "task": {
        "class": _members(
            "task", "class",
            "Project", "Task", "ProjectType", "TaskType", "ProjectTypeDescriptor",
        ),
        "mixin": _members("task", "mixin", "ProjectTypeData"),
    },
    "contact": {
        "class": _members(
            "contact", "class",
            "Contact", "Person", "Organization", "Channel", "ChannelProvider", "Member",
        ),
        "mixin": _members("contact", "mixin", "Employee"),
        "space": _members("contact", "space", "Contacts"),
    },
}

NAMESPACE_ROOTS: Mapping[str, Mapping[str, NamespaceNode]] = _freeze(_ROOTS)


def iter_class_paths(roots: Mapping[str, NamespaceNode] = NAMESPACE_ROOTS):
    """Yield ``(dotted_path, ClassRef)`` for every leaf of the table."""
    stack = [(name, node) for name, node in roots.items()]
    while stack:
        path, node = stack.pop()
        if isinstance(node, ClassRef):
            yield path, node
        else:
            stack.extend((f"{path}.{key}", child) for key, child in node.items())
