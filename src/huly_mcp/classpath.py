"""Resolve dotted class paths such as ``tracker.class.Issue`` to class references."""
from typing import Mapping

from .errors import ClassNotFoundError, InvalidPathFormatError, UnknownNamespaceError
from .namespaces import NAMESPACE_ROOTS, NamespaceNode
from .platform import ClassRef

MIN_PATH_SEGMENTS = 3


def resolve_class_path(
    path: str,
    roots: Mapping[str, NamespaceNode] = NAMESPACE_ROOTS,
) -> ClassRef:
    """Resolve ``path`` against the namespace root table.

    The first segment selects the namespace root; every following segment
    descends one level. The walk must end on a class reference.

    Raises:
        InvalidPathFormatError: fewer than three segments
        UnknownNamespaceError: first segment is not a registered root
        ClassNotFoundError: a segment is missing or the path stops short of a class
    """
    parts = path.split(".")
    if len(parts) < MIN_PATH_SEGMENTS:
        raise InvalidPathFormatError(path)

    namespace, *members = parts
    if namespace not in roots:
        raise UnknownNamespaceError(path, namespace)

    current: NamespaceNode = roots[namespace]
    for member in members:
        if isinstance(current, ClassRef) or member not in current:
            raise ClassNotFoundError(path)
        current = current[member]

    if not isinstance(current, ClassRef):
        raise ClassNotFoundError(path)
    return current
