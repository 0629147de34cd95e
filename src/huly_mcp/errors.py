"""Error taxonomy for the Huly MCP gateway.

Every gateway error carries a human-readable ``message``. Tool handlers never
let these escape: the operation envelope turns them into error payloads.
Resource reads are the exception and propagate them to the MCP host.
"""


class HulyMCPError(Exception):
    """Base class for user-facing gateway errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ============================================================================
# Class-path resolution
# ============================================================================

class ClassPathError(HulyMCPError):
    """Raised when a dotted class path cannot be resolved."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class InvalidPathFormatError(ClassPathError):
    """Raised when a class path has fewer than three segments."""

    def __init__(self, path: str):
        super().__init__(
            f"Invalid class name format: {path}. Expected format: 'module.class.ClassName'",
            path,
        )


class UnknownNamespaceError(ClassPathError):
    """Raised when the first segment of a class path is not a registered namespace."""

    def __init__(self, path: str, namespace: str):
        super().__init__(f"Unknown module: {namespace}", path)
        self.namespace = namespace


class ClassNotFoundError(ClassPathError):
    """Raised when a class path names a member the namespace does not define."""

    def __init__(self, path: str):
        super().__init__(f"Class not found: {path}", path)


# ============================================================================
# Connection lifecycle
# ============================================================================

class HulyConnectionError(HulyMCPError):
    """Base class for errors raised while establishing a Huly session."""


class MissingCredentialsError(HulyConnectionError):
    """Raised when neither a token nor an email/password pair is configured."""

    def __init__(self):
        super().__init__("Either token or email/password must be provided for Huly authentication")


class RemoteConnectFailedError(HulyConnectionError):
    """Raised when the remote connect primitive rejects."""

    def __init__(self, cause: str):
        super().__init__(f"Failed to connect to Huly: {cause}")
        self.cause = cause


class NotConnectedError(RuntimeError):
    """Raised when the session is requested before ``connect()`` was called.

    This is a programming error rather than a user input problem, so it is
    deliberately kept outside the ``HulyMCPError`` hierarchy.
    """

    def __init__(self):
        super().__init__("Not connected to Huly. Call connect() first.")


# ============================================================================
# Remote calls
# ============================================================================

class RemoteCallRejectedError(HulyMCPError):
    """Raised for any failure reported by a remote-call primitive.

    The remote message is forwarded verbatim; sub-kinds (network, validation,
    conflict) are not distinguished.
    """

    def __init__(self, operation: str, message: str, status_code: int | None = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class DocumentNotFoundError(HulyMCPError):
    """Raised when a purpose-built tool cannot find the record it operates on."""


class ResourceLookupError(HulyMCPError):
    """Raised by resource reads; propagated to the MCP host."""
