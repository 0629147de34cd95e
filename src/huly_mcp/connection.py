"""Connection handle owning the single Huly session of the gateway."""
import asyncio
import enum
import logging
from typing import Awaitable, Callable, Optional

from . import client as platform_client
from .client import ConnectOptions, PlatformClient
from .config import HulySettings
from .errors import MissingCredentialsError, NotConnectedError, RemoteConnectFailedError

logger = logging.getLogger("huly-mcp.connection")

Connector = Callable[[str, ConnectOptions], Awaitable[PlatformClient]]


class ConnectionState(str, enum.Enum):
    """Lifecycle of the Huly session."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class HulyConnection:
    """Lazily establishes and caches one Huly session.

    ``connect()`` is single-flight: concurrent callers wait on the same lock
    and all receive the session created by the first one.
    """

    def __init__(self, settings: HulySettings, connector: Optional[Connector] = None):
        self.settings = settings
        self._connector = connector or platform_client.connect
        self._client: Optional[PlatformClient] = None
        self._state = ConnectionState.DISCONNECTED
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    def _connect_options(self) -> ConnectOptions:
        """Build connect options, preferring the bearer token over email/password."""
        settings = self.settings
        options = ConnectOptions(workspace=settings.workspace, connection_timeout=settings.connection_timeout)
        if settings.token is not None and settings.token.get_secret_value():
            options.token = settings.token.get_secret_value()
        elif settings.email and settings.password is not None and settings.password.get_secret_value():
            options.email = settings.email
            options.password = settings.password.get_secret_value()
        else:
            raise MissingCredentialsError()
        return options

    async def connect(self) -> PlatformClient:
        """Return the cached session, connecting first if needed."""
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is not None:
                return self._client

            options = self._connect_options()
            self._state = ConnectionState.CONNECTING
            logger.info(f"Connecting to Huly at {self.settings.url} (workspace: {self.settings.workspace})")
            try:
                self._client = await self._connector(self.settings.url, options)
            except Exception as e:
                cause = getattr(e, "message", None) or str(e) or type(e).__name__
                logger.error(f"Failed to connect to Huly: {cause}")
                raise RemoteConnectFailedError(cause) from e
            finally:
                if self._client is None:
                    self._state = ConnectionState.DISCONNECTED

            self._state = ConnectionState.CONNECTED
            logger.info("Connected to Huly")
            return self._client

    async def disconnect(self) -> None:
        """Close the session if there is one."""
        async with self._lock:
            if self._client is None:
                return
            client, self._client = self._client, None
            self._state = ConnectionState.DISCONNECTED
            logger.info("Disconnecting from Huly")
            await client.close()

    def get_client(self) -> PlatformClient:
        """Return the live session without connecting.

        Raises:
            NotConnectedError: ``connect()`` has not completed yet
        """
        if self._client is None:
            raise NotConnectedError()
        return self._client

    def is_connected(self) -> bool:
        return self._client is not None

    async def ping(self, timeout_ms: Optional[int] = None) -> bool:
        """Probe the session with an account lookup.

        Returns False when disconnected, when the probe fails, or when it does
        not finish within ``timeout_ms``. Never raises.
        """
        client = self._client
        if client is None:
            return False

        timeout_ms = timeout_ms if timeout_ms is not None else self.settings.ping_timeout
        try:
            probe = asyncio.ensure_future(client.get_account())
        except Exception as e:
            logger.warning(f"Ping failed: {type(e).__name__}: {e}")
            return False

        done, _ = await asyncio.wait({probe}, timeout=timeout_ms / 1000)
        if not done:
            # Abandon the probe so a stalled call cannot hold up the caller.
            probe.cancel()
            probe.add_done_callback(_consume_result)
            logger.warning(f"Ping timed out after {timeout_ms} ms")
            return False

        if probe.cancelled():
            return False
        error = probe.exception()
        if error is not None:
            logger.warning(f"Ping failed: {type(error).__name__}: {error}")
            return False
        return True


def _consume_result(task: "asyncio.Future") -> None:
    if not task.cancelled():
        task.exception()
