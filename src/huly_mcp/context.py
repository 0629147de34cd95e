"""Gateway context shared by every tool, resource and prompt handler."""
import logging
from dataclasses import dataclass, field
from typing import Optional

from .bridge import DocumentBridge
from .config import HulySettings
from .connection import Connector, HulyConnection

logger = logging.getLogger("huly-mcp.context")


@dataclass
class GatewayContext:
    """Owns the connection handle and the bridge built on top of it."""

    settings: HulySettings
    connection: HulyConnection
    bridge: DocumentBridge = field(init=False)

    def __post_init__(self):
        self.bridge = DocumentBridge(self.connection)

    @classmethod
    def create(cls, settings: HulySettings, connector: Optional[Connector] = None) -> "GatewayContext":
        return cls(settings=settings, connection=HulyConnection(settings, connector))

    async def teardown(self) -> None:
        """Close the Huly session; safe to call more than once."""
        if self.connection.is_connected():
            logger.info("Closing Huly session")
        await self.connection.disconnect()
