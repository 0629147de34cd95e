"""Gateway configuration loaded from the environment (and an optional .env file)."""
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class HulySettings(BaseSettings):
    """Settings for the Huly connection and the MCP server."""

    # ── Huly connection ──
    url: str = Field(default="http://localhost:8087", alias="HULY_URL")
    workspace: str = Field(default="ws1", alias="HULY_WORKSPACE")
    token: Optional[SecretStr] = Field(default=None, alias="HULY_TOKEN")
    email: Optional[str] = Field(default=None, alias="HULY_EMAIL")
    password: Optional[SecretStr] = Field(default=None, alias="HULY_PASSWORD")

    # ── Timeouts (milliseconds) ──
    connection_timeout: int = Field(default=30000, gt=0, alias="HULY_CONNECTION_TIMEOUT")
    ping_timeout: int = Field(default=5000, gt=0, alias="HULY_PING_TIMEOUT")
    operation_timeout: int = Field(default=60000, gt=0, alias="HULY_OPERATION_TIMEOUT")

    # ── Server ──
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    @property
    def auth_method(self) -> Optional[str]:
        """Which credential ``connect()`` will use, or None when none is configured."""
        if self.token is not None and self.token.get_secret_value():
            return "token"
        if self.email and self.password is not None and self.password.get_secret_value():
            return "email/password"
        return None


@lru_cache
def get_settings() -> HulySettings:
    """Return the process-wide settings, read once."""
    return HulySettings()
