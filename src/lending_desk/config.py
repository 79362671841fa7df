"""Configuration management for the Lending Desk.

Both entry points read the same settings object:
1. Server metadata - name and version announced by the MCP server
2. Transport - how the lending desk MCP server talks to its client
3. Notes service - where the notes JSON file lives and where the REST app binds
4. Development - log level and debug switches
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Settings shared by the lending desk MCP server and the notes service.

    Every field can be overridden with a ``LENDING_DESK_`` prefixed
    environment variable or an entry in a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        # LENDING_DESK_NOTES_PORT=3000 etc.
        env_prefix="LENDING_DESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Server Metadata ===

    server_name: str = Field(
        default="lending-desk",
        description="MCP server name used in the protocol handshake",
        pattern=r"^[a-z0-9-]+$",
    )

    server_version: str = Field(
        default="0.1.0",
        description="Server version reported to clients",
        pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$",
    )

    # === Transport Configuration ===

    transport: str = Field(
        default="stdio",
        description="Transport for the lending desk MCP server",
        pattern=r"^(stdio|streamable-http)$",
    )

    http_host: str = Field(
        default="127.0.0.1",
        description="Host for the streamable-http transport",
    )

    http_port: int = Field(
        default=8080,
        description="Port for the streamable-http transport",
        ge=1024,
        le=65535,
    )

    # === Lending Desk ===

    seed_sample_data: bool = Field(
        default=True,
        description="Start the record store with the sample catalog and roster",
    )

    # === Notes Service ===

    notes_data_file: Path = Field(
        default=Path("data/notes.json"),
        description="JSON file holding persisted notes and reminders",
    )

    notes_host: str = Field(
        default="127.0.0.1",
        description="Host the notes REST service binds to",
    )

    notes_port: int = Field(
        default=3000,
        description="Port the notes REST service binds to",
        ge=1024,
        le=65535,
    )

    # === Development Configuration ===

    debug: bool = Field(
        default=False,
        description="Enable debug logging",
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
    )

    @field_validator("notes_data_file")
    @classmethod
    def validate_notes_data_file(cls, v: Path) -> Path:
        """Resolve the notes file and make sure its directory exists."""
        abs_path = v.absolute()
        abs_path.parent.mkdir(parents=True, exist_ok=True)

        if not abs_path.parent.is_dir():
            raise ValueError(f"Notes directory {abs_path.parent} is not accessible")

        return abs_path

    @field_validator("server_name")
    @classmethod
    def validate_server_name(cls, v: str) -> str:
        if len(v) < 3:
            raise ValueError("Server name must be at least 3 characters")
        if len(v) > 50:
            raise ValueError("Server name must not exceed 50 characters")
        return v

    @property
    def is_development(self) -> bool:
        """True when verbose logging was requested."""
        return self.debug or self.log_level == "DEBUG"

    @property
    def server_info(self) -> dict[str, str]:
        return {
            "name": self.server_name,
            "version": self.server_version,
            "transport": self.transport,
        }


class _ConfigStore:
    """Internal storage for the configuration singleton."""

    _instance: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create the global configuration instance."""
    if _ConfigStore._instance is None:  # type: ignore[reportPrivateUsage]
        _ConfigStore._instance = AppConfig()  # type: ignore[reportPrivateUsage]
    return _ConfigStore._instance  # type: ignore[reportPrivateUsage]


def reset_config() -> None:
    """Drop the cached configuration (used by tests)."""
    _ConfigStore._instance = None  # type: ignore[reportPrivateUsage]
