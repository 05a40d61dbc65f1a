"""
Application settings and configuration.
"""

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class StoreConfig:
    """
    Connection parameters for one relational store.

    Attributes:
        name: Logical store name used in logs ("text" or "files")
        host: Database host
        port: Database port
        user: Database user
        password: Database password
        database: Database name
        ca_b64: Optional base64-encoded PEM CA bundle; enables TLS when set
        min_size: Connections kept open by the pool
        max_size: Upper bound on concurrent connections
        acquire_timeout: Seconds to wait for a pooled connection
        command_timeout: Seconds before a statement is cancelled
    """

    name: str
    host: str
    port: int
    user: Optional[str]
    password: Optional[str]
    database: str
    ca_b64: Optional[str] = None
    min_size: int = 1
    max_size: int = 10
    acquire_timeout: float = 10.0
    command_timeout: float = 60.0


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Text store (messages)
    text_db_host: str = Field(default="localhost", description="Text store host")
    text_db_port: int = Field(default=5432, description="Text store port")
    text_db_user: Optional[str] = Field(default=None, description="Text store user")
    text_db_password: Optional[str] = Field(
        default=None, description="Text store password"
    )
    text_db_name: str = Field(default="chatarchive_text", description="Text database")
    text_db_ca_b64: Optional[str] = Field(
        default=None, description="Base64 PEM CA bundle for the text store"
    )

    # Files store (attachments)
    files_db_host: str = Field(default="localhost", description="Files store host")
    files_db_port: int = Field(default=5432, description="Files store port")
    files_db_user: Optional[str] = Field(default=None, description="Files store user")
    files_db_password: Optional[str] = Field(
        default=None, description="Files store password"
    )
    files_db_name: str = Field(
        default="chatarchive_files", description="Files database"
    )
    files_db_ca_b64: Optional[str] = Field(
        default=None, description="Base64 PEM CA bundle for the files store"
    )

    # Connection pools
    db_pool_min_size: int = Field(default=1, description="Minimum pooled connections")
    db_pool_max_size: int = Field(
        default=10, description="Maximum connections per store"
    )
    db_acquire_timeout: float = Field(
        default=10.0, description="Seconds to wait for a pooled connection"
    )
    db_command_timeout: float = Field(
        default=60.0, description="Statement timeout in seconds"
    )

    # Attachments and messages
    attachment_url_template: str = Field(
        default="http://localhost:8000/api/files/{id}",
        description="Retrieval URL template, formatted with the attachment id",
    )
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024, description="Maximum upload size in bytes"
    )
    max_content_length: int = Field(
        default=10_000, description="Maximum message length in characters"
    )

    # Retention
    message_retention_days: int = Field(default=90, description="Message lifetime")
    attachment_retention_days: int = Field(
        default=30, description="Attachment lifetime"
    )
    cleanup_interval_hours: float = Field(
        default=24.0, description="Scheduled cleanup interval, 0 disables it"
    )
    auto_migrate: bool = Field(
        default=True, description="Create tables on startup if missing"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )
    log_level: str = Field(default="INFO", description="Log level")

    class Config:
        env_prefix = "CHATARCHIVE_"
        env_file = ".env"

    def text_store_config(self) -> StoreConfig:
        """Build the connection config for the text (messages) store."""
        return StoreConfig(
            name="text",
            host=self.text_db_host,
            port=self.text_db_port,
            user=self.text_db_user,
            password=self.text_db_password,
            database=self.text_db_name,
            ca_b64=self.text_db_ca_b64 or None,
            min_size=self.db_pool_min_size,
            max_size=self.db_pool_max_size,
            acquire_timeout=self.db_acquire_timeout,
            command_timeout=self.db_command_timeout,
        )

    def files_store_config(self) -> StoreConfig:
        """Build the connection config for the files (attachments) store."""
        return StoreConfig(
            name="files",
            host=self.files_db_host,
            port=self.files_db_port,
            user=self.files_db_user,
            password=self.files_db_password,
            database=self.files_db_name,
            ca_b64=self.files_db_ca_b64 or None,
            min_size=self.db_pool_min_size,
            max_size=self.db_pool_max_size,
            acquire_timeout=self.db_acquire_timeout,
            command_timeout=self.db_command_timeout,
        )


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging with development-friendly structured output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    from ..utils.logging.structured import create_development_formatter

    log_level = getattr(logging, level.upper())
    formatter = create_development_formatter()

    # Configure only our application logger (chatarchive.*)
    app_logger = logging.getLogger("chatarchive")
    app_logger.setLevel(log_level)

    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    # Prevent propagation to root logger to avoid duplication
    app_logger.propagate = False

    # Root logger keeps uvicorn logs flowing
    logging.getLogger().setLevel(log_level)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
