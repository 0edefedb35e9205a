"""Configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars;
command-line flags take precedence over the environment.
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings


class ImapConfig(BaseSettings):
    """IMAP server the rebuilt message is appended to."""

    model_config = {"env_prefix": "IMAP_"}

    host: str = Field(description="IMAP server hostname")
    port: int = Field(description="IMAP server port")
    use_ssl: bool = Field(default=True, description="Use SSL/TLS connection")
    username: str = Field(description="IMAP login username")
    password: SecretStr = Field(description="IMAP login password")
    mailbox: str = Field(default="INBOX", description="IMAP mailbox/folder to append to")


class EnrichConfig(BaseSettings):
    """Process-wide settings for the enrich tool."""

    model_config = {"env_prefix": "MAIL_ENRICH_"}

    log_level: str = Field(default="WARNING", description="Root log level name")
    log_json: bool = Field(default=False, description="Emit JSON log lines instead of console output")
    regenerate_content_type: bool = Field(
        default=False,
        description="Copy the source Content-Type (type/subtype) onto the rebuilt message",
    )
    text_list_separator: str = Field(
        default="\t\n",
        description="Separator used to flatten multi-valued text headers",
    )
