"""Configuration management using Pydantic Settings.

Features:
- Environment variable loading (the historical names SECRET, PORT, SCRIPT...)
- Type validation
- Default values
- Computed properties
"""

from pathlib import Path
from typing import Any, List, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.constants import (
    DEFAULT_BOOK_URL,
    DEFAULT_DEPLOY_REF,
    DEFAULT_DOCS_URL,
    DEFAULT_NOT_FOUND_PAGE,
    DEFAULT_PORT,
    DEFAULT_PUBLIC_DIR,
    DEFAULT_SCRIPT_PATH,
    DEFAULT_SHELL,
    DEFAULT_TRIGGER_URL,
    DEFAULT_WEBHOOK_SECRET,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Webhook
    webhook_secret: SecretStr = Field(
        SecretStr(DEFAULT_WEBHOOK_SECRET),
        description="Shared secret used to sign GitHub webhook payloads",
        validation_alias=AliasChoices("SECRET", "WEBHOOK_SECRET", "webhook_secret"),
    )
    deploy_ref: str = Field(
        DEFAULT_DEPLOY_REF,
        description="Branch reference whose pushes trigger a deployment",
        validation_alias=AliasChoices("DEPLOY_REF", "deploy_ref"),
    )

    # Deployment script
    script_path: str = Field(
        DEFAULT_SCRIPT_PATH,
        description="Deployment script run through the shell on every push",
        validation_alias=AliasChoices("SCRIPT", "SCRIPT_PATH", "script_path"),
    )
    script_shell: str = Field(
        DEFAULT_SHELL, description="Shell used to run the deployment script"
    )

    # CloudFront
    book_cdn_dist_id: Optional[str] = Field(
        None, description="CloudFront distribution serving the book"
    )
    docs_cdn_dist_id: Optional[str] = Field(
        None, description="CloudFront distribution serving the API docs"
    )
    invalidate_on_failure: bool = Field(
        True,
        description="Invalidate the CDN even when the deploy script exits non-zero",
    )

    # Server
    port: int = Field(
        DEFAULT_PORT,
        description="HTTP port",
        validation_alias=AliasChoices("PORT", "port"),
        ge=1,
        le=65535,
    )
    listen_host: str = Field("0.0.0.0", description="HTTP bind address")

    # Static sites
    enable_static_sites: bool = Field(
        True, description="Serve the docs and book sites next to the webhook"
    )
    docs_url: str = Field(DEFAULT_DOCS_URL, description="Host serving the API docs")
    book_url: str = Field(DEFAULT_BOOK_URL, description="Host serving the book")
    trigger_url: str = Field(
        DEFAULT_TRIGGER_URL, description="Host receiving the webhook"
    )
    docs_base_url: str = Field(
        DEFAULT_DOCS_URL, description="Public base URL used in docs redirects"
    )
    book_base_url: str = Field(
        DEFAULT_BOOK_URL, description="Public base URL used in book redirects"
    )
    public_dir: Path = Field(
        Path(DEFAULT_PUBLIC_DIR), description="Root of the deployed static files"
    )
    not_found_page: Path = Field(
        Path(DEFAULT_NOT_FOUND_PAGE), description="HTML page rendered for 404s"
    )

    # Monitoring
    log_level: str = Field("INFO", description="Logging level")

    # Development
    debug: bool = Field(False, description="Enable debug mode")
    development_mode: bool = Field(False, description="Enable development features")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("book_cdn_dist_id", "docs_cdn_dist_id", mode="before")
    @classmethod
    def blank_distribution_is_unset(cls, v: Any) -> Optional[str]:
        """Treat blank distribution IDs as unset."""
        if v is None:
            return None
        if isinstance(v, str):
            value = v.strip()
            return value or None
        return v  # type: ignore[no-any-return]

    @field_validator("deploy_ref")
    @classmethod
    def validate_deploy_ref(cls, v: str) -> str:
        """Require a fully qualified git reference."""
        if not v.startswith("refs/"):
            raise ValueError(f"deploy_ref must be a full git ref, got: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Any) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()  # type: ignore[no-any-return]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not (self.debug or self.development_mode)

    @property
    def webhook_secret_str(self) -> str:
        """Get webhook secret as string."""
        return self.webhook_secret.get_secret_value()

    @property
    def uses_default_secret(self) -> bool:
        """Check if the webhook secret was left at its insecure default."""
        return self.webhook_secret_str == DEFAULT_WEBHOOK_SECRET

    @property
    def distribution_ids(self) -> List[str]:
        """Configured CloudFront distribution IDs, book first."""
        return [
            dist_id
            for dist_id in (self.book_cdn_dist_id, self.docs_cdn_dist_id)
            if dist_id
        ]
