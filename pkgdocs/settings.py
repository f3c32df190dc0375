"""Configuration management for pkgdocs using pydantic-settings."""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pkgdocs.paths import get_default_packages_root


class GeneralSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Content host credentials
    github_token: str = Field(
        default="",
        description="Optional GitHub bearer token (raises the API rate limit)",
    )

    # [Observability] Sentry
    sentry_dsn: str = Field(
        default="",
        description="Sentry DSN for error reporting",
    )
    environment: str = Field(
        default="dev",
        description="Deployment environment reported to Sentry",
    )

    # [Observability] Logfire
    logfire_token: str = Field(
        default="",
        description="Logfire write token for tracing",
    )


class PkgDocsSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PKGDOCS_",
        case_sensitive=False,
        extra="ignore",
    )

    mode: Literal["local", "github"] = Field(
        default="local",
        description="Where package content comes from: local directory tree or GitHub API",
    )

    # Registry
    packages_root: Path = Field(
        default_factory=get_default_packages_root,
        description="Root content directory (local mode)",
    )
    registry_file: Path | None = Field(
        default=None,
        description="JSON registry file; the builtin package table is used when unset",
    )

    # Server settings
    server_name: str = Field(
        default="gaddario98-react-docs",
        description="Name announced to MCP clients",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level for the pkgdocs and fastmcp loggers",
    )

    # GitHub settings
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )
    http_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds for GitHub requests",
    )
    hosted_search: bool = Field(
        default=True,
        description="Use GitHub code search instead of scanning every file (github mode)",
    )


general_settings = GeneralSettings()
pkgdocs_settings = PkgDocsSettings()
