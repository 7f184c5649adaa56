"""Configuration module for principleMCP.

Loads configuration from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from principle_mcp.indexer.source import (
    GITHUB_API_URL,
    ContentSource,
    GitHubContentSource,
    LocalContentSource,
)


def _int_env(name: str, default: str, minimum: int) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
        if value < minimum:
            raise ValueError(f"must be >= {minimum}, got {value}")
    except ValueError as e:
        raise ValueError(f"Invalid {name} value '{raw}': {e}") from e
    return value


@dataclass
class Config:
    """Application configuration."""

    github_repository: str | None
    github_token: str | None
    github_branch: str
    github_api_url: str
    local_root: Path | None
    port: int
    max_workers: int
    http_timeout: float
    webhooks_enabled: bool

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        port_str = os.getenv("PRINCIPLE_PORT", "8080")
        try:
            port = int(port_str)
            if not 1 <= port <= 65535:
                raise ValueError(f"Port must be between 1 and 65535, got {port}")
        except ValueError as e:
            raise ValueError(f"Invalid PRINCIPLE_PORT value '{port_str}': {e}") from e

        timeout_str = os.getenv("PRINCIPLE_HTTP_TIMEOUT", "30")
        try:
            http_timeout = float(timeout_str)
            if http_timeout <= 0:
                raise ValueError(f"Timeout must be positive, got {http_timeout}")
        except ValueError as e:
            raise ValueError(
                f"Invalid PRINCIPLE_HTTP_TIMEOUT value '{timeout_str}': {e}"
            ) from e

        local_root_str = os.getenv("PRINCIPLE_LOCAL_ROOT")
        local_root = Path(local_root_str).expanduser() if local_root_str else None

        # Webhooks enabled by default
        webhooks_enabled = os.getenv("PRINCIPLE_WEBHOOKS_ENABLED", "true").lower() not in (
            "0",
            "false",
            "no",
        )

        return cls(
            github_repository=os.getenv("GITHUB_REPOSITORY") or None,
            github_token=os.getenv("GITHUB_TOKEN") or None,
            github_branch=os.getenv("GITHUB_BRANCH", "main"),
            github_api_url=os.getenv("GITHUB_API_URL", GITHUB_API_URL),
            local_root=local_root,
            port=port,
            max_workers=_int_env("PRINCIPLE_MAX_WORKERS", "16", minimum=0),
            http_timeout=http_timeout,
            webhooks_enabled=webhooks_enabled,
        )

    def create_source(self) -> ContentSource:
        """Build the content source this configuration points at.

        Raises:
            ValueError: Unless exactly one of GITHUB_REPOSITORY or
                PRINCIPLE_LOCAL_ROOT is set.
        """
        if self.github_repository and self.local_root:
            raise ValueError("Set only one of GITHUB_REPOSITORY or PRINCIPLE_LOCAL_ROOT")

        if self.local_root is not None:
            return LocalContentSource(self.local_root)

        if self.github_repository:
            return GitHubContentSource(
                repository=self.github_repository,
                token=self.github_token,
                branch=self.github_branch,
                api_url=self.github_api_url,
                timeout=self.http_timeout,
                max_connections=max(self.max_workers, 1),
            )

        raise ValueError("One of GITHUB_REPOSITORY or PRINCIPLE_LOCAL_ROOT must be set")
