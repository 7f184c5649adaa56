"""Content sources the crawler reads the documentation tree from.

A content source lists directories and reads files by repository-relative
path. The root of the tree is the empty path ``""``. Every failure surfaces
as :class:`SourceUnavailable`.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import httpx

from principle_mcp.indexer.errors import SourceUnavailable

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class DirectoryEntry:
    """One item of a directory listing."""

    name: str
    path: str  # Relative to the repository root, "/"-separated
    is_directory: bool


class ContentSource(Protocol):
    """Read access to a documentation tree."""

    def list_directory(self, path: str) -> list[DirectoryEntry]: ...

    def read_file(self, path: str) -> str: ...

    def remaining_quota(self) -> int | None: ...


def join_path(parent: str, name: str) -> str:
    """Join repository-relative path segments."""
    parent = parent.strip("/")
    return f"{parent}/{name}" if parent else name


class GitHubContentSource:
    """Reads a repository through the GitHub REST contents API.

    The underlying ``httpx.Client`` keeps a connection pool shared by all
    crawl threads.
    """

    def __init__(
        self,
        repository: str,
        token: str | None = None,
        branch: str = "main",
        api_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        max_connections: int = 16,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            repository: Repository in ``owner/name`` form
            token: Optional token, sent as bearer auth
            branch: Branch or ref the tree is read from
            api_url: Base URL of the GitHub API
            timeout: Timeout in seconds for each request
            max_connections: Upper bound on pooled connections
            transport: Optional transport override (used by tests)
        """
        if "/" not in repository:
            raise ValueError(f"Repository must be in 'owner/name' form, got '{repository}'")

        self.repository = repository
        self.branch = branch

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            limits=httpx.Limits(max_connections=max_connections),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _contents_url(self, path: str) -> str:
        return f"/repos/{self.repository}/contents/{path.strip('/')}"

    def _get(self, url: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.get(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailable(
                f"GitHub returned HTTP {e.response.status_code} for '{path}'", path
            ) from e
        except httpx.RequestError as e:
            raise SourceUnavailable(f"Request for '{path}' failed: {e}", path) from e
        return response

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        logger.debug("Listing %s/%s", self.repository, path)
        response = self._get(
            self._contents_url(path), path, params={"ref": self.branch}
        )
        try:
            items = response.json()
        except ValueError as e:
            raise SourceUnavailable(f"Invalid listing for '{path}'", path) from e

        if not isinstance(items, list):
            raise SourceUnavailable(f"'{path}' is not a directory", path)

        try:
            return [
                DirectoryEntry(
                    name=item["name"],
                    path=item["path"],
                    is_directory=item.get("type") == "dir",
                )
                for item in items
            ]
        except (KeyError, TypeError, AttributeError) as e:
            raise SourceUnavailable(f"Malformed listing entry for '{path}': {e!r}", path) from e

    def read_file(self, path: str) -> str:
        logger.debug("Reading %s/%s", self.repository, path)
        response = self._get(
            self._contents_url(path),
            path,
            params={"ref": self.branch},
            headers={"Accept": "application/vnd.github.raw+json"},
        )
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SourceUnavailable(f"'{path}' is not valid UTF-8", path) from e

    def remaining_quota(self) -> int | None:
        """Remaining core API requests, or None if it cannot be read."""
        try:
            response = self._get("/rate_limit", "rate_limit")
            return int(response.json()["resources"]["core"]["remaining"])
        except (SourceUnavailable, KeyError, TypeError, ValueError) as e:
            logger.debug("Could not read rate limit: %s", e)
            return None


class LocalContentSource:
    """Reads a documentation tree from a local directory (e.g. a checkout)."""

    def __init__(self, root: Path):
        self.root = root

    def _resolve(self, path: str) -> Path:
        """Resolve a relative path, refusing anything outside the root."""
        root = self.root.resolve()
        resolved = (root / path.strip("/")).resolve()
        try:
            resolved.relative_to(root)
        except ValueError as e:
            raise SourceUnavailable(f"Path '{path}' is outside the content root", path) from e
        return resolved

    def list_directory(self, path: str) -> list[DirectoryEntry]:
        directory = self._resolve(path)
        try:
            children = sorted(directory.iterdir())
        except OSError as e:
            raise SourceUnavailable(f"Cannot list '{path}': {e}", path) from e

        return [
            DirectoryEntry(
                name=child.name,
                path=join_path(path, child.name),
                is_directory=child.is_dir(),
            )
            for child in children
            if not child.name.startswith(".")  # Skip .git and other hidden entries
        ]

    def read_file(self, path: str) -> str:
        try:
            return self._resolve(path).read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailable(f"Cannot read '{path}': {e}", path) from e

    def remaining_quota(self) -> int | None:
        """Local reads are not metered."""
        return None
