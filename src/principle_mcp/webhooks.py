"""Incoming GitHub push webhooks - turn a push into a selective reindex.

GitHub posts a JSON payload for every push. The paths touched by its commits
name the principles to refresh: the first path segment is the principle's
directory. Files at the repository root belong to no principle.

Payload fields used:
{
    "ref": "refs/heads/main",
    "head_commit": {"added": [...], "removed": [...], "modified": [...]},
    "commits": [{"added": [...], "removed": [...], "modified": [...]}, ...]
}
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from starlette.requests import Request
from starlette.responses import JSONResponse

from principle_mcp.config import Config
from principle_mcp.indexer import Indexer

if TYPE_CHECKING:
    from fastmcp import FastMCP

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/github"
CHANGE_LISTS = ("added", "removed", "modified")


def principle_name_from_path(path: str) -> str | None:
    """Top-level directory of a changed file, or None for root-level files."""
    parts = [part for part in path.strip().split("/") if part]
    if len(parts) < 2:
        return None
    return parts[0]


def _changed_paths(commit: Any) -> Iterable[str]:
    if not isinstance(commit, dict):
        return
    for key in CHANGE_LISTS:
        paths = commit.get(key)
        if isinstance(paths, list):
            for path in paths:
                if isinstance(path, str):
                    yield path


def extract_affected_principles(payload: dict[str, Any]) -> set[str]:
    """Collect the principle names touched by a push.

    Args:
        payload: Decoded push event payload

    Returns:
        Set of top-level directory names with added, removed or modified files.
    """
    commits = [payload.get("head_commit")]
    all_commits = payload.get("commits")
    if isinstance(all_commits, list):
        commits.extend(all_commits)

    principles: set[str] = set()
    for commit in commits:
        for path in _changed_paths(commit):
            name = principle_name_from_path(path)
            if name is not None:
                principles.add(name)
    return principles


def handle_push_event(payload: dict[str, Any], indexer: Indexer, branch: str) -> set[str]:
    """Queue a reindex of the principles a push touched.

    Pushes to other branches are ignored. Returns immediately; the reindex
    runs in the background.

    Returns:
        The principle names queued for reindexing.
    """
    ref = payload.get("ref", "")
    logger.info("Push event for ref %s", ref)

    if ref != f"refs/heads/{branch}":
        logger.info("Push to %s is not for branch %s, ignoring", ref, branch)
        return set()

    affected = extract_affected_principles(payload)
    if not affected:
        logger.info("No principles affected by this push")
        return set()

    logger.info("Affected principles to reindex: %s", sorted(affected))
    indexer.trigger_reindex(affected)
    return affected


def register_webhook_route(mcp: "FastMCP", indexer: Indexer, config: Config) -> None:
    """Register the GitHub push webhook route with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        indexer: Indexer that reindexes on push
        config: Config instance, for the tracked branch
    """
    branch = config.github_branch

    @mcp.custom_route(WEBHOOK_PATH, methods=["POST"])
    async def github_webhook(request: Request) -> JSONResponse:
        event = request.headers.get("X-GitHub-Event", "push")
        if event == "ping":
            return JSONResponse({"status": "pong"})
        if event != "push":
            logger.debug("Ignoring GitHub event %s", event)
            return JSONResponse({"status": "ignored", "event": event})

        try:
            payload = json.loads(await request.body())
        except ValueError:
            logger.warning("Rejected webhook with an invalid JSON body")
            return JSONResponse({"error": "Invalid JSON payload"}, status_code=400)
        if not isinstance(payload, dict):
            return JSONResponse({"error": "Payload must be a JSON object"}, status_code=400)

        queued = handle_push_event(payload, indexer, branch)
        return JSONResponse(
            {"status": "accepted", "reindexing": sorted(queued)},
            status_code=202,
        )
