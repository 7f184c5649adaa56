"""MCP tools for principleMCP server.

This module defines the tools exposed by the MCP server:
- list_principles: Summaries of every indexed principle
- get_principle: A principle with its full practice tree
- get_practice: One practice or sub-practice, addressed by path
- index_status: Size of the index and running jobs
- reindex_principles / reindex_all: Queue background reindexing
"""

from fastmcp import FastMCP

from principle_mcp.indexer import Indexer, Practice, node_to_dict
from principle_mcp.indexer.models import metadata_to_dict


def find_practice(indexer: Indexer, principle: str, path: list[str]) -> Practice | None:
    """Walk from a principle through practices and sub-practices along ``path``."""
    node = indexer.get_principle(principle)
    if node is None or not path:
        return None

    current = node.practices.get(path[0])
    for key in path[1:]:
        if current is None:
            return None
        current = current.sub_practices.get(key)
    return current


def register_tools(mcp: FastMCP, indexer: Indexer) -> None:
    """Register all tools with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        indexer: Indexer serving the principle cache
    """

    @mcp.tool()
    def list_principles() -> list[dict]:
        """List every indexed principle.

        Returns:
            List of principles sorted by key, each with:
            - key: Directory name of the principle
            - metadata: name, owner, tags and value
            - practices: Keys of its direct practices
        """
        principles = indexer.get_all_principles()
        return [
            {
                "key": key,
                "metadata": metadata_to_dict(principles[key].metadata),
                "practices": sorted(principles[key].practices),
            }
            for key in sorted(principles)
        ]

    @mcp.tool()
    def get_principle(name: str) -> dict:
        """Get a principle with all of its practices and sub-practices.

        Args:
            name: Directory name of the principle (case-sensitive)

        Returns:
            The principle tree, or {"found": False} if it is not indexed.
        """
        principle = indexer.get_principle(name)
        if principle is None:
            return {"name": name, "found": False}
        return {"name": name, "found": True, **node_to_dict(principle)}

    @mcp.tool()
    def get_practice(principle: str, path: list[str]) -> dict:
        """Get a practice or sub-practice.

        Args:
            principle: Directory name of the principle
            path: Practice keys from the principle downwards, e.g.
                  ["testing", "unit-tests"] for a sub-practice

        Returns:
            The practice subtree, or {"found": False} if any step is missing.
        """
        practice = find_practice(indexer, principle, path)
        if practice is None:
            return {"principle": principle, "path": path, "found": False}
        return {"principle": principle, "path": path, "found": True, **node_to_dict(practice)}

    @mcp.tool()
    def index_status() -> dict:
        """Report how many principles are indexed and whether indexing is running."""
        return indexer.status()

    @mcp.tool()
    def reindex_principles(names: list[str]) -> dict:
        """Queue a background reindex of the named principles.

        Args:
            names: Directory names of the principles to refresh

        Returns:
            The names queued; indexing continues after this returns.
        """
        queued = sorted(set(names))
        indexer.trigger_reindex(queued)
        return {"status": "queued" if queued else "nothing to do", "principles": queued}

    @mcp.tool()
    def reindex_all() -> dict:
        """Queue a background full index of the repository."""
        indexer.trigger_full_index()
        return {"status": "queued"}
