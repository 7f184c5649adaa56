"""
Indexer module for principleMCP.

This module mirrors the documentation tree held in a remote repository into
an in-memory cache. It is the core component of the system: the concurrent
crawl, the cache, and the selective reindex that keeps the two in step.
"""

from principle_mcp.indexer.cache import PrincipleCache
from principle_mcp.indexer.crawler import Crawler
from principle_mcp.indexer.errors import (
    IndexingError,
    MetadataMalformed,
    NodeIncomplete,
    SourceUnavailable,
)
from principle_mcp.indexer.indexer import Indexer
from principle_mcp.indexer.models import (
    Metadata,
    Node,
    NodeKind,
    Practice,
    PracticeMetadata,
    Principle,
    PrincipleMetadata,
    node_to_dict,
)
from principle_mcp.indexer.parser import TreeParser, directory_name, parse_metadata
from principle_mcp.indexer.source import (
    ContentSource,
    DirectoryEntry,
    GitHubContentSource,
    LocalContentSource,
)
from principle_mcp.indexer.tasks import TaskGroup, TaskRunner

__all__ = [
    "ContentSource",
    "Crawler",
    "DirectoryEntry",
    "GitHubContentSource",
    "Indexer",
    "IndexingError",
    "LocalContentSource",
    "Metadata",
    "MetadataMalformed",
    "Node",
    "NodeIncomplete",
    "NodeKind",
    "Practice",
    "PracticeMetadata",
    "Principle",
    "PrincipleCache",
    "PrincipleMetadata",
    "SourceUnavailable",
    "TaskGroup",
    "TaskRunner",
    "TreeParser",
    "directory_name",
    "node_to_dict",
    "parse_metadata",
]
