"""Parser for a single documentation directory.

Each directory holds ``<dirname>.json`` (metadata) and ``<dirname>.md``
(content), where ``<dirname>`` is the lower-cased directory name. Child
directories are practices; other files are ignored.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from principle_mcp.indexer.errors import MetadataMalformed, NodeIncomplete, SourceUnavailable
from principle_mcp.indexer.models import (
    Metadata,
    Node,
    NodeKind,
    Practice,
    PracticeMetadata,
    Principle,
    PrincipleMetadata,
)
from principle_mcp.indexer.source import ContentSource, DirectoryEntry, join_path

logger = logging.getLogger(__name__)


@dataclass
class NodeParts:
    """Everything read for one directory, before its children are crawled."""

    path: str
    metadata: Metadata
    content: str
    subdirectories: list[DirectoryEntry] = field(default_factory=list)


def directory_name(path: str) -> str:
    """Lower-cased last segment of a path, used to name a directory's files."""
    return path.rstrip("/").rsplit("/", 1)[-1].lower()


def _require_str(raw: dict[str, Any], key: str, path: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise MetadataMalformed(f"'{key}' must be a string in {path}", path)
    return value


def _optional_str(raw: dict[str, Any], key: str, path: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MetadataMalformed(f"'{key}' must be a string in {path}", path)
    return value


def parse_metadata(text: str, kind: NodeKind, path: str) -> Metadata:
    """
    Parse a metadata JSON document.

    ``name`` and ``owner`` are required; ``tags`` and the variant field
    (``value`` for principles, ``metrics`` for practices) default to empty.
    Unknown keys are ignored.

    Args:
        text: Raw JSON document
        kind: Level of the directory, selects the metadata variant
        path: Path of the metadata file, for error messages

    Raises:
        MetadataMalformed: If the document is not valid JSON or has the wrong shape.
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataMalformed(f"Invalid JSON in {path}: {e}", path) from e

    if not isinstance(raw, dict):
        raise MetadataMalformed(f"Metadata in {path} must be a JSON object", path)

    name = _require_str(raw, "name", path)
    owner = _require_str(raw, "owner", path)

    tags = raw.get("tags")
    if tags is None:
        tags = []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise MetadataMalformed(f"'tags' must be a list of strings in {path}", path)

    if kind is NodeKind.PRINCIPLE:
        return PrincipleMetadata(
            name=name,
            owner=owner,
            tags=tuple(tags),
            value=_optional_str(raw, "value", path),
        )
    return PracticeMetadata(
        name=name,
        owner=owner,
        tags=tuple(tags),
        metrics=_optional_str(raw, "metrics", path),
    )


class TreeParser:
    """Reads and assembles individual nodes from a content source."""

    def __init__(self, source: ContentSource):
        self.source = source

    def _read_required(self, path: str, node_path: str) -> str:
        try:
            return self.source.read_file(path)
        except SourceUnavailable as e:
            raise NodeIncomplete(f"Required file {path} could not be read: {e}", node_path) from e

    def read_node(self, path: str, kind: NodeKind) -> NodeParts:
        """
        Read one directory's metadata, content and child directory list.

        Raises:
            NodeIncomplete: If the metadata or content file cannot be read.
            MetadataMalformed: If the metadata file does not parse.
            SourceUnavailable: If the directory cannot be listed.
        """
        name = directory_name(path)
        json_path = join_path(path, f"{name}.json")
        md_path = join_path(path, f"{name}.md")

        metadata = parse_metadata(self._read_required(json_path, path), kind, json_path)
        content = self._read_required(md_path, path)
        subdirectories = [e for e in self.source.list_directory(path) if e.is_directory]

        return NodeParts(
            path=path,
            metadata=metadata,
            content=content,
            subdirectories=subdirectories,
        )

    @staticmethod
    def assemble(kind: NodeKind, parts: NodeParts, children: Mapping[str, Practice]) -> Node:
        """Build the node once all of its children have resolved."""
        if kind is NodeKind.PRINCIPLE:
            return Principle(content=parts.content, metadata=parts.metadata, practices=children)
        return Practice(content=parts.content, metadata=parts.metadata, sub_practices=children)
