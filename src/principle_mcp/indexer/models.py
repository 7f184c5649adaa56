"""Data models for the indexer."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

_EMPTY: Mapping[str, "Practice"] = MappingProxyType({})


class NodeKind(str, Enum):
    """Level of a directory in the documentation tree."""

    PRINCIPLE = "principle"
    PRACTICE = "practice"


@dataclass(frozen=True)
class PrincipleMetadata:
    """Metadata of a top-level principle directory."""

    name: str
    owner: str
    tags: tuple[str, ...] = ()
    value: str = ""  # Why the principle matters


@dataclass(frozen=True)
class PracticeMetadata:
    """Metadata of a practice or sub-practice directory."""

    name: str
    owner: str
    tags: tuple[str, ...] = ()
    metrics: str = ""  # How adherence is measured


Metadata = Union[PrincipleMetadata, PracticeMetadata]


def _freeze(children: Mapping[str, "Practice"] | None) -> Mapping[str, "Practice"]:
    if not children:
        return _EMPTY
    return MappingProxyType(dict(children))


@dataclass(frozen=True)
class Practice:
    """A practice directory, nested under a principle or another practice."""

    content: str
    metadata: PracticeMetadata
    sub_practices: Mapping[str, "Practice"] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sub_practices", _freeze(self.sub_practices))

    @property
    def children(self) -> Mapping[str, "Practice"]:
        return self.sub_practices


@dataclass(frozen=True)
class Principle:
    """A top-level principle directory and everything beneath it."""

    content: str
    metadata: PrincipleMetadata
    practices: Mapping[str, Practice] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "practices", _freeze(self.practices))

    @property
    def children(self) -> Mapping[str, Practice]:
        return self.practices


Node = Union[Principle, Practice]


def metadata_to_dict(metadata: Metadata) -> dict[str, Any]:
    """Render metadata as a JSON-compatible dict."""
    data: dict[str, Any] = {
        "name": metadata.name,
        "owner": metadata.owner,
        "tags": list(metadata.tags),
    }
    if isinstance(metadata, PrincipleMetadata):
        data["value"] = metadata.value
    else:
        data["metrics"] = metadata.metrics
    return data


def node_to_dict(node: Node) -> dict[str, Any]:
    """Render a node and its whole subtree as JSON-compatible dicts.

    Principles list their children under ``practices``, practices under
    ``sub_practices``. Children are sorted by key.
    """
    children = {key: node_to_dict(child) for key, child in sorted(node.children.items())}
    data: dict[str, Any] = {
        "type": NodeKind.PRINCIPLE.value if isinstance(node, Principle) else NodeKind.PRACTICE.value,
        "metadata": metadata_to_dict(node.metadata),
        "content": node.content,
    }
    if isinstance(node, Principle):
        data["practices"] = children
    else:
        data["sub_practices"] = children
    return data
