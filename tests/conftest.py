"""Shared fixtures: small documentation trees on disk."""

import json
from pathlib import Path

import pytest


def write_node(
    root: Path,
    relative: str,
    metadata: dict | str | None,
    content: str | None,
) -> Path:
    """Create a documentation directory with its metadata and content files.

    Files are named after the lower-cased directory name. Pass None to leave
    a file out, or a string to write raw (possibly malformed) metadata.
    """
    directory = root / relative
    directory.mkdir(parents=True, exist_ok=True)
    name = directory.name.lower()
    if metadata is not None:
        raw = metadata if isinstance(metadata, str) else json.dumps(metadata)
        (directory / f"{name}.json").write_text(raw, encoding="utf-8")
    if content is not None:
        (directory / f"{name}.md").write_text(content, encoding="utf-8")
    return directory


def principle_meta(name: str, **extra) -> dict:
    return {"name": name, "owner": "platform-team", "tags": ["core"], "value": f"{name} matters", **extra}


def practice_meta(name: str, **extra) -> dict:
    return {"name": name, "owner": "platform-team", "tags": ["practice"], "metrics": f"{name} score", **extra}


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """A handbook with a healthy principle, a broken one and a deep one.

    <root>/
    ├── alpha/            principle with practices "testing" and "review"
    │   ├── testing/      practice with sub-practice "unit"
    │   │   └── unit/
    │   └── review/
    ├── beta/             malformed metadata
    └── p/x/y/z           four levels deep
    """
    root = tmp_path / "handbook"
    root.mkdir()
    (root / "README.md").write_text("# Handbook\n")

    write_node(root, "alpha", principle_meta("Alpha"), "# Alpha\n\nBe alpha.\n")
    write_node(root, "alpha/testing", practice_meta("Testing"), "# Testing\n")
    write_node(root, "alpha/testing/unit", practice_meta("Unit tests"), "# Unit\n")
    write_node(root, "alpha/review", practice_meta("Code review"), "# Review\n")

    write_node(root, "beta", "{not json", "# Beta\n")
    write_node(root, "beta/anything", practice_meta("Anything"), "# Anything\n")

    write_node(root, "p", principle_meta("P"), "# P\n")
    write_node(root, "p/x", practice_meta("X"), "# X\n")
    write_node(root, "p/x/y", practice_meta("Y"), "# Y\n")
    write_node(root, "p/x/y/z", practice_meta("Z"), "# Z\n")
    return root
