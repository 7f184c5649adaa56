"""MCP Resources for principleMCP.

Resources expose the indexed principles as read-only markdown documents.
"""

from principle_mcp.indexer import Indexer, Principle


def _format_tags(tags: tuple[str, ...]) -> str:
    return ", ".join(tags) if tags else "-"


def get_index_resource(indexer: Indexer) -> str:
    """Resource: principles://index

    Lists every indexed principle with its owner and practices.
    """
    principles = indexer.get_all_principles()
    if not principles:
        return "# Principles\n\nNo principles indexed yet.\n"

    lines = ["# Principles\n\n"]
    for key in sorted(principles):
        principle = principles[key]
        meta = principle.metadata
        lines.append(f"## {meta.name} (`{key}`)\n\n")
        lines.append(f"**Owner:** {meta.owner}\n")
        lines.append(f"**Tags:** {_format_tags(meta.tags)}\n")
        if principle.practices:
            lines.append("**Practices:**\n")
            for practice_key in sorted(principle.practices):
                practice = principle.practices[practice_key]
                lines.append(f"- {practice.metadata.name} (`{practice_key}`)\n")
        lines.append("\n")

    return "".join(lines)


def render_principle(name: str, principle: Principle) -> str:
    """Render a principle as markdown with a metadata header."""
    meta = principle.metadata
    header = f"# {meta.name}\n\n"
    header += f"**Principle:** `{name}`\n"
    header += f"**Owner:** {meta.owner}\n"
    header += f"**Tags:** {_format_tags(meta.tags)}\n"
    if meta.value:
        header += f"**Value:** {meta.value}\n"
    if principle.practices:
        header += f"**Practices:** {', '.join(sorted(principle.practices))}\n"
    header += "\n---\n\n"
    return header + principle.content


def get_principle_resource(indexer: Indexer, name: str) -> str:
    """Resource: principles://{name}

    Raises:
        ValueError: If the principle is not in the index.
    """
    principle = indexer.get_principle(name)
    if principle is None:
        raise ValueError(f"Principle '{name}' not found")
    return render_principle(name, principle)


def register_resources(mcp, indexer: Indexer):
    """Register all resources with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        indexer: Indexer whose cache is served
    """

    @mcp.resource("principles://index")
    def principle_index():
        """List all indexed principles."""
        return get_index_resource(indexer)

    @mcp.resource("principles://{name}")
    def principle_detail(name: str):
        """Read one principle with its metadata."""
        return get_principle_resource(indexer, name)
