"""
principleMCP - in-memory mirror of a principles and practices handbook.

Crawls a documentation repository on GitHub (principles, practices and
sub-practices, each a directory with a JSON metadata file and a markdown
file) into an in-memory index and serves it over MCP.

Stack:
- Python + FastMCP (resources, tools and the push webhook route)
- httpx (GitHub REST API)
- Thread pools for the concurrent crawl
"""

__version__ = "0.1.0"
