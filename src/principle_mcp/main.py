"""Main entry point for principleMCP server."""

import argparse
import logging
import sys

from fastmcp import FastMCP

from principle_mcp.api import register_api_routes
from principle_mcp.config import Config
from principle_mcp.indexer import Indexer, TaskRunner
from principle_mcp.resources import register_resources
from principle_mcp.tools import register_tools
from principle_mcp.webhooks import register_webhook_route

logger = logging.getLogger(__name__)


def create_indexer(config: Config) -> Indexer:
    """Build the indexer for the configured content source."""
    source = config.create_source()
    return Indexer(source, runner=TaskRunner(max_workers=config.max_workers))


def create_server(config: Config, indexer: Indexer | None = None) -> FastMCP:
    """Create and configure the MCP server with all components.

    The initial index is started in the background; the server answers
    immediately with whatever has been indexed so far.

    Args:
        config: Configuration instance with all settings.
        indexer: Optional prebuilt indexer (built from config if omitted).
    """
    mcp = FastMCP(
        name="principleMCP",
        instructions=(
            "principleMCP serves an engineering handbook of principles, the practices "
            "under them and nested sub-practices. Use list_principles to browse, "
            "get_principle or get_practice to read, or the principles:// resources."
        ),
    )

    if indexer is None:
        indexer = create_indexer(config)

    logger.info("Registering resources...")
    register_resources(mcp, indexer)

    logger.info("Registering tools...")
    register_tools(mcp, indexer)

    logger.info("Registering JSON API routes...")
    register_api_routes(mcp, indexer)

    if config.webhooks_enabled:
        logger.info("Registering webhook route...")
        register_webhook_route(mcp, indexer, config)
    else:
        logger.info("Webhooks disabled, skipping webhook route")

    indexer.index_on_startup()

    logger.info("Server configured successfully")
    return mcp


def main() -> None:
    """Main function - starts the MCP server."""
    # Configure logging here to avoid side effects on import
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="principleMCP - MCP server for a principles handbook")
    parser.add_argument(
        "--index-only",
        action="store_true",
        help="Run one full index in the foreground, report it and exit",
    )
    args = parser.parse_args()

    try:
        config = Config.from_env()
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    logger.info("=" * 50)
    logger.info("principleMCP starting...")
    logger.info("  SOURCE:   %s", config.local_root or config.github_repository)
    logger.info("  BRANCH:   %s", config.github_branch)
    logger.info("  PORT:     %s", config.port)
    logger.info("  WORKERS:  %s", config.max_workers)
    logger.info("  WEBHOOKS: %s", "enabled" if config.webhooks_enabled else "disabled")
    logger.info("=" * 50)

    try:
        indexer = create_indexer(config)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    if args.index_only:
        count = indexer.full_index()
        logger.info("Index complete: %d principles", count)
        indexer.shutdown()
        return

    try:
        mcp = create_server(config, indexer)
        logger.info("Starting MCP server on port %s...", config.port)
        mcp.run(transport="sse", host="0.0.0.0", port=config.port)
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception:
        logger.exception("Server error")
        sys.exit(1)
    finally:
        indexer.shutdown()


if __name__ == "__main__":
    main()
