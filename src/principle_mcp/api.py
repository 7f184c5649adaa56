"""Plain JSON read routes over the principle cache, for non-MCP clients.

    GET /api/principles          every principle, keyed by directory name
    GET /api/principles/{name}   one principle and its subtree, 404 if absent
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.requests import Request
from starlette.responses import JSONResponse

from principle_mcp.indexer import Indexer
from principle_mcp.indexer.models import node_to_dict

if TYPE_CHECKING:
    from fastmcp import FastMCP

logger = logging.getLogger(__name__)

API_PATH = "/api/principles"


def register_api_routes(mcp: "FastMCP", indexer: Indexer) -> None:
    """Register the JSON read routes with the FastMCP server.

    Args:
        mcp: FastMCP server instance
        indexer: Indexer whose cache is served
    """

    @mcp.custom_route(API_PATH, methods=["GET"])
    async def list_principles(request: Request) -> JSONResponse:
        principles = indexer.get_all_principles()
        return JSONResponse(
            {name: node_to_dict(principle) for name, principle in sorted(principles.items())}
        )

    @mcp.custom_route(API_PATH + "/{name}", methods=["GET"])
    async def get_principle(request: Request) -> JSONResponse:
        name = request.path_params["name"]
        principle = indexer.get_principle(name)
        if principle is None:
            logger.debug("API request for unknown principle %s", name)
            return JSONResponse({"error": f"Principle not found: {name}"}, status_code=404)
        return JSONResponse(node_to_dict(principle))
