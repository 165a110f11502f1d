"""FastMCP server with lifespan management and tool registration."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from content_vcs.config import get_db_path, get_log_level
from content_vcs.db.connection import create_connection
from content_vcs.service import ContentVersioning
from content_vcs.tools.cv_branch import register_cv_branch
from content_vcs.tools.cv_compare import register_cv_compare
from content_vcs.tools.cv_document import register_cv_document
from content_vcs.tools.cv_rollback import register_cv_rollback
from content_vcs.tools.cv_versions import register_cv_versions


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[dict[str, Any]]:
    """Open the version database for the lifetime of the server."""
    # Log to stderr; stdout is the MCP stdio transport
    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    logger = logging.getLogger(__name__)

    db_path = get_db_path()
    logger.info("Opening database at %s", db_path)
    db = await create_connection(db_path)
    service = ContentVersioning(db)

    try:
        yield {"db": db, "service": service}
    finally:
        await db.close()
        logger.info("Database connection closed")


_INSTRUCTIONS = """\
Version control for long-form content. Every document keeps an append-only \
history of scored versions (word count, keyword density, readability, SEO).

- cv_document: create a document (records v1.0), update it (records the next \
version), or read its current head.
- cv_versions: list history newest first, optionally for one branch, or show \
a single version in full.
- cv_compare: changed fields, word deltas and similarity between two versions.
- cv_rollback: restore a past version as a new version; history is never \
rewritten.
- cv_branch: create and list branches, or merge one branch into another \
(last writer wins; the source branch is retired and cannot be merged again).
"""


def create_server() -> FastMCP:
    """Create and configure the MCP server with all tools."""
    mcp = FastMCP(
        "content-vcs",
        instructions=_INSTRUCTIONS,
        lifespan=lifespan,
    )

    register_cv_document(mcp)
    register_cv_versions(mcp)
    register_cv_compare(mcp)
    register_cv_rollback(mcp)
    register_cv_branch(mcp)

    return mcp
