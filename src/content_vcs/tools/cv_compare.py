"""cv_compare MCP tool: diff two versions."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from content_vcs.compare.diff import unified_content_diff
from content_vcs.config import get_default_author
from content_vcs.exceptions import VersioningError
from content_vcs.service import ContentVersioning
from content_vcs.tools.formatters import format_comparison

logger = logging.getLogger(__name__)


async def run_cv_compare(
    service: ContentVersioning,
    from_version_id: str,
    to_version_id: str,
    show_diff: bool = False,
) -> str:
    """Tool body, separated from registration so it runs without an MCP context."""
    try:
        comparison = await service.compare_versions(
            from_version_id, to_version_id, compared_by=get_default_author()
        )
        diff_text = None
        if show_diff and "content" in comparison.changed_fields:
            old = await service.get_version(from_version_id)
            new = await service.get_version(to_version_id)
            diff_text = unified_content_diff(old, new)
        return format_comparison(comparison, diff_text)
    except VersioningError as exc:
        logger.warning("cv_compare failed: %s", exc)
        return f"Error: {exc}"


def register_cv_compare(mcp: FastMCP) -> None:
    """Register the cv_compare tool with the MCP server."""

    @mcp.tool()
    async def cv_compare(
        from_version_id: Annotated[str, Field(description="Older version (diff base)")],
        to_version_id: Annotated[str, Field(description="Newer version")],
        show_diff: Annotated[
            bool, Field(description="Append a line-level unified diff of the content")
        ] = False,
        ctx: Context | None = None,
    ) -> str:
        """Compare two versions: changed fields, word deltas and similarity.

        Results are cached per ordered pair, so comparing A to B twice is cheap.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        service: ContentVersioning = ctx.lifespan_context["service"]
        return await run_cv_compare(service, from_version_id, to_version_id, show_diff)
