"""cv_versions MCP tool: version history and single-version retrieval."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from content_vcs.exceptions import VersioningError
from content_vcs.service import ContentVersioning
from content_vcs.tools.formatters import (
    format_result_list,
    format_version_compact,
    format_version_full,
)

logger = logging.getLogger(__name__)

_DEFAULT_LIMIT = 20


async def run_cv_versions(
    service: ContentVersioning,
    document_id: str | None = None,
    branch_name: str | None = None,
    version_id: str | None = None,
    limit: int = _DEFAULT_LIMIT,
) -> str:
    """Tool body, separated from registration so it runs without an MCP context."""
    try:
        if version_id:
            version = await service.get_version(version_id)
            return format_version_full(version, await _branch_name(service, version.branch_id))

        if not document_id:
            return "Error: document_id or version_id is required."

        versions = await service.get_versions(document_id, branch_name)
        names = {b.id: b.name for b in await service.list_branches(document_id)}
        formatted = [format_version_compact(v, names.get(v.branch_id)) for v in versions[:limit]]
        header = f"History of {document_id}" + (f" @{branch_name}" if branch_name else "")
        return format_result_list(formatted, header=header)
    except VersioningError as exc:
        logger.warning("cv_versions failed: %s", exc)
        return f"Error: {exc}"


async def _branch_name(service: ContentVersioning, branch_id: str | None) -> str | None:
    if branch_id is None:
        return None
    branch = await service.branches.get_branch(branch_id)
    return branch.name


def register_cv_versions(mcp: FastMCP) -> None:
    """Register the cv_versions tool with the MCP server."""

    @mcp.tool()
    async def cv_versions(
        document_id: Annotated[
            str | None, Field(description="Document whose history to list")
        ] = None,
        branch_name: Annotated[
            str | None, Field(description="Only versions on this branch")
        ] = None,
        version_id: Annotated[
            str | None, Field(description="Return this single version in full instead")
        ] = None,
        limit: Annotated[int, Field(description="Maximum versions listed", ge=1, le=100)] = (
            _DEFAULT_LIMIT
        ),
        ctx: Context | None = None,
    ) -> str:
        """List a document's versions newest first, or show one version in full."""
        if ctx is None:
            raise RuntimeError("Context not injected")
        service: ContentVersioning = ctx.lifespan_context["service"]
        return await run_cv_versions(service, document_id, branch_name, version_id, limit)
