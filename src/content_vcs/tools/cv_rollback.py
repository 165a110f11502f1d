"""cv_rollback MCP tool: restore a past version as a new one."""

import logging
from typing import Annotated

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from content_vcs.config import get_default_author
from content_vcs.exceptions import VersioningError
from content_vcs.models.version import RollbackOptions
from content_vcs.service import ContentVersioning
from content_vcs.tools.formatters import format_version_compact

logger = logging.getLogger(__name__)


async def run_cv_rollback(
    service: ContentVersioning,
    document_id: str,
    target_version_id: str,
    create_branch: bool = False,
    branch_name: str | None = None,
    preserve_current: bool = False,
) -> str:
    """Tool body, separated from registration so it runs without an MCP context."""
    options = RollbackOptions(
        create_branch=create_branch,
        branch_name=branch_name,
        preserve_current=preserve_current,
        created_by=get_default_author(),
    )
    try:
        version = await service.rollback_to_version(document_id, target_version_id, options)
    except VersioningError as exc:
        logger.warning("cv_rollback failed: %s", exc)
        return f"Error: {exc}"

    line = f"Rolled back as {format_version_compact(version)}"
    if not create_branch and not preserve_current:
        line += "\n  Document head restored"
    return line


def register_cv_rollback(mcp: FastMCP) -> None:
    """Register the cv_rollback tool with the MCP server."""

    @mcp.tool()
    async def cv_rollback(
        document_id: Annotated[str, Field(description="Document to roll back")],
        target_version_id: Annotated[str, Field(description="Version whose content to restore")],
        create_branch: Annotated[
            bool, Field(description="Record the restored copy on a new branch")
        ] = False,
        branch_name: Annotated[
            str | None, Field(description="Branch name when create_branch is set")
        ] = None,
        preserve_current: Annotated[
            bool, Field(description="Keep the document head as it is")
        ] = False,
        ctx: Context | None = None,
    ) -> str:
        """Restore a past version by recording a copy of it as a new version.

        History is never rewritten; the target version stays unchanged.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        service: ContentVersioning = ctx.lifespan_context["service"]
        return await run_cv_rollback(
            service, document_id, target_version_id, create_branch, branch_name, preserve_current
        )
