"""cv_branch MCP tool: create, list and merge branches."""

import logging
from typing import Annotated, Literal

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from content_vcs.config import get_default_author
from content_vcs.exceptions import VersioningError
from content_vcs.service import ContentVersioning
from content_vcs.tools.formatters import format_branch, format_result_list, format_version_compact

logger = logging.getLogger(__name__)


async def run_cv_branch(
    service: ContentVersioning,
    action: str,
    document_id: str | None = None,
    name: str | None = None,
    from_version: str | None = None,
    description: str | None = None,
    source_branch_id: str | None = None,
    target_branch_id: str | None = None,
    message: str | None = None,
) -> str:
    """Tool body, separated from registration so it runs without an MCP context."""
    author = get_default_author()
    try:
        if action == "merge":
            if not source_branch_id or not target_branch_id:
                return "Error: source_branch_id and target_branch_id are required to merge."
            version = await service.merge_branches(
                source_branch_id, target_branch_id, message, merged_by=author
            )
            return f"Merged into {format_version_compact(version)}"

        if not document_id:
            return f"Error: document_id is required for {action}."

        if action == "create":
            if not name:
                return "Error: name is required to create a branch."
            branch = await service.create_branch(
                document_id, name, from_version, description=description, created_by=author
            )
            return f"Branch {format_branch(branch)}"

        structure = await service.branch_structure(document_id)
        formatted = []
        for item in structure:
            lines = [format_branch(item.branch, len(item.versions))]
            lines.extend(
                f"  {v.version_number} {v.change_summary or ''}".rstrip() for v in item.versions
            )
            formatted.append("\n".join(lines))
        return format_result_list(formatted, header=f"Branches of {document_id}")
    except VersioningError as exc:
        logger.warning("cv_branch %s failed: %s", action, exc)
        return f"Error: {exc}"


def register_cv_branch(mcp: FastMCP) -> None:
    """Register the cv_branch tool with the MCP server."""

    @mcp.tool()
    async def cv_branch(
        action: Annotated[
            Literal["create", "list", "merge"],
            Field(description="create a branch, list branches, or merge one into another"),
        ],
        document_id: Annotated[str | None, Field(description="Document (create/list)")] = None,
        name: Annotated[str | None, Field(description="Branch name (create)")] = None,
        from_version: Annotated[
            str | None, Field(description="Version the branch starts from (create)")
        ] = None,
        description: Annotated[str | None, Field(description="Branch purpose (create)")] = None,
        source_branch_id: Annotated[
            str | None, Field(description="Branch to merge and retire (merge)")
        ] = None,
        target_branch_id: Annotated[
            str | None, Field(description="Branch receiving the merge (merge)")
        ] = None,
        message: Annotated[str | None, Field(description="Merge change summary")] = None,
        ctx: Context | None = None,
    ) -> str:
        """Manage branches of a document.

        Merge is last-writer-wins: the source branch's latest version becomes a
        new version on the target, and the source branch is retired.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        service: ContentVersioning = ctx.lifespan_context["service"]
        return await run_cv_branch(
            service,
            action,
            document_id=document_id,
            name=name,
            from_version=from_version,
            description=description,
            source_branch_id=source_branch_id,
            target_branch_id=target_branch_id,
            message=message,
        )
