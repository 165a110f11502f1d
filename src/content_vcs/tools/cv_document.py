"""cv_document MCP tool: create, update and read document heads."""

import logging
from typing import Annotated, Literal

from fastmcp import FastMCP
from fastmcp.server.context import Context
from pydantic import Field

from content_vcs.config import get_default_author
from content_vcs.exceptions import VersioningError
from content_vcs.models.document import DocumentStatus
from content_vcs.service import ContentVersioning
from content_vcs.tools.formatters import format_document, format_version_compact

logger = logging.getLogger(__name__)


async def run_cv_document(
    service: ContentVersioning,
    action: str,
    document_id: str | None = None,
    title: str | None = None,
    content: str | None = None,
    meta_description: str | None = None,
    excerpt: str | None = None,
    status: DocumentStatus | None = None,
    focus_keyword: str | None = None,
    keywords: list[str] | None = None,
    change_summary: str | None = None,
) -> str:
    """Tool body, separated from registration so it runs without an MCP context."""
    author = get_default_author()
    fields = {
        "title": title,
        "content": content,
        "meta_description": meta_description,
        "excerpt": excerpt,
        "status": status,
        "focus_keyword": focus_keyword,
        "keywords": keywords,
    }
    try:
        if action == "create":
            if not title or content is None:
                return "Error: title and content are required to create a document."
            snapshot = {key: value for key, value in fields.items() if value is not None}
            document, version = await service.create_document(snapshot, author_id=author)
            return f"Created {format_document(document)}\n{format_version_compact(version)}"

        if not document_id:
            return f"Error: document_id is required for {action}."

        if action == "update":
            document, version = await service.update_document(
                document_id, fields, change_summary=change_summary, updated_by=author
            )
            return f"Updated {format_document(document)}\n{format_version_compact(version)}"

        document = await service.get_document(document_id)
        return f"{format_document(document)}\n\n{document.content}"
    except VersioningError as exc:
        logger.warning("cv_document %s failed: %s", action, exc)
        return f"Error: {exc}"


def register_cv_document(mcp: FastMCP) -> None:
    """Register the cv_document tool with the MCP server."""

    @mcp.tool()
    async def cv_document(
        action: Annotated[
            Literal["create", "update", "get"],
            Field(description="create a document, update its head (records a version), or get it"),
        ],
        document_id: Annotated[
            str | None, Field(description="Document ID (update/get)")
        ] = None,
        title: Annotated[str | None, Field(description="Document title")] = None,
        content: Annotated[str | None, Field(description="Full body text")] = None,
        meta_description: Annotated[
            str | None, Field(description="SEO meta description (120-160 chars scores best)")
        ] = None,
        excerpt: Annotated[str | None, Field(description="Short teaser text")] = None,
        status: Annotated[
            DocumentStatus | None, Field(description="Publishing status, e.g. DRAFT")
        ] = None,
        focus_keyword: Annotated[
            str | None, Field(description="Primary keyword phrase for SEO scoring")
        ] = None,
        keywords: Annotated[
            list[str] | None, Field(description="Secondary keywords")
        ] = None,
        change_summary: Annotated[
            str | None, Field(description="Note recorded on the new version (update)")
        ] = None,
        ctx: Context | None = None,
    ) -> str:
        """Create, update, or read a document.

        Every create and update records an immutable, scored version.
        """
        if ctx is None:
            raise RuntimeError("Context not injected")
        service: ContentVersioning = ctx.lifespan_context["service"]
        return await run_cv_document(
            service,
            action,
            document_id=document_id,
            title=title,
            content=content,
            meta_description=meta_description,
            excerpt=excerpt,
            status=status,
            focus_keyword=focus_keyword,
            keywords=keywords,
            change_summary=change_summary,
        )
