"""Compact output formatters for MCP tool responses."""

from content_vcs.models.branch import Branch
from content_vcs.models.comparison import Comparison
from content_vcs.models.document import Document
from content_vcs.models.version import DocumentVersion


def _score(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.1f}"


def format_document(document: Document) -> str:
    """Format: [id] STATUS | Title (slug, N versions)."""
    return (
        f"[{document.id}] {document.status.value} | {document.title}"
        f" ({document.slug}, {document.version_count} version(s))"
    )


def format_version_header(version: DocumentVersion, branch_name: str | None = None) -> str:
    """Format: v3.0 [id] STATUS | Title @branch."""
    line = f"{version.version_number} [{version.id}] {version.status.value} | {version.title}"
    if branch_name:
        line += f" @{branch_name}"
    return line


def format_version_metrics(version: DocumentVersion) -> str:
    """Format: words=120 seo=60.0 readability=71.3 density=0.012."""
    parts = [
        f"words={version.word_count}",
        f"seo={_score(version.seo_score)}",
        f"readability={_score(version.readability_score)}",
    ]
    if version.keyword_density is not None:
        parts.append(f"density={version.keyword_density:.3f}")
    return " ".join(parts)


def format_version_compact(version: DocumentVersion, branch_name: str | None = None) -> str:
    """Header + metrics + change summary, no content. For history listings."""
    lines = [format_version_header(version, branch_name), f"  {format_version_metrics(version)}"]
    if version.change_summary:
        lines.append(f"  {version.change_summary}")
    return "\n".join(lines)


def format_version_full(version: DocumentVersion, branch_name: str | None = None) -> str:
    """Compact form followed by the full snapshot text."""
    lines = [format_version_compact(version, branch_name)]
    if version.meta_description:
        lines.append(f"  meta: {version.meta_description}")
    if version.focus_keyword or version.keywords:
        keywords = " ".join(f"#{k}" for k in version.keywords)
        lines.append(f"  keyword: {version.focus_keyword or '-'} {keywords}".rstrip())
    lines.append("")
    lines.append(version.content)
    return "\n".join(lines)


def format_branch(branch: Branch, version_count: int | None = None) -> str:
    """Format: [id] name (main, active) merged into X."""
    flags = ["main" if branch.is_main else "feature", "active" if branch.is_active else "inactive"]
    line = f"[{branch.id}] {branch.name} ({', '.join(flags)})"
    if version_count is not None:
        line += f" {version_count} version(s)"
    if branch.merged_into:
        line += f" merged into {branch.merged_into}"
    return line


def format_comparison(comparison: Comparison, diff_text: str | None = None) -> str:
    """Word deltas, similarity and changed fields, plus an optional line diff."""
    lines = [
        f"{comparison.from_version_id} -> {comparison.to_version_id}",
        f"  +{comparison.added_words} -{comparison.removed_words}"
        f" ~{comparison.modified_words} words, similarity {comparison.similarity_score:.0%}",
        f"  changed: {', '.join(comparison.changed_fields) or 'nothing'}",
    ]
    for field in comparison.diff_summary.fields():
        if field == "content":
            continue
        change = getattr(comparison.diff_summary, field)
        lines.append(f"  {field}: {change.old_value!r} -> {change.new_value!r}")
    if diff_text:
        lines.append("")
        lines.append(diff_text)
    return "\n".join(lines)


def format_result_list(formatted: list[str], header: str | None = None) -> str:
    """Count + entries joined by blank lines."""
    if not formatted:
        return "No results found."

    lines: list[str] = []
    if header:
        lines.append(header)
    lines.append(f"{len(formatted)} result(s)")
    lines.append("")
    lines.append("\n\n".join(formatted))
    return "\n".join(lines)
