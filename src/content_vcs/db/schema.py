"""DDL for the content version store.

The DDL sticks to the column types and clauses SQLite and PostgreSQL share,
so both backends apply the same script. Booleans are stored as INTEGER 0/1
and timestamps as ISO-8601 TEXT.
"""

from content_vcs.db.backend import Database

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    slug TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    meta_description TEXT,
    excerpt TEXT,
    status TEXT NOT NULL DEFAULT 'DRAFT',
    focus_keyword TEXT,
    keywords TEXT NOT NULL DEFAULT '[]',
    author_id TEXT,
    version_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS version_branches (
    id TEXT PRIMARY KEY,
    document_id TEXT NOT NULL REFERENCES documents(id),
    name TEXT NOT NULL,
    description TEXT,
    created_from TEXT,
    is_main INTEGER NOT NULL DEFAULT 0,
    is_active INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    created_by TEXT,
    merged_at TEXT,
    merged_by TEXT,
    merged_into TEXT REFERENCES version_branches(id),
    UNIQUE(document_id, name)
);

CREATE TABLE IF NOT EXISTS document_versions (
    id TEXT PRIMARY KEY,
    document_id TEXT NOT NULL REFERENCES documents(id),
    version_seq INTEGER NOT NULL,
    version_number TEXT NOT NULL,
    branch_id TEXT REFERENCES version_branches(id),
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    meta_description TEXT,
    excerpt TEXT,
    status TEXT NOT NULL,
    focus_keyword TEXT,
    keywords TEXT NOT NULL DEFAULT '[]',
    keyword_density REAL,
    word_count INTEGER NOT NULL,
    seo_score REAL,
    readability_score REAL NOT NULL,
    change_summary TEXT,
    created_at TEXT NOT NULL,
    created_by TEXT,
    UNIQUE(document_id, version_seq)
);

CREATE INDEX IF NOT EXISTS idx_versions_document ON document_versions(document_id);
CREATE INDEX IF NOT EXISTS idx_versions_branch ON document_versions(branch_id);

CREATE TABLE IF NOT EXISTS version_comparisons (
    id TEXT PRIMARY KEY,
    from_version_id TEXT NOT NULL REFERENCES document_versions(id),
    to_version_id TEXT NOT NULL REFERENCES document_versions(id),
    diff_summary TEXT NOT NULL DEFAULT '{}',
    changed_fields TEXT NOT NULL DEFAULT '[]',
    added_words INTEGER NOT NULL,
    removed_words INTEGER NOT NULL,
    modified_words INTEGER NOT NULL,
    similarity_score REAL NOT NULL,
    compared_at TEXT NOT NULL,
    compared_by TEXT,
    UNIQUE(from_version_id, to_version_id)
);
"""


async def apply_schema(db: Database) -> None:
    """Apply the database schema and record its version."""
    await db.executescript(SCHEMA_SQL)

    cursor = await db.execute("SELECT version FROM schema_version")
    row = await cursor.fetchone()
    if row is None:
        await db.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))

    await db.commit()
