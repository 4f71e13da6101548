"""Database schema definitions for keepson."""

SCHEMA_VERSION = 1

RECORD_TYPES = ("note", "image", "audio", "video", "link")

# Schema creation SQL
SCHEMA_SQL = """
-- Metadata table
CREATE TABLE IF NOT EXISTS meta (
    key TEXT PRIMARY KEY,
    value TEXT
);

-- Captured records. owner, type, file_ref and created_at never change after insert.
CREATE TABLE IF NOT EXISTS records (
    id TEXT PRIMARY KEY,
    owner TEXT NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('note', 'image', 'audio', 'video', 'link')),
    title TEXT NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    summary TEXT NOT NULL DEFAULT '',
    file_ref TEXT NOT NULL DEFAULT '',
    metadata TEXT,                          -- JSON object (file name, size, mime type, ...)
    created_at TEXT NOT NULL,               -- UTC, 'YYYY-MM-DD HH:MM:SS.ffffff'
    updated_at TEXT NOT NULL
);

-- Tags (many-to-many, no constraints on values)
CREATE TABLE IF NOT EXISTS record_tags (
    record_id TEXT NOT NULL REFERENCES records(id) ON DELETE CASCADE,
    tag TEXT NOT NULL,
    PRIMARY KEY (record_id, tag)
);

-- Indexes for common query patterns
CREATE INDEX IF NOT EXISTS idx_records_owner_created ON records(owner, created_at);
CREATE INDEX IF NOT EXISTS idx_records_owner_type ON records(owner, type);
CREATE INDEX IF NOT EXISTS idx_record_tags_tag ON record_tags(tag);
CREATE INDEX IF NOT EXISTS idx_record_tags_record ON record_tags(record_id);
"""
