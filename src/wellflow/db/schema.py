"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- Key-value state records; each value is a JSON document
CREATE TABLE IF NOT EXISTS state_records (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
