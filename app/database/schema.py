from app.database.connection import get_connection

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    account_id TEXT NOT NULL,
    date DATE NOT NULL,
    amount BIGINT NOT NULL,
    description TEXT,
    merchant TEXT,
    category_id TEXT,
    currency TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE INDEX IF NOT EXISTS transactions_account_date_idx ON transactions (account_id, date);

CREATE TABLE IF NOT EXISTS learned_merchants (
    id TEXT PRIMARY KEY,
    merchant_pattern TEXT NOT NULL UNIQUE,
    category_id TEXT NOT NULL,
    confidence REAL NOT NULL,
    source TEXT NOT NULL,
    sample_count INTEGER NOT NULL,
    last_used_at TIMESTAMPTZ NOT NULL,
    created_at TIMESTAMPTZ NOT NULL
);

CREATE TABLE IF NOT EXISTS category_corrections (
    id TEXT PRIMARY KEY,
    transaction_id TEXT NOT NULL,
    original_category_id TEXT,
    corrected_category_id TEXT NOT NULL,
    merchant_name TEXT NOT NULL,
    merchant_normalized TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL
);
CREATE INDEX IF NOT EXISTS category_corrections_merchant_idx
    ON category_corrections (merchant_normalized, corrected_category_id);
"""


def ensure_schema() -> None:
    """Create the tables this library reads and writes, if missing."""
    with get_connection() as conn:
        conn.execute(SCHEMA_SQL)
        conn.commit()
