"""DuckDB database setup and connection management."""

import duckdb
import logging
from typing import Optional

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS api_keys (
    id              VARCHAR PRIMARY KEY,
    owner_id        VARCHAR NOT NULL,
    provider        VARCHAR NOT NULL,
    api_key         VARCHAR NOT NULL,
    is_active       BOOLEAN NOT NULL DEFAULT TRUE,
    created_at      TIMESTAMP DEFAULT current_timestamp,
    updated_at      TIMESTAMP DEFAULT current_timestamp
);

CREATE TABLE IF NOT EXISTS training_sessions (
    id              VARCHAR PRIMARY KEY,
    owner_id        VARCHAR NOT NULL,
    project_id      VARCHAR NOT NULL,
    model_id        VARCHAR,
    status          VARCHAR NOT NULL DEFAULT 'pending',
    progress        DOUBLE DEFAULT 0,
    tokens_used     INTEGER DEFAULT 0,
    estimated_cost  DOUBLE DEFAULT 0,
    started_at      TIMESTAMP,
    completed_at    TIMESTAMP,
    error_message   VARCHAR,
    created_at      TIMESTAMP DEFAULT current_timestamp
);

CREATE SEQUENCE IF NOT EXISTS training_results_seq START 1;

CREATE TABLE IF NOT EXISTS training_results (
    id              VARCHAR PRIMARY KEY,
    seq             BIGINT DEFAULT nextval('training_results_seq'),
    owner_id        VARCHAR NOT NULL,
    session_id      VARCHAR NOT NULL,
    input_text      VARCHAR NOT NULL,
    output_text     VARCHAR NOT NULL,
    quality_score   INTEGER,
    tokens_used     INTEGER DEFAULT 0,
    created_at      TIMESTAMP DEFAULT current_timestamp
);

CREATE TABLE IF NOT EXISTS uploaded_files (
    id                VARCHAR PRIMARY KEY,
    owner_id          VARCHAR NOT NULL,
    project_id        VARCHAR,
    file_name         VARCHAR NOT NULL,
    file_type         VARCHAR NOT NULL,
    file_size         BIGINT NOT NULL,
    extracted_text    VARCHAR,
    processing_status VARCHAR NOT NULL DEFAULT 'pending',
    error_message     VARCHAR,
    created_at        TIMESTAMP DEFAULT current_timestamp
);
"""


class Database:
    """DuckDB database manager for trainforge."""

    def __init__(self, db_path: str = "trainforge.duckdb"):
        self.db_path = db_path
        self._conn: Optional[duckdb.DuckDBPyConnection] = None

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            self._conn = duckdb.connect(self.db_path)
            self._init_schema()
        return self._conn

    def _init_schema(self) -> None:
        self.conn.execute(SCHEMA_SQL)
        logger.info(f"Database schema initialized at {self.db_path}")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def execute(self, query: str, params=None):
        if params:
            return self.conn.execute(query, params)
        return self.conn.execute(query)

    def fetchall(self, query: str, params=None):
        result = self.execute(query, params)
        columns = [desc[0] for desc in result.description]
        rows = result.fetchall()
        return [dict(zip(columns, row)) for row in rows]

    def fetchone(self, query: str, params=None):
        result = self.execute(query, params)
        columns = [desc[0] for desc in result.description]
        row = result.fetchone()
        if row:
            return dict(zip(columns, row))
        return None
