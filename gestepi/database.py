# gestepi/database.py
import logging
import os
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS equipment (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    identifier TEXT,
    brand TEXT NOT NULL,
    model TEXT NOT NULL,
    serial_number TEXT,
    type TEXT NOT NULL,
    size TEXT,
    color TEXT,
    purchase_date TEXT,
    manufacture_date TEXT,
    commissioning_date TEXT,
    inspection_frequency_months INTEGER,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS inspections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    equipment_id INTEGER NOT NULL,
    actor_id TEXT,
    inspection_date TEXT,
    outcome TEXT NOT NULL,
    comment TEXT,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_inspections_equipment_id ON inspections(equipment_id);
CREATE INDEX IF NOT EXISTS idx_equipment_type ON equipment(type);
"""


def get_db(db_path: str) -> sqlite3.Connection:
    """
    Open a connection to the SQLite database at db_path.

    Rows come back as sqlite3.Row so they can be turned into dicts. The
    connection may be handed across threads (FastAPI runs sync dependencies
    and endpoints in a thread pool) but is never shared between requests.
    """
    directory = os.path.dirname(os.path.abspath(db_path))
    os.makedirs(directory, exist_ok=True)

    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection):
    conn.executescript(SCHEMA)
    conn.commit()
    logger.debug("Database schema ready")


def row_to_dict(row):
    return dict(row) if row is not None else None
