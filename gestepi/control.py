# gestepi/control.py
"""Equipment needing an inspection within a horizon, in one database round-trip."""
import logging
import sqlite3
from datetime import date

from gestepi.due_dates import needing_control
from gestepi.errors import log_data_quality

logger = logging.getLogger(__name__)

NEEDS_CONTROL_QUERY = """
    SELECT e.id AS equipment_id,
           e.identifier,
           e.brand,
           e.model,
           e.type,
           e.commissioning_date,
           e.inspection_frequency_months,
           i.id AS inspection_id,
           i.inspection_date
    FROM equipment e
    LEFT JOIN inspections i ON i.equipment_id = e.id
    ORDER BY e.id, i.id
"""


def load_equipment_with_inspections(conn: sqlite3.Connection) -> list:
    """[(equipment, [inspection, ...]), ...] from a single query."""
    cursor = conn.cursor()
    cursor.execute(NEEDS_CONTROL_QUERY)

    grouped = {}
    for row in cursor.fetchall():
        equipment_id = row["equipment_id"]
        if equipment_id not in grouped:
            grouped[equipment_id] = ({
                "id": equipment_id,
                "identifier": row["identifier"],
                "brand": row["brand"],
                "model": row["model"],
                "type": row["type"],
                "commissioning_date": row["commissioning_date"],
                "inspection_frequency_months": row["inspection_frequency_months"],
            }, [])
        if row["inspection_id"] is not None:
            grouped[equipment_id][1].append({
                "id": row["inspection_id"],
                "inspection_date": row["inspection_date"],
            })

    return list(grouped.values())


def needing_control_snapshot(conn: sqlite3.Connection, today: date, days: int = 30):
    """
    Needs-control items together with the equipment rows they were computed from.

    Returns (items, {equipment_id: equipment}); both come from the same read.
    """
    records = load_equipment_with_inspections(conn)
    items = needing_control(records, today, days)

    for item in items:
        log_data_quality(logger, item.flags)

    logger.info("%d equipment need control within %d days of %s", len(items), days, today.isoformat())
    return items, {equipment["id"]: equipment for equipment, _ in records}


def equipment_needing_control(conn: sqlite3.Connection, today: date, days: int = 30) -> list:
    items, _ = needing_control_snapshot(conn, today, days)
    return items
