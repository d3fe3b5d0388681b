# gestepi/equipment.py
import logging
import sqlite3
from datetime import date
from typing import Optional

from gestepi.database import row_to_dict
from gestepi.due_dates import compute_due_date
from gestepi.errors import EquipmentNotFound, InvalidDate, InvalidField, InvalidFrequency, log_data_quality
from gestepi.models import DueDate, EquipmentIn, EquipmentUpdate

logger = logging.getLogger(__name__)

EQUIPMENT_FIELDS = [
    "identifier", "brand", "model", "serial_number", "type", "size", "color",
    "purchase_date", "manufacture_date", "commissioning_date",
    "inspection_frequency_months",
]
DATE_FIELDS = {"purchase_date", "manufacture_date", "commissioning_date"}


def validate_frequency(value):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidFrequency(value)
    return value


def _db_value(field, value):
    if field in DATE_FIELDS and isinstance(value, date):
        return value.isoformat()
    return value


def create_equipment(conn: sqlite3.Connection, data: EquipmentIn, today: date, policy: str = "today") -> dict:
    """
    Register a new equipment.

    A missing commissioning date is set to today under the "today" policy and
    refused under "reject".
    """
    validate_frequency(data.inspection_frequency_months)

    values = data.model_dump()
    if values["commissioning_date"] is None:
        if policy == "reject":
            raise InvalidDate("commissioning_date", reason="Commissioning date is required")
        values["commissioning_date"] = today
        logger.info("No commissioning date given, defaulting to %s", today.isoformat())

    cursor = conn.cursor()
    try:
        cursor.execute(f"""
            INSERT INTO equipment ({','.join(EQUIPMENT_FIELDS)})
            VALUES ({','.join(['?'] * len(EQUIPMENT_FIELDS))})
        """, [_db_value(f, values[f]) for f in EQUIPMENT_FIELDS])
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    equipment_id = cursor.lastrowid
    logger.info("Equipment %s registered (%s %s)", equipment_id, data.brand, data.model)
    return get_equipment(conn, equipment_id)


def get_equipment(conn: sqlite3.Connection, equipment_id: int) -> dict:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM equipment WHERE id = ?", (equipment_id,))
    row = cursor.fetchone()
    if row is None:
        raise EquipmentNotFound(equipment_id)
    return row_to_dict(row)


def equipment_exists(conn: sqlite3.Connection, equipment_id: int) -> bool:
    cursor = conn.cursor()
    cursor.execute("SELECT 1 FROM equipment WHERE id = ?", (equipment_id,))
    return cursor.fetchone() is not None


def list_equipment(conn: sqlite3.Connection, type: Optional[str] = None) -> list:
    query = "SELECT * FROM equipment WHERE 1=1"
    params = []

    if type:
        query += " AND type = ?"
        params.append(type)

    query += " ORDER BY id"
    cursor = conn.cursor()
    cursor.execute(query, params)
    return [row_to_dict(row) for row in cursor.fetchall()]


def update_equipment(conn: sqlite3.Connection, equipment_id: int, data: EquipmentUpdate) -> dict:
    """Apply the fields present in data; the commissioning date cannot be cleared."""
    get_equipment(conn, equipment_id)

    updates = data.model_dump(exclude_unset=True)
    if "inspection_frequency_months" in updates:
        validate_frequency(updates["inspection_frequency_months"])
    if "commissioning_date" in updates and updates["commissioning_date"] is None:
        raise InvalidDate("commissioning_date", reason="Commissioning date cannot be removed")
    for field in ("brand", "model", "type"):
        if field in updates and not updates[field]:
            raise InvalidField(field, f"{field} cannot be empty")

    fields = [f for f in EQUIPMENT_FIELDS if f in updates]
    if not fields:
        return get_equipment(conn, equipment_id)

    assignments = ", ".join(f"{f} = ?" for f in fields)
    values = [_db_value(f, updates[f]) for f in fields]

    cursor = conn.cursor()
    try:
        cursor.execute(
            f"UPDATE equipment SET {assignments}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            values + [equipment_id],
        )
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Equipment %s updated: %s", equipment_id, ", ".join(fields))
    return get_equipment(conn, equipment_id)


def delete_equipment(conn: sqlite3.Connection, equipment_id: int) -> int:
    """
    Delete an equipment and all of its inspections in one transaction.

    Returns the number of inspections removed with it.
    """
    get_equipment(conn, equipment_id)

    cursor = conn.cursor()
    try:
        cursor.execute("DELETE FROM inspections WHERE equipment_id = ?", (equipment_id,))
        removed = cursor.rowcount
        cursor.execute("DELETE FROM equipment WHERE id = ?", (equipment_id,))
        conn.commit()
    except Exception:
        conn.rollback()
        logger.exception("Failed to delete equipment %s, rolled back", equipment_id)
        raise

    logger.info("Equipment %s deleted with %d inspection(s)", equipment_id, removed)
    return removed


def get_due_date(conn: sqlite3.Connection, equipment_id: int, today: date) -> DueDate:
    equipment = get_equipment(conn, equipment_id)

    cursor = conn.cursor()
    cursor.execute(
        "SELECT id, inspection_date FROM inspections WHERE equipment_id = ?",
        (equipment_id,),
    )
    due = compute_due_date(equipment, cursor.fetchall(), today)
    log_data_quality(logger, due.flags)
    return due


# --- Maintenance ---
def fix_missing_commissioning_dates(conn: sqlite3.Connection, today: date) -> int:
    """Backfill empty or zero commissioning dates with today. Returns rows updated."""
    cursor = conn.cursor()
    try:
        cursor.execute("""
            UPDATE equipment
            SET commissioning_date = ?, updated_at = CURRENT_TIMESTAMP
            WHERE commissioning_date IS NULL
               OR commissioning_date = ''
               OR commissioning_date = '0000-00-00'
        """, (today.isoformat(),))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Commissioning dates backfilled on %d equipment", cursor.rowcount)
    return cursor.rowcount
