# gestepi/inspections.py
import logging
import sqlite3
from datetime import date

import pandas as pd
from dateutil.relativedelta import relativedelta

from gestepi.database import row_to_dict
from gestepi.equipment import equipment_exists
from gestepi.errors import EquipmentNotFound, InspectionNotFound, InvalidField
from gestepi.models import InspectionIn, InspectionUpdate, Outcome

logger = logging.getLogger(__name__)

LIST_QUERY = """
    SELECT i.*,
           e.identifier AS equipment_identifier,
           e.brand AS equipment_brand,
           e.model AS equipment_model,
           e.type AS equipment_type
    FROM inspections i
    LEFT JOIN equipment e ON i.equipment_id = e.id
"""


def _with_equipment_info(row):
    d = row_to_dict(row)
    d["equipment"] = {
        "id": d["equipment_id"],
        "identifier": d.pop("equipment_identifier") or "",
        "brand": d.pop("equipment_brand") or "",
        "model": d.pop("equipment_model") or "",
        "type": d.pop("equipment_type") or "",
    }
    return d


def record_inspection(conn: sqlite3.Connection, data: InspectionIn, actor_id: str) -> dict:
    """Record an inspection made by actor_id on an existing equipment."""
    if not actor_id:
        raise InvalidField("actor_id", "An actor id is required to record an inspection")
    if not equipment_exists(conn, data.equipment_id):
        raise EquipmentNotFound(data.equipment_id)

    cursor = conn.cursor()
    try:
        cursor.execute("""
            INSERT INTO inspections (equipment_id, actor_id, inspection_date, outcome, comment)
            VALUES (?, ?, ?, ?, ?)
        """, (
            data.equipment_id, actor_id, data.inspection_date.isoformat(),
            data.outcome.value, data.comment,
        ))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Inspection %s recorded on equipment %s by %s (%s)",
                cursor.lastrowid, data.equipment_id, actor_id, data.outcome.value)
    return get_inspection(conn, cursor.lastrowid)


def get_inspection(conn: sqlite3.Connection, inspection_id: int) -> dict:
    cursor = conn.cursor()
    cursor.execute(LIST_QUERY + " WHERE i.id = ?", (inspection_id,))
    row = cursor.fetchone()
    if row is None:
        raise InspectionNotFound(inspection_id)
    return _with_equipment_info(row)


def list_inspections(conn: sqlite3.Connection) -> list:
    cursor = conn.cursor()
    cursor.execute(LIST_QUERY + " ORDER BY i.inspection_date DESC, i.id DESC")
    return [_with_equipment_info(row) for row in cursor.fetchall()]


def list_inspections_for_equipment(conn: sqlite3.Connection, equipment_id: int) -> list:
    if not equipment_exists(conn, equipment_id):
        raise EquipmentNotFound(equipment_id)

    cursor = conn.cursor()
    cursor.execute(
        LIST_QUERY + " WHERE i.equipment_id = ? ORDER BY i.inspection_date DESC, i.id DESC",
        (equipment_id,),
    )
    return [_with_equipment_info(row) for row in cursor.fetchall()]


def list_inspections_by_actor(conn: sqlite3.Connection, actor_id: str) -> list:
    """Inspections recorded by actor_id, newest first."""
    cursor = conn.cursor()
    cursor.execute(
        LIST_QUERY + " WHERE i.actor_id = ? ORDER BY i.inspection_date DESC, i.id DESC",
        (actor_id,),
    )
    return [_with_equipment_info(row) for row in cursor.fetchall()]


def update_inspection(conn: sqlite3.Connection, inspection_id: int, data: InspectionUpdate) -> dict:
    get_inspection(conn, inspection_id)

    updates = data.model_dump(exclude_unset=True)
    if "inspection_date" in updates and updates["inspection_date"] is None:
        raise InvalidField("inspection_date", "Inspection date cannot be removed")
    if "outcome" in updates and updates["outcome"] is None:
        raise InvalidField("outcome", "Outcome cannot be removed")

    fields, values = [], []
    for field in ("inspection_date", "outcome", "comment"):
        if field not in updates:
            continue
        value = updates[field]
        if isinstance(value, date):
            value = value.isoformat()
        elif isinstance(value, Outcome):
            value = value.value
        fields.append(f"{field} = ?")
        values.append(value)

    if not fields:
        return get_inspection(conn, inspection_id)

    cursor = conn.cursor()
    try:
        cursor.execute(
            f"UPDATE inspections SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            values + [inspection_id],
        )
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Inspection %s updated", inspection_id)
    return get_inspection(conn, inspection_id)


def delete_inspection(conn: sqlite3.Connection, inspection_id: int):
    get_inspection(conn, inspection_id)

    cursor = conn.cursor()
    try:
        cursor.execute("DELETE FROM inspections WHERE id = ?", (inspection_id,))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Inspection %s deleted", inspection_id)


# --- Maintenance ---
def cleanup_orphan_inspections(conn: sqlite3.Connection) -> int:
    """Delete inspections whose equipment no longer exists. Safe to rerun."""
    cursor = conn.cursor()
    try:
        cursor.execute("""
            DELETE FROM inspections
            WHERE NOT EXISTS (SELECT 1 FROM equipment e WHERE e.id = inspections.equipment_id)
        """)
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Orphan cleanup: %d inspection(s) deleted", cursor.rowcount)
    return cursor.rowcount


def fix_empty_inspection_dates(conn: sqlite3.Connection, today: date) -> int:
    """Backfill inspections stored without a date. Returns rows updated."""
    cursor = conn.cursor()
    try:
        cursor.execute("""
            UPDATE inspections
            SET inspection_date = ?, updated_at = CURRENT_TIMESTAMP
            WHERE inspection_date IS NULL
               OR inspection_date = ''
               OR inspection_date = '0000-00-00'
        """, (today.isoformat(),))
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise

    logger.info("Inspection dates backfilled on %d row(s)", cursor.rowcount)
    return cursor.rowcount


def inspection_stats(conn: sqlite3.Connection, today: date) -> dict:
    """Inspection counts by outcome, and by month over the twelve months up to today."""
    df = pd.read_sql_query("SELECT outcome, inspection_date FROM inspections", conn)

    by_outcome = [
        {"outcome": outcome, "count": int(count)}
        for outcome, count in df["outcome"].value_counts().sort_index().items()
    ]

    df["inspection_date"] = pd.to_datetime(df["inspection_date"], format="%Y-%m-%d", errors="coerce")
    since = pd.Timestamp(today - relativedelta(months=12))
    recent = df[df["inspection_date"].notna() & (df["inspection_date"] >= since)]

    by_month = []
    if not recent.empty:
        days = recent["inspection_date"]
        grouped = recent.groupby([days.dt.year.rename("year"), days.dt.month.rename("month")]).size()
        by_month = [
            {"year": int(year), "month": int(month), "count": int(count)}
            for (year, month), count in grouped.sort_index().items()
        ]

    return {"by_outcome": by_outcome, "by_month": by_month, "total": int(len(df))}
