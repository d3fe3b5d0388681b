"""
Alerts view: the needs-control list dressed for display.

Dates are formatted straight from their YYYY-MM-DD text, so no timezone can
shift them by a day.
"""
import sqlite3
from datetime import date

from gestepi.control import needing_control_snapshot
from gestepi.due_dates import parse_calendar_date


def alert_severity(days_remaining: int) -> str:
    if days_remaining <= 0:
        return "error"
    if days_remaining <= 7:
        return "warning"
    if days_remaining <= 15:
        return "info"
    return "success"


def status_label(days_remaining: int) -> str:
    if days_remaining <= 0:
        return "Immediate inspection"
    if days_remaining == 1:
        return "1 day remaining"
    return f"{days_remaining} days remaining"


def format_display_date(value) -> str:
    day = parse_calendar_date(value)
    if day is None:
        return "-"
    return day.strftime("%d/%m/%Y")


def build_alerts(conn: sqlite3.Connection, today: date, days: int = 30) -> list:
    items, equipment = needing_control_snapshot(conn, today, days)

    alerts = []
    for item in items:
        info = equipment[item.equipment_id]
        alert = item.to_dict()
        alert.update({
            "identifier": info["identifier"] or f"EPI-{item.equipment_id}",
            "brand": info["brand"],
            "model": info["model"],
            "type": info["type"],
            "lastInspectionDisplay": format_display_date(item.last_inspection_date) if item.last_inspection_date else "Never inspected",
            "nextDueDisplay": format_display_date(item.next_due_date),
            "severity": alert_severity(item.days_remaining),
            "label": status_label(item.days_remaining),
            "recordInspectionPath": f"/inspections/new?equipmentId={item.equipment_id}",
        })
        alerts.append(alert)

    return alerts
