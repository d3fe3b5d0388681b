"""
Inspection due-date computation.

Every function here is pure: the reference day is always passed in by the
caller, nothing is read from or written to storage, and inputs are never
mutated. The same code serves the batch "needs control" query, the single
equipment lookup and the alerts view.

Baseline fallback chain for one equipment:

    most recent parseable inspection date
      -> commissioning date
        -> due now (next due date = reference day, 0 days remaining)

Equipment and inspections are plain mappings (dicts or sqlite3.Row) using the
storage column names: ``id``, ``commissioning_date``,
``inspection_frequency_months`` and ``id``, ``inspection_date``.
"""
import re
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Tuple

from dateutil.relativedelta import relativedelta

from gestepi.errors import INVALID_FREQUENCY, MALFORMED_DATE, DataQualityFlag
from gestepi.models import DueDate, NeedingControlItem, Urgency

_ISO_DAY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:$|[T ])")


def parse_calendar_date(value) -> Optional[date]:
    """
    Return the calendar date held by value, or None when there is none.

    Strings must start with YYYY-MM-DD; a trailing time part is ignored, no
    timezone conversion is ever applied.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    match = _ISO_DAY.match(value.strip())
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def add_months(day: date, months: int) -> date:
    """Advance day by whole calendar months, clamping to the month's last day."""
    return day + relativedelta(months=months)


def _record_id(record: Mapping) -> Optional[int]:
    try:
        return record["id"]
    except (KeyError, IndexError):
        return None


def most_recent_inspection(inspections: Iterable[Mapping]) -> Tuple[Optional[Mapping], Optional[date], List[DataQualityFlag]]:
    """
    Pick the inspection that sets the baseline.

    Latest inspection_date wins; on equal dates the highest id (the most
    recently inserted row) wins. Records whose date cannot be parsed are
    skipped and reported.
    """
    best = None
    best_key = None
    flags = []

    for inspection in inspections:
        inspection_id = _record_id(inspection)
        raw = inspection["inspection_date"]
        day = parse_calendar_date(raw)
        if day is None:
            flags.append(DataQualityFlag(MALFORMED_DATE, "inspection", inspection_id, "inspection_date", raw))
            continue

        key = (day, inspection_id if inspection_id is not None else -1)
        if best_key is None or key > best_key:
            best, best_key = inspection, key

    return best, (best_key[0] if best_key else None), flags


def _valid_frequency(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def compute_due_date(equipment: Mapping, inspections: Iterable[Mapping], today: date) -> DueDate:
    """Next due date and countdown for one equipment, relative to today."""
    equipment_id = _record_id(equipment)
    _, last_inspection_date, flags = most_recent_inspection(inspections)

    frequency = equipment["inspection_frequency_months"]
    if not _valid_frequency(frequency):
        flags.append(DataQualityFlag(INVALID_FREQUENCY, "equipment", equipment_id,
                                     "inspection_frequency_months", frequency))
        return DueDate(
            last_inspection_date=last_inspection_date,
            next_due_date=today,
            days_remaining=0,
            flags=flags,
        )

    baseline = last_inspection_date
    if baseline is None:
        raw = equipment["commissioning_date"]
        baseline = parse_calendar_date(raw)
        if baseline is None:
            flags.append(DataQualityFlag(MALFORMED_DATE, "equipment", equipment_id, "commissioning_date", raw))

    if baseline is None:
        # Nothing to count from: due immediately
        next_due_date = today
    else:
        next_due_date = add_months(baseline, frequency)

    return DueDate(
        last_inspection_date=last_inspection_date,
        next_due_date=next_due_date,
        days_remaining=(next_due_date - today).days,
        flags=flags,
    )


def classify_urgency(days_remaining: int, horizon: int) -> Optional[Urgency]:
    """overdue at or below zero, dueSoon within the horizon, None beyond it."""
    if days_remaining <= 0:
        return Urgency.OVERDUE
    if days_remaining <= horizon:
        return Urgency.DUE_SOON
    return None


def needing_control(records: Iterable[Tuple[Mapping, Iterable[Mapping]]], today: date, horizon: int = 30) -> List[NeedingControlItem]:
    """
    Equipment due for inspection within horizon days, most urgent first.

    records yields (equipment, inspections) pairs. Items beyond the horizon
    are left out of the result. Ties on days remaining are ordered by
    equipment id so identical inputs give an identical list.
    """
    items = []
    for equipment, inspections in records:
        due = compute_due_date(equipment, inspections, today)
        urgency = classify_urgency(due.days_remaining, horizon)
        if urgency is None:
            continue
        items.append(NeedingControlItem(
            equipment_id=_record_id(equipment),
            last_inspection_date=due.last_inspection_date,
            next_due_date=due.next_due_date,
            days_remaining=due.days_remaining,
            urgency=urgency,
            flags=due.flags,
        ))

    items.sort(key=lambda item: (item.days_remaining, item.equipment_id))
    return items
