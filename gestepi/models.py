#models.py
from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from gestepi.errors import DataQualityFlag


class Outcome(str, Enum):
    OPERATIONAL = "OPERATIONAL"
    NEEDS_REPAIR = "NEEDS_REPAIR"
    RETIRED = "RETIRED"


# Labels written by the first version of the app
LEGACY_OUTCOME_LABELS = {
    "Opérationnel": Outcome.OPERATIONAL,
    "À réparer": Outcome.NEEDS_REPAIR,
    "Mis au rebut": Outcome.RETIRED,
}


def normalize_outcome(value):
    if isinstance(value, Outcome):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value in LEGACY_OUTCOME_LABELS:
            return LEGACY_OUTCOME_LABELS[value]
        return Outcome(value.upper())
    return Outcome(value)


class Urgency(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "dueSoon"


class EquipmentType(str, Enum):
    CORDE = "CORDE"
    SANGLE = "SANGLE"
    LONGE = "LONGE"
    BAUDRIER = "BAUDRIER"
    CASQUE = "CASQUE"
    MOUSQUETON = "MOUSQUETON"
    AUTRE = "AUTRE"


# --- Equipment ---
class EquipmentIn(BaseModel):
    identifier: Optional[str] = None
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    serial_number: Optional[str] = None
    type: str = Field(..., min_length=1)
    size: Optional[str] = None
    color: Optional[str] = None
    purchase_date: Optional[date] = None
    manufacture_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    inspection_frequency_months: Optional[int] = None


class EquipmentUpdate(BaseModel):
    identifier: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    type: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    purchase_date: Optional[date] = None
    manufacture_date: Optional[date] = None
    commissioning_date: Optional[date] = None
    inspection_frequency_months: Optional[int] = None


# --- Inspections ---
class InspectionIn(BaseModel):
    equipment_id: int
    inspection_date: date
    outcome: Outcome
    comment: Optional[str] = None

    @field_validator("outcome", mode="before")
    @classmethod
    def accept_legacy_outcome(cls, v):
        return normalize_outcome(v)


class InspectionUpdate(BaseModel):
    inspection_date: Optional[date] = None
    outcome: Optional[Outcome] = None
    comment: Optional[str] = None

    @field_validator("outcome", mode="before")
    @classmethod
    def accept_legacy_outcome(cls, v):
        return None if v is None else normalize_outcome(v)


# --- Due-date results ---
class DueDate(BaseModel):
    """Next inspection due date of one equipment, as seen from a reference day."""
    model_config = ConfigDict(populate_by_name=True)

    last_inspection_date: Optional[date] = Field(None, alias="lastInspectionDate")
    next_due_date: date = Field(..., alias="nextDueDate")
    days_remaining: int = Field(..., alias="daysRemaining")
    flags: List[DataQualityFlag] = Field(default_factory=list)

    def to_dict(self):
        return {
            "lastInspectionDate": self.last_inspection_date.isoformat() if self.last_inspection_date else None,
            "nextDueDate": self.next_due_date.isoformat(),
            "daysRemaining": self.days_remaining,
            "flags": [f.to_dict() for f in self.flags],
        }


class NeedingControlItem(DueDate):
    equipment_id: int = Field(..., alias="equipmentId")
    urgency: Urgency

    def to_dict(self):
        d = {"equipmentId": self.equipment_id}
        d.update(super().to_dict())
        d["urgency"] = self.urgency.value
        return d
