"""
Errors raised by the GestEPI services.

Lookup and write-validation failures are exceptions; malformed dates found in
storage are not, they travel with the computed result as DataQualityFlag.
"""
from dataclasses import dataclass, asdict
from typing import Any, Optional


class GestEPIError(Exception):
    error_code = "gestepi_error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EquipmentNotFound(GestEPIError):
    error_code = "equipment_not_found"
    status_code = 404

    def __init__(self, equipment_id):
        super().__init__(f"Equipment {equipment_id} not found")
        self.equipment_id = equipment_id


class InspectionNotFound(GestEPIError):
    error_code = "inspection_not_found"
    status_code = 404

    def __init__(self, inspection_id):
        super().__init__(f"Inspection {inspection_id} not found")
        self.inspection_id = inspection_id


class InvalidFrequency(GestEPIError):
    error_code = "invalid_frequency"

    def __init__(self, value):
        super().__init__(f"Inspection frequency must be a positive number of months, got {value!r}")
        self.value = value


class InvalidField(GestEPIError):
    error_code = "invalid_field"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InvalidDate(GestEPIError):
    error_code = "invalid_date"

    def __init__(self, field: str, value: Any = None, reason: Optional[str] = None):
        super().__init__(reason or f"Invalid date for {field}: {value!r}")
        self.field = field
        self.value = value


# Data-quality flag kinds
MALFORMED_DATE = "malformed_date"
INVALID_FREQUENCY = "invalid_frequency"


@dataclass(frozen=True)
class DataQualityFlag:
    kind: str
    record: str  # "equipment" or "inspection"
    record_id: Optional[int]
    field: str
    value: Any = None

    def to_dict(self):
        d = asdict(self)
        if d["value"] is not None and not isinstance(d["value"], (str, int, float)):
            d["value"] = repr(d["value"])
        return d


def log_data_quality(logger, flags):
    """Report data-quality flags to operators; end users never see them as errors."""
    for flag in flags:
        logger.warning("Data quality: %s on %s %s (%s=%r)",
                       flag.kind, flag.record, flag.record_id, flag.field, flag.value)
