#gestepi_api/equipments.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from gestepi import equipment as equipment_service
from gestepi.config import Settings, get_settings
from gestepi.control import equipment_needing_control
from gestepi.models import EquipmentIn, EquipmentUpdate
from gestepi_api.dependencies import get_connection, get_horizon, get_reference_date

router = APIRouter()


# Register Equipment
@router.post("/", status_code=status.HTTP_201_CREATED)
def add_equipment(
    data: EquipmentIn,
    conn=Depends(get_connection),
    today: date = Depends(get_reference_date),
    settings: Settings = Depends(get_settings),
):
    created = equipment_service.create_equipment(conn, data, today, settings.COMMISSIONING_DATE_POLICY)
    return {"message": "Equipment added", "equipment": created}


# List Equipments, optionally by type
@router.get("/")
def list_equipments(type: Optional[str] = Query(None), conn=Depends(get_connection)):
    return {"equipments": equipment_service.list_equipment(conn, type)}


# Equipment due for inspection within ?days= (default from settings)
@router.get("/need-control")
def need_control(
    conn=Depends(get_connection),
    today: date = Depends(get_reference_date),
    days: int = Depends(get_horizon),
):
    items = equipment_needing_control(conn, today, days)
    return {"days": days, "as_of": today.isoformat(), "equipments": [item.to_dict() for item in items]}


# Backfill missing commissioning dates
@router.post("/fix-missing-dates")
def fix_missing_dates(conn=Depends(get_connection), today: date = Depends(get_reference_date)):
    updated = equipment_service.fix_missing_commissioning_dates(conn, today)
    return {"message": f"{updated} commissioning date(s) fixed", "updated": updated}


@router.get("/{equipment_id}")
def get_equipment(equipment_id: int, conn=Depends(get_connection)):
    return {"equipment": equipment_service.get_equipment(conn, equipment_id)}


@router.get("/{equipment_id}/due-date")
def get_equipment_due_date(
    equipment_id: int,
    conn=Depends(get_connection),
    today: date = Depends(get_reference_date),
):
    due = equipment_service.get_due_date(conn, equipment_id, today)
    return {"equipmentId": equipment_id, **due.to_dict()}


@router.put("/{equipment_id}")
def update_equipment(equipment_id: int, data: EquipmentUpdate, conn=Depends(get_connection)):
    updated = equipment_service.update_equipment(conn, equipment_id, data)
    return {"message": "Equipment updated", "equipment": updated}


# Delete Equipment together with its inspections
@router.delete("/{equipment_id}")
def delete_equipment(equipment_id: int, conn=Depends(get_connection)):
    removed = equipment_service.delete_equipment(conn, equipment_id)
    return {
        "message": f"Equipment {equipment_id} deleted",
        "inspections_deleted": removed,
    }
