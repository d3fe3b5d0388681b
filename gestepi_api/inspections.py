#gestepi_api/inspections.py
from datetime import date

from fastapi import APIRouter, Depends, status

from gestepi import inspections as inspection_service
from gestepi.models import InspectionIn, InspectionUpdate
from gestepi_api.dependencies import get_actor_id, get_connection, get_reference_date

router = APIRouter()


# --- Record an inspection (actor comes from X-Actor-Id) ---
@router.post("/", status_code=status.HTTP_201_CREATED)
def add_inspection(
    data: InspectionIn,
    conn=Depends(get_connection),
    actor_id: str = Depends(get_actor_id),
):
    created = inspection_service.record_inspection(conn, data, actor_id)
    return {"message": "Inspection recorded", "inspection": created}


# --- View all inspections, newest first ---
@router.get("/")
def view_inspections(conn=Depends(get_connection)):
    return {"inspections": inspection_service.list_inspections(conn)}


@router.get("/stats")
def get_stats(conn=Depends(get_connection), today: date = Depends(get_reference_date)):
    return inspection_service.inspection_stats(conn, today)


# --- Maintenance ---
@router.post("/cleanup-orphans")
def cleanup_orphans(conn=Depends(get_connection)):
    deleted = inspection_service.cleanup_orphan_inspections(conn)
    return {"message": f"{deleted} orphan inspection(s) deleted", "deleted": deleted}


@router.post("/fix-empty-dates")
def fix_empty_dates(conn=Depends(get_connection), today: date = Depends(get_reference_date)):
    updated = inspection_service.fix_empty_inspection_dates(conn, today)
    return {"message": f"{updated} inspection date(s) fixed", "updated": updated}


# --- Get all inspections for a specific equipment ---
@router.get("/equipment/{equipment_id}")
def get_inspections_by_equipment(equipment_id: int, conn=Depends(get_connection)):
    return {"inspections": inspection_service.list_inspections_for_equipment(conn, equipment_id)}


# --- Inspections recorded by one actor ---
@router.get("/actor/{actor_id}")
def get_inspections_by_actor(actor_id: str, conn=Depends(get_connection)):
    return {"inspections": inspection_service.list_inspections_by_actor(conn, actor_id)}


@router.get("/{inspection_id}")
def get_inspection(inspection_id: int, conn=Depends(get_connection)):
    return {"inspection": inspection_service.get_inspection(conn, inspection_id)}


@router.put("/{inspection_id}")
def update_inspection(inspection_id: int, data: InspectionUpdate, conn=Depends(get_connection)):
    updated = inspection_service.update_inspection(conn, inspection_id, data)
    return {"message": "Inspection updated", "inspection": updated}


@router.delete("/{inspection_id}")
def delete_inspection(inspection_id: int, conn=Depends(get_connection)):
    inspection_service.delete_inspection(conn, inspection_id)
    return {"message": f"Inspection {inspection_id} deleted"}
