from datetime import date

from fastapi import APIRouter, Depends

from gestepi.alerts import build_alerts
from gestepi_api.dependencies import get_connection, get_horizon, get_reference_date

router = APIRouter()


@router.get("/")
def get_alerts(
    conn=Depends(get_connection),
    today: date = Depends(get_reference_date),
    days: int = Depends(get_horizon),
):
    """Equipment to inspect within the horizon, with display fields and a shortcut to record the inspection."""
    return {"days": days, "as_of": today.isoformat(), "alerts": build_alerts(conn, today, days)}
