# gestepi_api/dependencies.py
from datetime import date
from typing import Optional

from fastapi import Depends, Header, HTTPException, Query, status

from gestepi.config import Settings, get_settings
from gestepi.database import get_db


def get_connection(settings: Settings = Depends(get_settings)):
    conn = get_db(settings.DATABASE_PATH)
    try:
        yield conn
    finally:
        conn.close()


def get_reference_date(
    as_of: Optional[date] = Query(None, description="Reference day (YYYY-MM-DD), defaults to today"),
) -> date:
    return as_of or date.today()


def get_horizon(
    days: Optional[int] = Query(None, ge=0, description="Alert horizon in days"),
    settings: Settings = Depends(get_settings),
) -> int:
    return settings.DEFAULT_HORIZON_DAYS if days is None else days


def get_actor_id(x_actor_id: Optional[str] = Header(None)) -> str:
    """Identity of whoever performs the write, sent by the caller in X-Actor-Id."""
    if x_actor_id is None or not x_actor_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Actor-Id header is required",
        )
    return x_actor_id.strip()
