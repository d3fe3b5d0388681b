"""
pytest configuration and shared fixtures
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient

from gestepi.config import reset_settings
from gestepi.database import get_db, init_db
from gestepi.models import EquipmentIn, InspectionIn

TODAY = date(2024, 6, 15)


@pytest.fixture
def db_path(tmp_path):
    """Path of a fresh SQLite file for one test"""
    return str(tmp_path / "gestepi_test.db")


@pytest.fixture
def conn(db_path):
    """Connection to an initialized test database"""
    connection = get_db(db_path)
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_equipment(conn):
    """Insert equipment through the service, returning the stored row"""
    from gestepi.equipment import create_equipment

    def _make(commissioning_date=date(2024, 1, 1), frequency=6, **fields):
        payload = {
            "brand": "Petzl",
            "model": "Volta",
            "type": "CORDE",
            "commissioning_date": commissioning_date,
            "inspection_frequency_months": frequency,
        }
        payload.update(fields)
        return create_equipment(conn, EquipmentIn(**payload), TODAY)

    return _make


@pytest.fixture
def make_inspection(conn):
    """Record an inspection through the service, returning the stored row"""
    from gestepi.inspections import record_inspection

    def _make(equipment_id, inspection_date, outcome="OPERATIONAL", actor_id="inspector-1", comment=None):
        data = InspectionIn(
            equipment_id=equipment_id,
            inspection_date=inspection_date,
            outcome=outcome,
            comment=comment,
        )
        return record_inspection(conn, data, actor_id)

    return _make


@pytest.fixture
def app_settings(monkeypatch, db_path):
    """Point the application settings at the test database"""
    monkeypatch.setenv("DATABASE_PATH", db_path)
    monkeypatch.setenv("ENVIRONMENT", "testing")
    monkeypatch.setenv("DEFAULT_HORIZON_DAYS", "30")
    monkeypatch.setenv("COMMISSIONING_DATE_POLICY", "today")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def client(app_settings):
    """Test client running the app lifespan against the test database"""
    from gestepi_api.main import app

    with TestClient(app) as test_client:
        yield test_client
