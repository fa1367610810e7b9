from datetime import date

import pytest
from fastapi.testclient import TestClient

from fines_api.app.core import db
from fines_api.app.core.config import settings
from fines_api.app.main import app
from fines_api.app.services.fine_service import FineService

TODAY = date(2025, 3, 1)


@pytest.fixture
def database(tmp_path, monkeypatch):
    """Point the application at an empty database file."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "fines.db"))
    db.init_db()
    return db.get_database_path()


@pytest.fixture
def conn(database):
    connection = db.get_connection()
    yield connection
    connection.close()


@pytest.fixture
def service(conn):
    return FineService(conn, today=TODAY)


@pytest.fixture
def client(database):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_fine(conn):
    """Insert a row directly, bypassing the business rules."""

    def insert(**overrides) -> int:
        values = {
            "offender_name": "Jane Roe",
            "offence_type": "Speeding",
            "fine_amount": 100.0,
            "date_issued": TODAY.isoformat(),
            "status": "unpaid",
        }
        values.update(overrides)
        cursor = conn.execute(
            "INSERT INTO fines (offender_name, offence_type, fine_amount, date_issued, status) "
            "VALUES (:offender_name, :offence_type, :fine_amount, :date_issued, :status)",
            values,
        )
        conn.commit()
        return cursor.lastrowid

    return insert


@pytest.fixture
def fetch_fine(conn):
    def fetch(fine_id: int):
        return conn.execute("SELECT * FROM fines WHERE fine_id = ?", (fine_id,)).fetchone()

    return fetch
