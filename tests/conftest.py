import pytest

from app.core.config import settings
from app.core.db import init_db, get_connection
from app.repo.schema import create_tables


@pytest.fixture
def conn(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_PATH", str(tmp_path / "test.db"))
    monkeypatch.setattr(settings, "STORAGE_PATH", str(tmp_path / "storage"))
    init_db()
    connection = get_connection()
    create_tables(connection)
    try:
        yield connection
    finally:
        connection.close()
