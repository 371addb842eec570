"""Tests for application startup: schema creation, auto-import and fatal failures."""

import pytest
from fastapi.testclient import TestClient

from app import main
from app.core.database import count_sales, init_db
from app.models.sale import Sale
from app.services.csv_import import CSV_COLUMNS


def _write_csv(path, transaction_ids):
    lines = [",".join(CSV_COLUMNS)]
    for transaction_id in transaction_ids:
        lines.append(",".join([
            str(transaction_id), "2023-10-01", "CUST-1", "Startup Customer", "9000000001",
            "Male", "41", "West", "Returning", "PROD-1", "Kettle", "Acme", "Home", "kitchen",
            "1", "25.0", "0", "25.0", "25.0", "Cash", "Completed", "Standard",
            "ST-2", "Delhi", "EMP-2", "Kabir Rao",
        ]))
    path.write_text("\n".join(lines) + "\n")


@pytest.fixture
def startup_db(monkeypatch, engine, session_factory):
    """Point the lifespan at the per-test database."""
    monkeypatch.setattr(main, "SessionLocal", session_factory)
    monkeypatch.setattr(main, "init_db", lambda: init_db(bind=engine))
    return session_factory


def test_startup_without_auto_import_leaves_table_empty(monkeypatch, startup_db):
    monkeypatch.setattr(main.settings, "AUTO_IMPORT_ON_STARTUP", False)

    with TestClient(main.app) as client:
        assert client.get("/api").status_code == 200

    with startup_db() as session:
        assert count_sales(session) == 0


def test_startup_auto_imports_once(monkeypatch, startup_db, tmp_path):
    csv_path = tmp_path / "startup.csv"
    _write_csv(csv_path, [501, 502])
    monkeypatch.setattr(main.settings, "AUTO_IMPORT_ON_STARTUP", True)
    monkeypatch.setattr(main.settings, "SALES_CSV_PATH", str(csv_path))

    with TestClient(main.app):
        pass

    with startup_db() as session:
        assert count_sales(session) == 2
        assert session.get(Sale, 501).employee_name == "Kabir Rao"

    # Table already populated, so new rows in the file are not picked up
    _write_csv(csv_path, [501, 502, 503])
    with TestClient(main.app):
        pass

    with startup_db() as session:
        assert count_sales(session) == 2
        assert session.get(Sale, 503) is None


def test_startup_skips_auto_import_when_file_is_missing(monkeypatch, startup_db, tmp_path):
    monkeypatch.setattr(main.settings, "AUTO_IMPORT_ON_STARTUP", True)
    monkeypatch.setattr(main.settings, "SALES_CSV_PATH", str(tmp_path / "absent.csv"))

    with TestClient(main.app):
        pass

    with startup_db() as session:
        assert count_sales(session) == 0


def test_startup_failure_aborts(monkeypatch, caplog):
    def broken_init_db():
        raise RuntimeError("schema creation failed")

    monkeypatch.setattr(main, "init_db", broken_init_db)

    with pytest.raises(RuntimeError, match="schema creation failed"):
        with TestClient(main.app):
            pass
    assert "Failed to initialize database" in caplog.text
