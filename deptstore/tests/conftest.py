import os
import sys
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture()
def tmp_db_path(tmp_path, monkeypatch):
    path = tmp_path / "personal_test.db"
    # Point get_db_path() at this temp DB
    monkeypatch.setenv("DEPT_DB_PATH", str(path))
    return str(path)


@pytest.fixture()
def store(tmp_db_path):
    from deptstore.services.department_store import DepartmentStore
    with DepartmentStore(tmp_db_path) as s:
        yield s


@pytest.fixture()
def employee_table(store):
    # A dependent table with a foreign key to department.code
    store.conn.execute(
        """
        CREATE TABLE IF NOT EXISTS employee (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            department_code INTEGER NOT NULL REFERENCES department(code)
        )
        """
    )

    def add_employee(name: str, department_code: int) -> int:
        cur = store.conn.execute(
            "INSERT INTO employee(name, department_code) VALUES(?, ?)",
            (name, department_code),
        )
        return int(cur.lastrowid)

    return add_employee
