import json

from deptstore.logs import LogContext, search_logs
from deptstore.services.department_store import DepartmentStore


def _logs(store, action=None):
    total, items = search_logs(store.conn, None, action, None, None, 1, 100)
    return total, items


def test_insert_update_delete_are_logged(store):
    code = store.insert("Engineering", "Building A").code
    store.update_by_code(code, "Eng", "Bldg B")
    store.delete_by_code(code)

    total, items = _logs(store)
    assert total == 3
    actions = sorted(it["action"] for it in items)
    assert actions == ["DEPARTMENT_DELETE", "DEPARTMENT_INSERT", "DEPARTMENT_UPDATE"]
    assert all(it["result"] == "OK" for it in items)
    assert all(it["entity_id"] == str(code) for it in items)

    _, upd = _logs(store, "DEPARTMENT_UPDATE")
    assert json.loads(upd[0]["before_json"])["name"] == "Engineering"
    assert json.loads(upd[0]["after_json"])["name"] == "Eng"


def test_reads_are_not_logged(store):
    code = store.insert("HR", "A").code
    store.find_by_code(code)
    store.list_all()
    total, _ = _logs(store)
    assert total == 1


def test_not_found_and_constraint_results(store, employee_table):
    code = store.insert("Engineering", "Building A").code
    employee_table("Ada", code)
    store.delete_by_code(code)
    store.delete_by_code(9999)
    store.update_by_code(9999, "x", "y")

    _, deletes = _logs(store, "DEPARTMENT_DELETE")
    assert sorted(it["result"] for it in deletes) == ["CONSTRAINT", "NOT_FOUND"]
    _, updates = _logs(store, "DEPARTMENT_UPDATE")
    assert [it["result"] for it in updates] == ["NOT_FOUND"]


def test_engine_error_is_logged(store):
    store.conn.execute("DROP TABLE department")
    store.insert("HR", "A")
    _, items = _logs(store, "DEPARTMENT_INSERT")
    assert items[0]["result"] == "ERROR"
    assert "no such table" in items[0]["err_msg"]


def test_audit_failure_does_not_change_outcome(store):
    store.conn.execute("DROP TABLE operation_log")
    res = store.insert("HR", "A")
    assert res.ok
    assert store.find_by_code(res.code).ok


def test_audit_disabled(tmp_db_path):
    with DepartmentStore(tmp_db_path, audit=False) as s:
        s.insert("HR", "A")
        row = s.conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='operation_log'"
        ).fetchone()
        assert row is None


def test_operator_recorded(tmp_db_path):
    with DepartmentStore(tmp_db_path, user="alice") as s:
        s.insert("HR", "A")
        _, items = _logs(s)
        assert items[0]["user"] == "alice"


def test_search_logs_query_and_paging(store):
    for i in range(5):
        store.insert(f"Dept{i}", "Tower")
    total, items = search_logs(store.conn, "Dept3", None, None, None, 1, 10)
    assert total == 1
    assert json.loads(items[0]["payload_json"])["name"] == "Dept3"

    total, page2 = search_logs(store.conn, None, None, None, None, 2, 2)
    assert total == 5
    assert len(page2) == 2


def test_log_context_write(store):
    log = LogContext("MANUAL", "tester")
    log.set_entity("DEPARTMENT", "42")
    log.set_payload({"note": "hand written"})
    log.write(store.conn, "OK")
    _, items = _logs(store, "MANUAL")
    assert items[0]["user"] == "tester"
    assert items[0]["latency_ms"] >= 0


def test_search_logs_time_window(store):
    store.insert("HR", "A")
    total, _ = search_logs(store.conn, None, None, "2000-01-01", "9999-12-31", 1, 10)
    assert total == 1
    total, _ = search_logs(store.conn, None, None, None, "2000-01-01", 1, 10)
    assert total == 0
