from __future__ import annotations

# deptstore/db.py
import sqlite3
import os

from .config import read_config

# DB path resolution order:
# 1) env DEPT_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: personal.db at the project root
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "personal.db")


def get_db_path(config_path: str | None = None) -> str:
    env_path = os.environ.get("DEPT_DB_PATH")
    cfg = read_config(config_path)
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def connect(path: str) -> sqlite3.Connection:
    """
    Open a SQLite connection in autocommit mode with foreign keys enforced.
    Rows come back as sqlite3.Row. The caller owns (and must close) it.
    """
    conn = sqlite3.connect(
        path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        isolation_level=None,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
    except sqlite3.Error:
        conn.close()
        raise
    return conn


