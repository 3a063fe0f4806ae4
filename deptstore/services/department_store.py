"""
DepartmentStore - owns the SQLite connection for the department table and
exposes the CRUD operations used by the admin CLI.

Lifecycle is CLOSED -> OPEN -> CLOSED. Use it as a context manager so the
connection is released on every exit path:

    with DepartmentStore(path) as store:
        res = store.insert("Engineering", "Building A")
"""
from __future__ import annotations

import logging
import sqlite3
from enum import Enum
from typing import Callable, Iterator, Optional

from ..db import connect, get_db_path
from ..domain.department import Department, OpResult
from ..errors import StoreClosedError, StoreError, StoreInitError
from ..logs import LogContext, ensure_log_schema
from ..repository import department_repo

logger = logging.getLogger(__name__)


class StoreState(str, Enum):
    CLOSED = "CLOSED"
    OPEN = "OPEN"


class DepartmentStore:

    def __init__(
        self,
        db_path: Optional[str] = None,
        *,
        config_path: Optional[str] = None,
        audit: bool = True,
        user: str = "admin",
        connector: Callable[[str], sqlite3.Connection] = connect,
    ):
        self.db_path = db_path
        self._config_path = config_path
        self.audit = audit
        self.user = user
        self._connector = connector
        self._conn: Optional[sqlite3.Connection] = None
        self.state = StoreState.CLOSED

    # ---------------- lifecycle ----------------

    def open(self) -> "DepartmentStore":
        if self.state is StoreState.OPEN:
            raise StoreError("store is already open")
        if self.db_path is None:
            try:
                self.db_path = get_db_path(self._config_path)
            except OSError as e:
                logger.error("cannot prepare database path: %s", e)
                raise StoreInitError(f"Failed to open the database: {e}") from e
        try:
            conn = self._connector(self.db_path)
        except sqlite3.Error as e:
            logger.error("cannot open database %s: %s", self.db_path, e)
            raise StoreInitError(f"Failed to open the database: {e}") from e

        try:
            department_repo.ensure_schema(conn)
            if self.audit:
                ensure_log_schema(conn)
        except sqlite3.Error as e:
            conn.close()
            logger.error("cannot create schema in %s: %s", self.db_path, e)
            raise StoreInitError(f"Failed to create the 'department' table: {e}") from e

        self._conn = conn
        self.state = StoreState.OPEN
        logger.info("department store opened: %s", self.db_path)
        return self

    def close(self) -> None:
        if self.state is StoreState.CLOSED:
            return
        conn, self._conn = self._conn, None
        self.state = StoreState.CLOSED
        conn.close()
        logger.info("department store closed: %s", self.db_path)

    @property
    def is_open(self) -> bool:
        return self.state is StoreState.OPEN

    def __enter__(self) -> "DepartmentStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreClosedError("department store is closed")
        return self._conn

    def _audit(self, log: LogContext, result: str, err: Optional[str] = None) -> None:
        if not self.audit:
            return
        try:
            log.write(self.conn, result, err)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.warning("operation log write failed for %s: %s", log.action, e)

    # ---------------- operations ----------------

    def insert(self, name: str, location: str) -> OpResult:
        conn = self.conn
        log = LogContext("DEPARTMENT_INSERT", self.user)
        log.set_payload({"name": name, "location": location})
        try:
            code = department_repo.insert(conn, name, location)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error("insert department failed: %s", e)
            self._audit(log, "ERROR", str(e))
            return OpResult.engine_error(str(e))

        log.set_entity("DEPARTMENT", str(code))
        log.set_after(Department(code, name, location).as_dict())
        self._audit(log, "OK")
        return OpResult.success(code=code)

    def iter_all(self) -> Iterator[Department]:
        """Lazily yield every department in storage order. Engine failures raise StoreError."""
        return self._iter_departments(self.conn)

    @staticmethod
    def _iter_departments(conn: sqlite3.Connection) -> Iterator[Department]:
        try:
            for row in department_repo.iter_all(conn):
                yield Department.from_row(row)
        except sqlite3.Error as e:
            logger.error("list departments failed: %s", e)
            raise StoreError(str(e)) from e

    def list_all(self) -> OpResult:
        rows = self.iter_all()
        try:
            items = tuple(rows)
        except StoreError as e:
            return OpResult.engine_error(str(e))
        return OpResult.success(departments=items)

    def find_by_code(self, code: int) -> OpResult:
        conn = self.conn
        try:
            row = department_repo.get_one(conn, code)
        except OverflowError:
            # outside SQLite INTEGER range, so no row can carry it
            return OpResult.not_found(code)
        except sqlite3.Error as e:
            logger.error("find department %s failed: %s", code, e)
            return OpResult.engine_error(str(e), code=code)
        if row is None:
            return OpResult.not_found(code)
        return OpResult.success(code=code, department=Department.from_row(row))

    def update_by_code(self, code: int, name: str, location: str) -> OpResult:
        conn = self.conn
        log = LogContext("DEPARTMENT_UPDATE", self.user)
        log.set_entity("DEPARTMENT", str(code))
        log.set_payload({"name": name, "location": location})
        try:
            before = department_repo.get_one(conn, code)
            affected = department_repo.update(conn, code, name, location)
        except OverflowError:
            self._audit(log, "NOT_FOUND")
            return OpResult.not_found(code)
        except (sqlite3.Error, UnicodeEncodeError) as e:
            logger.error("update department %s failed: %s", code, e)
            self._audit(log, "ERROR", str(e))
            return OpResult.engine_error(str(e), code=code)

        if affected == 0:
            self._audit(log, "NOT_FOUND")
            return OpResult.not_found(code)
        if before is not None:
            log.set_before(dict(before))
        log.set_after(Department(code, name, location).as_dict())
        self._audit(log, "OK")
        return OpResult.success(code=code)

    def delete_by_code(self, code: int) -> OpResult:
        conn = self.conn
        log = LogContext("DEPARTMENT_DELETE", self.user)
        log.set_entity("DEPARTMENT", str(code))
        try:
            before = department_repo.get_one(conn, code)
            affected = department_repo.delete(conn, code)
        except OverflowError:
            self._audit(log, "NOT_FOUND")
            return OpResult.not_found(code)
        except sqlite3.IntegrityError as e:
            # FOREIGN KEY constraint failed: another table still references this code
            logger.info("delete department %s rejected: %s", code, e)
            self._audit(log, "CONSTRAINT", str(e))
            return OpResult.constraint_violation(code, str(e))
        except sqlite3.Error as e:
            logger.error("delete department %s failed: %s", code, e)
            self._audit(log, "ERROR", str(e))
            return OpResult.engine_error(str(e), code=code)

        if affected == 0:
            self._audit(log, "NOT_FOUND")
            return OpResult.not_found(code)
        if before is not None:
            log.set_before(dict(before))
        self._audit(log, "OK")
        return OpResult.success(code=code)

    def count(self) -> int:
        return department_repo.count_all(self.conn)
