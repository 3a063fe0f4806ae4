from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class Department:
    code: int
    name: str
    location: str

    @classmethod
    def from_row(cls, row) -> "Department":
        return cls(code=int(row["code"]), name=row["name"], location=row["location"])

    def as_dict(self) -> dict:
        return {"code": self.code, "name": self.name, "location": self.location}

    def __str__(self) -> str:
        return f"Department [Code = {self.code}, Name = {self.name}, Location = {self.location}]"


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    NOT_FOUND = "NOT_FOUND"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    ENGINE_ERROR = "ENGINE_ERROR"


@dataclass(frozen=True)
class OpResult:
    """
    Outcome of one store operation.

    NOT_FOUND and CONSTRAINT_VIOLATION are expected outcomes, not failures;
    only ENGINE_ERROR carries a `detail` from the database engine.
    """
    outcome: Outcome
    code: Optional[int] = None
    department: Optional[Department] = None
    departments: Tuple[Department, ...] = field(default_factory=tuple)
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def empty(self) -> bool:
        return self.ok and not self.departments

    @classmethod
    def success(cls, **kw) -> "OpResult":
        return cls(Outcome.SUCCESS, **kw)

    @classmethod
    def not_found(cls, code: int | None = None) -> "OpResult":
        return cls(Outcome.NOT_FOUND, code=code)

    @classmethod
    def constraint_violation(cls, code: int, detail: str | None = None) -> "OpResult":
        return cls(Outcome.CONSTRAINT_VIOLATION, code=code, detail=detail)

    @classmethod
    def engine_error(cls, detail: str, code: int | None = None) -> "OpResult":
        return cls(Outcome.ENGINE_ERROR, code=code, detail=detail)
