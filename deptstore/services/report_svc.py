from __future__ import annotations

import datetime as dt
import os

import pandas as pd

from .department_store import DepartmentStore

COLUMNS = ["code", "name", "location"]


def load_departments(store: DepartmentStore) -> pd.DataFrame:
    return pd.DataFrame([d.as_dict() for d in store.iter_all()], columns=COLUMNS)


def export_departments(store: DepartmentStore, out_dir: str, date: str | None = None) -> tuple[str, pd.DataFrame]:
    """
    Dump the department table to <out_dir>/departments_<YYYYMMDD>.csv.
    An empty table still produces a header-only file.
    """
    date = date or dt.datetime.now().strftime("%Y%m%d")
    df = load_departments(store)
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, f"departments_{date}.csv")
    df.to_csv(path, index=False, encoding="utf-8-sig")
    return path, df
