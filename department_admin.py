#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Department Admin (SQLite)

Commands:
  menu                Interactive menu: insert/list/find/update/delete departments (default)
  init                Create the department table (and operation log) if missing
  report              Export the department table to CSV and print it
  logs                Show the operation log of insert/update/delete actions

Notes:
- The database file defaults to personal.db; override with --db, DEPT_DB_PATH or config.yaml.
- Department codes are assigned by the database and never change.
- Deleting a department still referenced by another table (e.g. employees) is rejected.
"""

import argparse
import logging
import sys

import pandas as pd

from deptstore.config import read_config
from deptstore.domain.department import Outcome
from deptstore.errors import StoreInitError
from deptstore.logs import search_logs
from deptstore.services.department_store import DepartmentStore
from deptstore.services.report_svc import export_departments

MENU = (
    "Menu options:\n"
    "0) Exit the program.\n"
    "1) Insert a department into the database.\n"
    "2) Retrieve all departments from the database.\n"
    "3) Retrieve a department by code from the database.\n"
    "4) Update a department by code in the database.\n"
    "5) Delete a department by code from the database.\n"
)

NOT_FOUND_MSG = "No department with that code found in the database."


# ---------------- Prompt helpers ----------------

def _read_line(prompt: str, inp, out) -> str:
    out.write(prompt)
    out.flush()
    line = inp.readline()
    if line == "":
        raise EOFError
    return line.strip()


def prompt_text(prompt: str, inp, out, err) -> str:
    while True:
        value = _read_line(prompt, inp, out)
        if value:
            return value
        print("A value is required.", file=err)


def prompt_int(prompt: str, inp, out, err) -> int:
    while True:
        value = _read_line(prompt, inp, out)
        try:
            return int(value)
        except ValueError:
            print("Please enter a whole number.", file=err)


# ---------------- Menu actions ----------------

def do_insert(store: DepartmentStore, inp, out, err):
    name = prompt_text("Enter the name of the department: ", inp, out, err)
    location = prompt_text("Enter the location of the department: ", inp, out, err)
    res = store.insert(name, location)
    if res.ok:
        print(f"A department has been inserted into the database (code = {res.code}).", file=out)
    else:
        print(f"Error inserting the department: {res.detail}", file=err)


def do_list(store: DepartmentStore, inp, out, err):
    res = store.list_all()
    if not res.ok:
        print(f"Error retrieving the departments: {res.detail}", file=err)
    elif res.empty:
        print("No departments found in the database.", file=out)
    else:
        for d in res.departments:
            print(d, file=out)
        print(f"Queried {len(res.departments)} departments from the database.", file=out)


def do_find(store: DepartmentStore, inp, out, err):
    code = prompt_int("Enter the code of the department: ", inp, out, err)
    res = store.find_by_code(code)
    if res.ok:
        print(res.department, file=out)
    elif res.outcome is Outcome.NOT_FOUND:
        print(NOT_FOUND_MSG, file=out)
    else:
        print(f"Error retrieving the department: {res.detail}", file=err)


def do_update(store: DepartmentStore, inp, out, err):
    code = prompt_int("Enter the code of the department to update: ", inp, out, err)
    name = prompt_text("Enter the new name of the department: ", inp, out, err)
    location = prompt_text("Enter the new location of the department: ", inp, out, err)
    res = store.update_by_code(code, name, location)
    if res.ok:
        print("A department in the database has been updated.", file=out)
    elif res.outcome is Outcome.NOT_FOUND:
        print(NOT_FOUND_MSG, file=out)
    else:
        print(f"Error updating the department: {res.detail}", file=err)


def do_delete(store: DepartmentStore, inp, out, err):
    code = prompt_int("Enter the code of the department to delete: ", inp, out, err)
    res = store.delete_by_code(code)
    if res.ok:
        print("A department has been deleted from the database.", file=out)
    elif res.outcome is Outcome.CONSTRAINT_VIOLATION:
        print("The department is referenced in one or more employees in the database.", file=out)
    elif res.outcome is Outcome.NOT_FOUND:
        print(NOT_FOUND_MSG, file=out)
    else:
        print(f"Error deleting the department: {res.detail}", file=err)


ACTIONS = {
    1: do_insert,
    2: do_list,
    3: do_find,
    4: do_update,
    5: do_delete,
}


def run_menu(store: DepartmentStore, inp=None, out=None, err=None) -> int:
    """Loop until option 0 (or end of input). Operation errors are printed, never raised."""
    inp = inp or sys.stdin
    out = out or sys.stdout
    err = err or sys.stderr
    while True:
        out.write(MENU)
        try:
            option = prompt_int("Enter an option: ", inp, out, err)
            if option == 0:
                print("Exiting the program.", file=out)
                return 0
            action = ACTIONS.get(option)
            if action is None:
                print("Menu option must be between 0 and 5.", file=err)
                continue
            action(store, inp, out, err)
        except EOFError:
            print("\nExiting the program.", file=out)
            return 0


# ---------------- Commands ----------------

def _make_store(args, cfg, audit=None) -> DepartmentStore:
    # path resolved on open, so a bad location surfaces as StoreInitError
    return DepartmentStore(
        args.db,
        config_path=args.config,
        audit=cfg["audit_log"] if audit is None else audit,
        user=cfg["operator"],
    )


def cmd_menu(args, cfg) -> int:
    store = _make_store(args, cfg)
    try:
        with store:
            return run_menu(store)
    except StoreInitError as e:
        print(f"Error opening the database: {e}", file=sys.stderr)
        return 1


def cmd_init(args, cfg) -> int:
    store = _make_store(args, cfg)
    try:
        with store:
            print(f"DB initialized: {store.db_path} ({store.count()} departments).")
    except StoreInitError as e:
        print(f"Error opening the database: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_report(args, cfg) -> int:
    store = _make_store(args, cfg)
    try:
        with store:
            path, df = export_departments(store, args.out or cfg["export_dir"], args.date)
    except StoreInitError as e:
        print(f"Error opening the database: {e}", file=sys.stderr)
        return 1

    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)
    print("\n=== Departments ===")
    if not df.empty:
        print(df.to_string(index=False))
    else:
        print("(empty)")
    print(f"\nCSV exported to {path}")
    return 0


def cmd_logs(args, cfg) -> int:
    # audit on so the operation_log table is guaranteed to exist
    store = _make_store(args, cfg, audit=True)
    try:
        with store:
            total, items = search_logs(
                store.conn, args.query, args.action, args.ts_from, args.ts_to, args.page, args.size
            )
    except StoreInitError as e:
        print(f"Error opening the database: {e}", file=sys.stderr)
        return 1

    print(f"=== Operation log ({total} total) ===")
    if not items:
        print("(none)")
    for it in items:
        line = f"{it['ts']}  {it['user']:<8} {it['action']:<18} {it['entity_id'] or '-':>6}  {it['result']}"
        if it["err_msg"]:
            line += f"  ({it['err_msg']})"
        print(line)
    return 0


# ---------------- Entry ----------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Department admin (SQLite)")
    parser.add_argument("--config", default=None, help="path to config.yaml")
    parser.add_argument("--db", default=None, help="database file (overrides config)")
    sub = parser.add_subparsers()

    p_menu = sub.add_parser("menu", help="interactive menu (default)")
    p_menu.set_defaults(func=cmd_menu)

    p_init = sub.add_parser("init", help="create schema")
    p_init.set_defaults(func=cmd_init)

    p_rep = sub.add_parser("report", help="export departments to CSV")
    p_rep.add_argument("--out", required=False, help="output directory (default: export_dir from config)")
    p_rep.add_argument("--date", required=False, help="YYYYMMDD used in the file name (default today)")
    p_rep.set_defaults(func=cmd_report)

    p_logs = sub.add_parser("logs", help="show operation log")
    p_logs.add_argument("--action", required=False, help="e.g. DEPARTMENT_DELETE")
    p_logs.add_argument("--query", required=False, help="substring of payload/before/after")
    p_logs.add_argument("--from", dest="ts_from", required=False, help="ISO timestamp lower bound, e.g. 2026-01-01")
    p_logs.add_argument("--to", dest="ts_to", required=False, help="ISO timestamp upper bound")
    p_logs.add_argument("--page", type=int, default=1)
    p_logs.add_argument("--size", type=int, default=20)
    p_logs.set_defaults(func=cmd_logs)
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = read_config(args.config)
    logging.basicConfig(
        level=getattr(logging, cfg["log_level"], logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    func = getattr(args, "func", cmd_menu)
    return func(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
