from __future__ import annotations

# deptstore/config.py
import logging
import os

import yaml

logger = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
DEFAULT_CONFIG_PATH = os.path.join(_PROJECT_ROOT, "config.yaml")

DEFAULTS = {
    "db_path": None,
    "test_db_path": None,
    "log_level": "WARNING",
    "audit_log": True,
    "export_dir": "exports",
    "operator": "admin",
}


def read_config(path: str | None = None) -> dict:
    """
    Load config.yaml on top of DEFAULTS (never overrides with blanks).
    Missing file -> defaults; unreadable/malformed file -> warning + defaults.
    """
    cfg_path = path or os.environ.get("DEPT_CONFIG") or DEFAULT_CONFIG_PATH
    out = dict(DEFAULTS)
    if not os.path.exists(cfg_path):
        return out
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("config %s unreadable, using defaults: %s", cfg_path, e)
        return out
    if not isinstance(raw, dict):
        logger.warning("config %s is not a mapping, using defaults", cfg_path)
        return out

    for k in ("db_path", "test_db_path", "export_dir", "operator", "log_level"):
        v = raw.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    if isinstance(raw.get("audit_log"), bool):
        out["audit_log"] = raw["audit_log"]
    out["log_level"] = str(out["log_level"]).upper()
    return out
