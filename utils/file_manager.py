import json
import logging
import os
import tempfile
import threading
from typing import Optional

_DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
_FILE_LOCK = threading.Lock()
LOG = logging.getLogger(__name__)

DEFAULTS = {
    "config.json": {
        "weekly_target": 9000000,
        "warning_weekday": 4,  # 0=Sun ... 6=Sat
        "storage_key": "dailySales",
        "currency": "IDR",
        "locale": "id-ID",
    }
}

def data_path(filename: str) -> str:
    os.makedirs(_DATA_DIR, exist_ok=True)
    return os.path.join(_DATA_DIR, filename)

def slot_path(key: str) -> str:
    return data_path(f"{key}.json")

def _atomic_write(path: str, text: str):
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=os.path.dirname(path))
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

def ensure_defaults():
    os.makedirs(_DATA_DIR, exist_ok=True)
    for fname, default in DEFAULTS.items():
        path = data_path(fname)
        if not os.path.exists(path):
            with _FILE_LOCK:
                _atomic_write(path, json.dumps(default, indent=2))

def read_json(filename: str):
    path = data_path(filename)
    with _FILE_LOCK:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

def write_json(filename: str, obj):
    path = data_path(filename)
    text = json.dumps(obj, indent=2)
    with _FILE_LOCK:
        _atomic_write(path, text)

def read_slot(key: str) -> Optional[str]:
    """Raw text stored under `key`, or None when the slot was never written."""
    path = slot_path(key)
    with _FILE_LOCK:
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

def write_slot(key: str, text: str):
    path = slot_path(key)
    with _FILE_LOCK:
        _atomic_write(path, text)

def read_config() -> dict:
    """Config merged over defaults; a missing or broken config.json yields the defaults."""
    cfg = dict(DEFAULTS["config.json"])
    try:
        stored = read_json("config.json")
    except (OSError, ValueError):
        LOG.warning("config.json unreadable, using defaults", exc_info=True)
        return cfg
    if isinstance(stored, dict):
        cfg.update(stored)
    return cfg
