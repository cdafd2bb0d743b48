import copy
import json
import logging
import os
import tempfile
import threading
from typing import Dict, List

LOG = logging.getLogger(__name__)

_DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
_FILE_LOCK = threading.Lock()

RECORDS_KEY = "records.json"
CONFIG_KEY = "config.json"
DEFAULT_GOAL = 1000.0

DEFAULTS = {
    RECORDS_KEY: [],
    CONFIG_KEY: {
        "goal_amount": DEFAULT_GOAL,
        "sample_data": {
            "days": 30
        },
        "export": {
            "filename_prefix": "financial-tracker"
        },
        "logging": {
            "level": "INFO"
        }
    }
}

CONFIG_KEYS = {"goal_amount", "sample_data", "export", "logging"}

def data_path(filename: str) -> str:
    os.makedirs(_DATA_DIR, exist_ok=True)
    return os.path.join(_DATA_DIR, filename)

def _atomic_write(path: str, data_obj):
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=_DATA_DIR)
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            json.dump(data_obj, f, indent=2)
        os.replace(tmp_path, path)
    finally:
        try:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        except OSError:
            pass

def ensure_defaults():
    os.makedirs(_DATA_DIR, exist_ok=True)
    for fname, default in DEFAULTS.items():
        path = data_path(fname)
        if not os.path.exists(path):
            with _FILE_LOCK:
                _atomic_write(path, default)

def read_json(filename: str):
    path = data_path(filename)
    with _FILE_LOCK:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

def write_json(filename: str, obj):
    path = data_path(filename)
    with _FILE_LOCK:
        _atomic_write(path, obj)

# -------- Records --------
def load_records(key: str = RECORDS_KEY) -> List[Dict]:
    """Stored records, or [] when nothing usable is stored."""
    try:
        data = read_json(key)
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as e:
        LOG.warning("Ignoring unreadable %s: %s", key, e)
        return []
    if not isinstance(data, list):
        LOG.warning("Ignoring %s: expected a list, got %s", key, type(data).__name__)
        return []
    return [r for r in data if isinstance(r, dict)]

def save_records(records: List[Dict], key: str = RECORDS_KEY):
    try:
        write_json(key, list(records))
    except (OSError, TypeError, ValueError) as e:
        # in-memory state stays authoritative for the session
        LOG.error("Failed to save %s: %s", key, e)

# -------- Config --------
def _merge(base: Dict, override: Dict) -> Dict:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(out.get(k), dict):
            if isinstance(v, dict):
                out[k] = _merge(out[k], v)
            else:
                LOG.warning("Ignoring config %s=%r: expected an object", k, v)
        else:
            out[k] = v
    return out

def get_config() -> Dict:
    try:
        cfg = read_json(CONFIG_KEY)
    except FileNotFoundError:
        cfg = {}
    except (OSError, ValueError) as e:
        LOG.warning("Ignoring unreadable %s: %s", CONFIG_KEY, e)
        cfg = {}
    if not isinstance(cfg, dict):
        cfg = {}
    return _merge(DEFAULTS[CONFIG_KEY], cfg)

def _valid_goal(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value == value and 0 < value < float("inf")

def goal_amount() -> float:
    goal = get_config().get("goal_amount")
    if not _valid_goal(goal):
        LOG.warning("Invalid goal_amount %r in config, using %s", goal, DEFAULT_GOAL)
        return DEFAULT_GOAL
    return float(goal)

def update_config(changes: Dict) -> Dict:
    """Apply a partial update to known top-level keys; returns the changed keys."""
    if not isinstance(changes, dict):
        raise ValueError("Config update must be a JSON object")
    changed = {}
    for k, v in changes.items():
        if k not in CONFIG_KEYS:
            continue
        if k == "goal_amount" and not _valid_goal(v):
            raise ValueError("goal_amount must be a positive number")
        if isinstance(DEFAULTS[CONFIG_KEY][k], dict) and not isinstance(v, dict):
            raise ValueError(f"{k} must be a JSON object")
        changed[k] = v
    if changed:
        cfg = get_config()
        cfg.update(changed)
        write_json(CONFIG_KEY, cfg)
    return changed

def log_level() -> str:
    level = str(get_config()["logging"].get("level", "INFO")).upper()
    return level if isinstance(logging.getLevelName(level), int) else "INFO"
