# keysmith/config.py
"""
Settings persistence for keysmith.
Settings saved as JSON in %APPDATA%/Keysmith/config.json (Windows) or ~/.keysmith/config.json (fallback).
KEYSMITH_CONFIG points at a different file.
"""

import os
import json
from typing import Dict, Any, Optional

from loguru import logger

from .evaluator import DEFAULT_POLICY, WeaknessPolicy
from .generator import DEFAULT_MAX_ATTEMPTS
from .requirements import PasswordClass
from .sampler import DEFAULT_RETRY_LIMIT, UnbiasedSampler

DEFAULTS: Dict[str, Any] = {
    "max_attempts": DEFAULT_MAX_ATTEMPTS,
    "entropy_threshold": DEFAULT_POLICY.entropy_threshold,
    "random_retry_limit": DEFAULT_RETRY_LIMIT,
    "extra_weak_pins": [],
    "default_type": "generic",
}

def _positive_int_or_none(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1

def _number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)

def _password_type(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        PasswordClass.parse(value)
    except ValueError:
        return False
    return True

_CHECKS = {
    "max_attempts": _positive_int_or_none,
    "entropy_threshold": _number,
    "random_retry_limit": _positive_int_or_none,
    "extra_weak_pins": lambda value: isinstance(value, list),
    "default_type": _password_type,
}

def _appdata_dir() -> str:
    appdata = os.getenv("APPDATA")
    if appdata:
        return os.path.join(appdata, "Keysmith")
    return os.path.join(os.path.expanduser("~"), ".keysmith")

def config_path() -> str:
    override = os.getenv("KEYSMITH_CONFIG")
    if override:
        return override
    return os.path.join(_appdata_dir(), "config.json")

def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    p = path or config_path()
    out = DEFAULTS.copy()
    if not os.path.exists(p):
        return out
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("ignoring unreadable config file {}: {}", p, e)
        return out
    if not isinstance(data, dict):
        logger.warning("ignoring config file {}: expected a JSON object", p)
        return out
    # merge defaults; a value of the wrong shape keeps its default
    for key, value in data.items():
        check = _CHECKS.get(key)
        if check is not None and not check(value):
            logger.warning("ignoring invalid {} in config file {}: {!r}", key, p, value)
            continue
        out[key] = value
    return out

def weakness_policy(cfg: Dict[str, Any]) -> WeaknessPolicy:
    policy = WeaknessPolicy(entropy_threshold=float(cfg.get("entropy_threshold", DEFAULT_POLICY.entropy_threshold)))
    extra = cfg.get("extra_weak_pins") or []
    return policy.with_extra_pins(str(pin) for pin in extra)

def make_sampler(cfg: Dict[str, Any]) -> UnbiasedSampler:
    return UnbiasedSampler(retry_limit=cfg.get("random_retry_limit", DEFAULT_RETRY_LIMIT))

def max_attempts(cfg: Dict[str, Any]) -> Optional[int]:
    """None in the file means retry without limit."""
    return cfg.get("max_attempts", DEFAULT_MAX_ATTEMPTS)
