from __future__ import annotations
import os


# Defaults
_DEFAULT_MAX_EXPANSION_DEPTH = 200
_TRUTHY = {'1', 'true', 'yes', 'on'}


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{var} must be positive, got {value}")
    return value


def flag_from_env(var: str, default: bool = False) -> bool:
    raw = os.environ.get(var)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def get_max_expansion_depth() -> int:
    return int_from_env('QUASI_MAX_EXPANSION_DEPTH', _DEFAULT_MAX_EXPANSION_DEPTH)


def get_strict_expansion() -> bool:
    return flag_from_env('QUASI_STRICT_EXPANSION')
