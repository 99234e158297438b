"""Environment variable helpers."""
from __future__ import annotations

import os


def env_str(name: str, default: str | None = None) -> str | None:
    """Return string environment variable, or default when unset/empty."""
    value = os.environ.get(name)
    if value is None:
        return default
    value = value.strip()
    return value if value else default


def env_int(name: str, default: int | None = None) -> int | None:
    """Return integer environment variable, or default when unset/empty."""
    value = env_str(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"invalid_env:{name}") from None


def env_bool(name: str, default: bool = False) -> bool:
    """Return boolean environment variable (1/true/yes/on), or default."""
    value = env_str(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}
