from __future__ import annotations

import os
from pathlib import Path
from typing import Optional


def load_dotenv_if_present(path: str | None = None) -> None:
    """
    Lightweight .env loader used for local runs.

    - Reads KEY=VALUE pairs from the given file (default: ".env" in CWD).
    - Ignores empty lines and comments starting with "#".
    - Strips matching single/double quotes around values.
    - Does *not* overwrite variables that are already present in os.environ.
    """
    env_path = Path(path or ".env")
    if not env_path.exists():
        return

    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        if key and key not in os.environ:
            os.environ[key] = value


def env_str(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def env_int(name: str, default: int) -> int:
    value = env_str(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def env_float(name: str, default: float) -> float:
    value = env_str(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


__all__ = ["load_dotenv_if_present", "env_str", "env_int", "env_float"]
