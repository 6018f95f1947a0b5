"""Locate the ``.env`` file that feeds :class:`overlay_sdk.config.OverlaySettings`.

The file is looked up in the caller's working directory, not next to the
installed package. ``ENV=staging`` selects ``.env.staging`` (or ``staging``);
an absolute ``ENV`` path is used as is.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


def _env_file_candidates(env_name: str) -> List[str]:
    if not env_name:
        return [".env"]
    candidates = []
    if not env_name.startswith("."):
        candidates.append(f".{env_name}")
    candidates.append(env_name)
    return candidates


def resolve_env_file(base: Optional[Path] = None) -> Path:
    """First existing candidate under *base* (default: cwd), else ``base/.env``."""
    root = Path.cwd() if base is None else Path(base)
    for candidate in _env_file_candidates(os.getenv("ENV", ".env")):
        path = Path(candidate)
        if not path.is_absolute():
            path = root / candidate
        if path.exists():
            return path
    return root / ".env"


ENV_FILE = resolve_env_file()
