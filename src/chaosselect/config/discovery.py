"""Locate ``chaosselect.toml``.

Lookup order: the ``CHAOSSELECT_CONFIG`` environment variable (exclusive
when set, even if the file is missing), then the first ``chaosselect.toml``
found walking up from the working directory, the way git finds ``.git/``.
The ``--config`` flag bypasses discovery entirely (see ``settings``).
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "chaosselect.toml"
CONFIG_ENV_VAR = "CHAOSSELECT_CONFIG"


def _walk_up(start: Path) -> Iterator[Path]:
    current = start.resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    for directory in _walk_up(start or Path.cwd()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None

