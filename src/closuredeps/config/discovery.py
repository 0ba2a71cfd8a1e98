"""Locating ``closuredeps.toml``.

The file is found by walking up from the starting directory, the way git
finds ``.git/``. ``CLOSUREDEPS_CONFIG`` names a file directly and disables
the walk; ``--config`` bypasses discovery altogether (see
:meth:`DepsSettings.from_cli <closuredeps.config.settings.DepsSettings.from_cli>`).
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "closuredeps.toml"
CONFIG_ENV_VAR = "CLOSUREDEPS_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect for *start* (default: cwd), or None.

    A ``CLOSUREDEPS_CONFIG`` that points at a missing file yields None rather
    than falling back to the walk.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
