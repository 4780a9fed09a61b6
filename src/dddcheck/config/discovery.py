"""Config file discovery.

Walk-up finder locates dddcheck.toml, the way git finds .git/.
DDDCHECK_CONFIG env var and the --config CLI flag override discovery.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "dddcheck.toml"
CONFIG_ENV_VAR = "DDDCHECK_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for dddcheck.toml.

    Checks DDDCHECK_CONFIG first; an env path that does not exist means
    "no config", not "keep searching".
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent

