"""Root conftest: test settings must be in the environment before chat_sync.config is imported."""
from __future__ import annotations

import os
from pathlib import Path

_ROOT = Path(__file__).resolve().parent


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())


_load_env_file(_ROOT / ".env.test")
# tests never talk to a real Redis
os.environ["EVENT_BUS"] = "memory"
