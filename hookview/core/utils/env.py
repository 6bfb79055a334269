"""Minimal ``.env`` support for local runs of the API and the seed script."""

from __future__ import annotations

import os
from pathlib import Path

_QUOTES = ("'", '"')


def parse_env_line(line: str) -> tuple[str, str] | None:
    """Split one ``.env`` line into ``(key, value)``.

    Blank lines, comments and lines without ``=`` give ``None``. A leading
    ``export`` is accepted. Unquoted values lose a trailing `` # comment``;
    quoted values are kept verbatim between the quotes.
    """
    line = line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    if line.startswith("export "):
        line = line[len("export "):].lstrip()

    key, _, value = line.partition("=")
    key = key.strip()
    if not key:
        return None

    value = value.strip()
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return key, value[1:-1]
    if " #" in value:
        value = value.split(" #", 1)[0].rstrip()
    return key, value


def load_env_file_if_present(path: str | Path = ".env", override: bool = False) -> dict[str, str]:
    """Copy the pairs from ``path`` into ``os.environ`` and return them.

    A missing file is not an error. Variables already set in the process
    environment are left alone unless ``override`` is true.
    """
    env_path = Path(path)
    if not env_path.is_file():
        return {}

    loaded: dict[str, str] = {}
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        pair = parse_env_line(raw)
        if pair is None:
            continue
        key, value = pair
        loaded[key] = value
        if override or key not in os.environ:
            os.environ[key] = value
    return loaded
