"""Key/value persistence for the user-supplied API key.

The service only stores a single entry, but the store is a small general
protocol so callers can plug in their own backend.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

log = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous string key/value store."""

    def get(self, key: str) -> str | None: ...  # noqa: D102
    def set(self, key: str, value: str) -> None: ...  # noqa: D102
    def remove(self, key: str) -> None: ...  # noqa: D102


class MemoryStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:  # noqa: D107
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:  # noqa: D102
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:  # noqa: D102
        self._data[key] = value

    def remove(self, key: str) -> None:  # noqa: D102
        self._data.pop(key, None)


class JSONFileStore:
    """Single JSON object on disk mapping keys to string values.

    Uses copy-on-write: write to an owner-only temp file and rename for
    atomicity.
    A missing, unreadable, or non-object file reads as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:  # noqa: D107
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:  # noqa: D102
        return self._path

    def get(self, key: str) -> str | None:  # noqa: D102
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:  # noqa: D102
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:  # noqa: D102
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def _read_all(self) -> dict[str, object]:
        if not self._path.exists():
            return {}
        try:
            result = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable store file %s: %s", self._path, e)
            return {}
        return result if isinstance(result, dict) else {}

    def _write_all(self, data: dict[str, object]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        # Owner-only from creation: the file holds an API key
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2)
            tmp.replace(self._path)
        except BaseException:
            tmp.unlink(missing_ok=True)
            raise
