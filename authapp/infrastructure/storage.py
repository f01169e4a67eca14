# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Profile image storage.

References handed out by the registration flow are paths relative to the
storage root; anything resolving outside that root is refused.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from authapp.shared.logging import logger


class StoragePort(Protocol):
    def read_bytes(self, path: str) -> bytes: ...

    def write_bytes(self, path: str, data: bytes) -> None: ...

    def delete(self, path: str) -> None: ...


class LocalFileStorage(StoragePort):
    def __init__(self, root: Path) -> None:
        self._root = Path(root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def _locate(self, reference: str) -> Path:
        target = (self._root / reference).resolve()
        if not target.is_relative_to(self._root):
            raise ValueError(f"reference escapes storage root: {reference!r}")
        return target

    def read_bytes(self, path: str) -> bytes:
        return self._locate(path).read_bytes()

    def write_bytes(self, path: str, data: bytes) -> None:
        target = self._locate(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            target.write_bytes(data)
        except OSError:
            target.unlink(missing_ok=True)
            raise
        logger.debug(f"storage: wrote {len(data)} bytes to {path}")

    def delete(self, path: str) -> None:
        self._locate(path).unlink(missing_ok=True)
        logger.debug(f"storage: removed {path}")


__all__ = ["LocalFileStorage", "StoragePort"]
