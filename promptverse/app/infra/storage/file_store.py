# promptverse/app/infra/storage/file_store.py
"""
File-backed key-value store.
Each key maps to `<directory>/<key>.json`; writes go through a temp file
and an atomic replace so a crash never leaves a truncated document.
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from promptverse.app.domain.errors import PersistenceError
from promptverse.app.infra.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

_SAFE_KEY_RE = re.compile(r"[^a-zA-Z0-9._-]")


class FileKeyValueStore(KeyValueStore):
    def __init__(self, directory: str | Path, max_value_bytes: Optional[int] = None):
        self.directory = Path(directory)
        self.max_value_bytes = max_value_bytes

    def _path_for(self, key: str) -> Path:
        safe_key = _SAFE_KEY_RE.sub("_", key)
        return self.directory / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Unable to read {key}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        self._check_quota(key, value, self.max_value_bytes)
        path = self._path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise PersistenceError(f"Unable to write {key}: {exc}") from exc
        logger.debug("store.write key=%s bytes=%d", key, len(value))

    def delete(self, key: str) -> None:
        try:
            self._path_for(key).unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceError(f"Unable to delete {key}: {exc}") from exc
