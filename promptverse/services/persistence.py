# promptverse/services/persistence.py
"""
Persistence gateway between the in-memory repository and the key-value store.

The whole repository is one JSON document under a fixed key. Loading is
shape-tolerant field by field: a missing or mistyped field falls back to its
built-in default without discarding the fields that did parse.
"""
from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from promptverse.app.domain.errors import ImportFormatError, PersistenceError
from promptverse.app.domain.models import RepositoryRoot
from promptverse.app.infra.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

STORAGE_KEY = "promptverse_data_v1"
EXPORT_FILENAME_TEMPLATE = "promptverse-backup-{day}.json"

_FIELD_ADAPTERS: dict[str, TypeAdapter] = {
    name: TypeAdapter(field.annotation) for name, field in RepositoryRoot.model_fields.items()
}


def reconcile_root(raw: Any) -> RepositoryRoot:
    """Build a RepositoryRoot from loosely-shaped data, defaulting field by field."""
    if not isinstance(raw, dict):
        return RepositoryRoot()

    values: dict[str, Any] = {}
    for name, adapter in _FIELD_ADAPTERS.items():
        value = raw.get(name)
        if value is None:
            continue
        try:
            values[name] = adapter.validate_python(value)
        except ValidationError as exc:
            logger.warning(
                "persistence.field_defaulted field=%s errors=%d", name, exc.error_count()
            )
    return RepositoryRoot(**values)


def dump_root(root: RepositoryRoot) -> dict[str, Any]:
    return root.model_dump(mode="json", exclude_none=True)


def serialize_root(root: RepositoryRoot, *, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(dump_root(root), indent=2, ensure_ascii=False)
    return json.dumps(dump_root(root), ensure_ascii=False, separators=(",", ":"))


def export_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return EXPORT_FILENAME_TEMPLATE.format(day=day.isoformat())


class PersistenceGateway:
    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self._store = store
        self.key = key

    def load(self) -> RepositoryRoot:
        try:
            serialized = self._store.get(self.key)
        except PersistenceError:
            logger.exception("persistence.load_failed key=%s", self.key)
            return RepositoryRoot()

        if not serialized:
            return RepositoryRoot()

        try:
            parsed = json.loads(serialized)
        except ValueError:
            logger.error("persistence.load_malformed key=%s using defaults", self.key)
            return RepositoryRoot()
        return reconcile_root(parsed)

    def save(self, root: RepositoryRoot) -> None:
        """Overwrite the stored blob. Failures are logged and swallowed."""
        try:
            self._store.set(self.key, serialize_root(root))
        except (PersistenceError, TypeError, ValueError):
            logger.exception("persistence.save_failed key=%s", self.key)

    def export_payload(self, root: RepositoryRoot) -> str:
        return serialize_root(root, pretty=True)

    def export_to_file(
        self, root: RepositoryRoot, directory: str | Path, day: Optional[date] = None
    ) -> Path:
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / export_filename(day)
        target.write_text(self.export_payload(root), encoding="utf-8")
        logger.info("persistence.exported path=%s", target)
        return target

    def import_from_file(self, contents: str | bytes) -> RepositoryRoot:
        """
        Parse a backup document.

        Args:
            contents: Raw text (or bytes) of an exported file

        Returns:
            The imported repository; nothing is persisted here

        Raises:
            ImportFormatError: If the document is not JSON or lacks a prompts list
        """
        try:
            if isinstance(contents, bytes):
                contents = contents.decode("utf-8-sig")
            parsed = json.loads(contents)
        except (UnicodeDecodeError, ValueError) as exc:
            raise ImportFormatError("Invalid File") from exc

        if not isinstance(parsed, dict) or not isinstance(parsed.get("prompts"), list):
            raise ImportFormatError("missing prompts list")

        try:
            _FIELD_ADAPTERS["prompts"].validate_python(parsed["prompts"])
        except ValidationError as exc:
            raise ImportFormatError(f"malformed prompts ({exc.error_count()} errors)") from exc

        return reconcile_root(parsed)
