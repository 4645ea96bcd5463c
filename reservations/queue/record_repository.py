"""Persistence helpers for JSON-backed record stores."""

from __future__ import annotations

import json
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Iterable, List, Optional

from infrastructure.errors import StorageError
from tracking import t


class JsonRecordRepository:
    """Read/write a list of records to a JSON backing file."""

    def __init__(self, file_path: str, *, logger: Any) -> None:
        t('reservations.queue.record_repository.JsonRecordRepository.__init__')
        self._path = Path(file_path)
        self._logger = logger

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[dict]:
        """Load records from disk; a missing file is an empty store.

        Raises:
            StorageError: the file exists but cannot be read or decoded.
        """

        t('reservations.queue.record_repository.JsonRecordRepository.load')
        if not self._path.exists():
            self._logger.debug("Store file %s does not exist; starting empty", self._path)
            return []

        try:
            with self._path.open('r', encoding='utf-8') as handle:
                payload = json.load(handle)
        except (OSError, ValueError) as exc:
            self._logger.error("Failed to load records from %s: %s", self._path, exc)
            raise StorageError(f"Cannot read {self._path}: {exc}") from exc

        if isinstance(payload, list):
            self._logger.debug("Loaded %s records from %s", len(payload), self._path)
            return payload
        self._logger.warning(
            "Invalid store format in %s; expected list, received %s",
            self._path,
            type(payload).__name__,
        )
        return []

    def save(self, records: Iterable[dict]) -> None:
        """Atomically replace the backing file with ``records``.

        Raises:
            StorageError: the file could not be written.
        """

        t('reservations.queue.record_repository.JsonRecordRepository.save')
        tmp_path: Optional[Path] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                'w', encoding='utf-8', dir=self._path.parent, delete=False, suffix='.tmp'
            ) as handle:
                json.dump(list(records), handle, indent=2, ensure_ascii=False)
                tmp_path = Path(handle.name)
            tmp_path.replace(self._path)
            self._logger.debug("Store saved to %s", self._path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
            self._logger.error("Failed to save records to %s: %s", self._path, exc)
            raise StorageError(f"Cannot write {self._path}: {exc}") from exc


__all__ = ['JsonRecordRepository']
