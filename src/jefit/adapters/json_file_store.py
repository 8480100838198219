"""File-backed key-value store for the local ledger."""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from jefit.domain.errors import StorageError
from jefit.services.ledger import KeyValueStore


@dataclass
class JsonFileStore(KeyValueStore):
    """Stores each key as ``<directory>/<key>.json``, replaced atomically."""

    directory: Path

    @classmethod
    def create(cls, directory: str | Path) -> "JsonFileStore":
        """Create a store, making the directory if needed."""
        path = Path(directory)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create ledger directory {path}") from exc
        return cls(directory=path)

    def get(self, key: str) -> object | None:
        """Return the decoded value for a key, if present."""
        path = self._path(key)
        try:
            with path.open(encoding="utf-8") as handle:
                return json.load(handle)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read ledger key {key}") from exc

    def set(self, key: str, value: object) -> None:
        """Write the value to a temp file, fsync it and swap it in."""
        path = self._path(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(value, handle)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Cannot write ledger key {key}") from exc

    def _path(self, key: str) -> Path:
        if not key or "/" in key or key.startswith("."):
            raise StorageError(f"Invalid ledger key: {key!r}")
        return self.directory / f"{key}.json"
