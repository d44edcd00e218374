"""
Key-value backends.

FileKeyValueStore keeps one UTF-8 file per key inside a directory and replaces
files atomically (temp file in the same directory, then os.replace), so a
crash mid-write leaves the previous value intact.

InMemoryKeyValueStore is used by tests and by throwaway sessions.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

import structlog

from founderstack.services.storage.interface import (
    KeyValueStore,
    QuotaExceededError,
    StorageError,
)


logger = structlog.get_logger(__name__)


def _check_quota(value: str, quota: Optional[int]) -> None:
    if quota is None:
        return
    size = len(value.encode("utf-8"))
    if size > quota:
        raise QuotaExceededError(size, quota)


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store with an optional per-value byte quota."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._values: dict[str, str] = {}
        self._quota = quota_bytes

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        _check_quota(value, self._quota)
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._values)


class FileKeyValueStore(KeyValueStore):
    """
    Directory-backed store: the value of `key` lives in `<directory>/<key>.json`.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        quota_bytes: Optional[int] = None,
        fsync: bool = True,
    ):
        self._directory = Path(directory).expanduser()
        self._quota = quota_bytes
        self._fsync = fsync

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key:
            raise StorageError(f"Invalid key: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        _check_quota(value, self._quota)
        path = self._path(key)
        temp_name = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix=f"{key}-",
                suffix=".tmp",
                dir=self._directory,
                delete=False,
            ) as tf:
                temp_name = tf.name
                tf.write(value)
                tf.flush()
                if self._fsync:
                    os.fsync(tf.fileno())
            os.replace(temp_name, path)
            temp_name = None
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e
        finally:
            if temp_name is not None and os.path.exists(temp_name):
                try:
                    os.unlink(temp_name)
                except OSError:
                    logger.warning("temp_file_cleanup_failed", path=temp_name)

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Could not remove {path}: {e}") from e
