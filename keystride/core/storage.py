from __future__ import annotations

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Union

from keystride.core import codec
from keystride.core.codec import ActivitiesValue, StatsValue, StorageData, StorageKey
from keystride.core.errors import (
    CodecError,
    StoreDecodeError,
    StoreNotFoundError,
    StoreWriteError,
)
from keystride.core.models import Activity, Stat

logger = logging.getLogger(__name__)


class StatsStore:
    """Binary store holding every finished session and activity marker.

    The whole map lives in memory and every flush rewrites the file through a
    temporary sibling that replaces it atomically, so a crash mid-write leaves
    the previous file intact.
    """

    def __init__(self, file_path: Union[str, Path]) -> None:
        self._file_path = Path(file_path)
        self._data: StorageData = codec.empty_data()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def data(self) -> StorageData:
        return self._data

    def init(self) -> "StatsStore":
        """Load the file, or seed and write an empty store when it cannot be read.

        Raises StoreWriteError when seeding fails.
        """
        try:
            self._data = self.load()
            return self
        except StoreNotFoundError:
            logger.info("No stats file at %s, creating an empty one", self._file_path)
        except StoreDecodeError as e:
            backup = self._file_path.with_name(self._file_path.name + ".corrupt")
            logger.warning("Stats file is unreadable (%s); keeping a copy at %s", e, backup)
            try:
                shutil.copyfile(self._file_path, backup)
            except OSError as copy_error:
                logger.warning("Could not back up %s: %s", self._file_path, copy_error)

        self._data = codec.empty_data()
        self.flush()
        return self

    def load(self) -> StorageData:
        """Re-read the file from disk without touching the in-memory map."""
        try:
            payload = self._file_path.read_bytes()
        except FileNotFoundError:
            raise StoreNotFoundError(self._file_path, "file does not exist") from None
        except OSError as e:
            raise StoreDecodeError(self._file_path, f"could not read: {e}") from e

        try:
            data = codec.decode(payload)
        except CodecError as e:
            raise StoreDecodeError(self._file_path, str(e)) from e

        missing = [key.name for key in StorageKey if key not in data]
        if missing:
            raise StoreDecodeError(self._file_path, f"missing keys: {', '.join(missing)}")
        return data

    def flush(self) -> None:
        """Serialize the whole map and replace the file in one step."""
        try:
            payload = codec.encode(self._data)
        except CodecError as e:
            raise StoreWriteError(self._file_path, f"could not encode: {e}") from e

        tmp_path = None
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._file_path.name}.", suffix=".tmp", dir=self._file_path.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self._file_path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StoreWriteError(self._file_path, f"could not write: {e}") from e
        logger.debug("Flushed %d stats to %s", len(self.stats), self._file_path)

    def insert(self, stat: Stat) -> bool:
        """Append a stat and flush. Returns False when the flush failed."""
        self.stats.append(stat)
        try:
            self.flush()
        except StoreWriteError as e:
            logger.error("Could not save stat: %s", e)
            return False
        return True

    def add_activity(self, activity: Activity) -> None:
        """Record an activity marker; it is persisted by the next flush."""
        self.activities.append(activity)

    @property
    def stats(self) -> List[Stat]:
        value = self._data[StorageKey.STATS]
        if not isinstance(value, StatsValue):
            raise TypeError(f"stats slot holds {type(value).__name__}")
        return value.stats

    @property
    def activities(self) -> List[Activity]:
        value = self._data[StorageKey.ACTIVITIES]
        if not isinstance(value, ActivitiesValue):
            raise TypeError(f"activities slot holds {type(value).__name__}")
        return value.activities

    def get_reversed(self) -> List[Stat]:
        """Stats with the most recent first."""
        return list(reversed(self.stats))
