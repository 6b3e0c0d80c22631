"""Binary encoding of the stats store.

Layout (little-endian)::

    magic      4 bytes  b"KSTR"
    version    u16
    entries    u32
    entry*     u32 key tag, u32 value tag, u64 item count, items

A Stat item is ``u32 duration tag, f64 wpm, u32 errors, u32 seconds,
f64 accuracy``; an Activity item is ``f64 timestamp, u32 kind tag``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Union

from keystride.core.errors import CodecError
from keystride.core.models import Activity, ActivityKind, Stat, TypingDuration

MAGIC = b"KSTR"
SCHEMA_VERSION = 1

_HEADER = struct.Struct("<4sHI")
_ENTRY = struct.Struct("<IIQ")
_STAT = struct.Struct("<IdIId")
_ACTIVITY = struct.Struct("<dI")

_DURATION_TAGS = {d: i for i, d in enumerate(TypingDuration)}
_ACTIVITY_TAGS = {k: i for i, k in enumerate(ActivityKind)}


class StorageKey(Enum):
    STATS = 0
    ACTIVITIES = 1


@dataclass
class StatsValue:
    stats: List[Stat] = field(default_factory=list)


@dataclass
class ActivitiesValue:
    activities: List[Activity] = field(default_factory=list)


StorageValue = Union[StatsValue, ActivitiesValue]
StorageData = Dict[StorageKey, StorageValue]

_VALUE_TAGS = {StatsValue: 0, ActivitiesValue: 1}
_EXPECTED_VALUE = {StorageKey.STATS: StatsValue, StorageKey.ACTIVITIES: ActivitiesValue}


def empty_data() -> StorageData:
    """Return a fresh map with both keys present and no records."""
    return {
        StorageKey.STATS: StatsValue(),
        StorageKey.ACTIVITIES: ActivitiesValue(),
    }


def encode(data: StorageData) -> bytes:
    chunks = [_HEADER.pack(MAGIC, SCHEMA_VERSION, len(data))]
    for key in StorageKey:
        if key not in data:
            continue
        value = data[key]
        if not isinstance(value, _EXPECTED_VALUE[key]):
            raise CodecError(f"{key.name} holds {type(value).__name__}")
        if isinstance(value, StatsValue):
            chunks.append(_ENTRY.pack(key.value, _VALUE_TAGS[StatsValue], len(value.stats)))
            for stat in value.stats:
                chunks.append(
                    _STAT.pack(
                        _DURATION_TAGS[stat.typing_duration],
                        float(stat.average_wpm),
                        int(stat.errors_count),
                        int(stat.time_secs),
                        float(stat.accuracy),
                    )
                )
        elif isinstance(value, ActivitiesValue):
            chunks.append(_ENTRY.pack(key.value, _VALUE_TAGS[ActivitiesValue], len(value.activities)))
            for activity in value.activities:
                chunks.append(_ACTIVITY.pack(float(activity.timestamp), _ACTIVITY_TAGS[activity.kind]))
        else:
            raise CodecError(f"unsupported value type {type(value).__name__}")
    return b"".join(chunks)


class _Reader:
    def __init__(self, payload: bytes) -> None:
        self._payload = payload
        self._offset = 0

    def read(self, fmt: struct.Struct) -> tuple:
        end = self._offset + fmt.size
        if end > len(self._payload):
            raise CodecError(f"truncated payload at offset {self._offset}")
        values = fmt.unpack_from(self._payload, self._offset)
        self._offset = end
        return values

    @property
    def exhausted(self) -> bool:
        return self._offset == len(self._payload)


def _lookup(table: list, tag: int, what: str):
    if not 0 <= tag < len(table):
        raise CodecError(f"unknown {what} tag {tag}")
    return table[tag]


def decode(payload: bytes) -> StorageData:
    reader = _Reader(payload)
    magic, version, count = reader.read(_HEADER)
    if magic != MAGIC:
        raise CodecError("not a keystride stats file")
    if version != SCHEMA_VERSION:
        raise CodecError(f"unsupported schema version {version}")

    durations = list(TypingDuration)
    kinds = list(ActivityKind)
    keys = list(StorageKey)
    data: StorageData = {}
    for _ in range(count):
        key_tag, value_tag, items = reader.read(_ENTRY)
        key = _lookup(keys, key_tag, "key")
        if key in data:
            raise CodecError(f"duplicate key {key.name}")
        if value_tag != _VALUE_TAGS[_EXPECTED_VALUE[key]]:
            raise CodecError(f"{key.name} carries value tag {value_tag}")

        if key is StorageKey.STATS:
            stats = []
            for _ in range(items):
                duration_tag, wpm, errors, secs, accuracy = reader.read(_STAT)
                stats.append(
                    Stat(
                        typing_duration=_lookup(durations, duration_tag, "duration"),
                        average_wpm=wpm,
                        errors_count=errors,
                        time_secs=secs,
                        accuracy=accuracy,
                    )
                )
            data[key] = StatsValue(stats)
        elif key is StorageKey.ACTIVITIES:
            activities = []
            for _ in range(items):
                timestamp, kind_tag = reader.read(_ACTIVITY)
                activities.append(Activity(timestamp=timestamp, kind=_lookup(kinds, kind_tag, "activity")))
            data[key] = ActivitiesValue(activities)

    if not reader.exhausted:
        raise CodecError("trailing bytes after last entry")
    return data
