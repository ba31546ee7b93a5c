"""A typed, change-tracked map of job data.

A JobDataMap is attached to a job descriptor (and, by schedulers, to
triggers). Values can be put natively, in which case they keep their kind,
or as strings, in which case they are stored in a canonical,
locale-independent encoding. Every getter understands both: a string is
parsed on the way out, a native value must already have the requested kind.

The map tracks whether it has been changed since it was loaded, so stores
know whether it needs to be written back.
"""

import uuid
from collections.abc import Callable, Iterator, Mapping, MutableMapping
from datetime import datetime, timedelta
from typing import Any, Self, TypeVar

from jobkit.exception import JobDataError, MissingKeyError, TypeMismatchError
from jobkit.serialised import SerialisedEntry, SerialisedJobDataMap
from jobkit.utils.logging_config import get_logger
from jobkit.values import (
    DataValue,
    ValueKind,
    codec_for,
    format_value,
    infer_kind,
    native_value,
    parse_value,
)

log = get_logger(__name__)

T = TypeVar("T")

# Kinds whose saved form is the value itself rather than a canonical string
_PASSTHROUGH_KINDS = (ValueKind.STRING, ValueKind.OBJECT)


class JobDataMap(MutableMapping[str, Any]):
    """Holds state information for a job.

    Indexing returns the raw stored value. The typed accessors
    (`get_int_value`, `get_uuid_value`, ...) coerce string-stored values and
    check natively-stored ones.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, DataValue] = {}
        self._dirty = False

        if data is not None:
            self.put_all(data)
            # Loading from an existing map (e.g. from a store) is not a change
            self.clear_dirty_flag()

    # ++++++++++++++++++++++ Dirty tracking ++++++++++++++++++++++

    @property
    def dirty(self) -> bool:
        """Has the map been changed since it was created or last cleaned?"""

        return self._dirty

    def clear_dirty_flag(self) -> None:
        """Mark the map as unchanged, without touching its entries."""

        self._dirty = False

    # ++++++++++++++++++++++ Mapping protocol ++++++++++++++++++++

    def __getitem__(self, key: str) -> Any:
        return self.entry(key).value

    def __setitem__(self, key: str, value: Any) -> None:
        self.put(key, value)

    def __delitem__(self, key: str) -> None:
        if not self.remove(key):
            raise MissingKeyError(f"Key '{key}' not found in job data map")

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if isinstance(other, JobDataMap):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            # plain mappings are compared by the kinds their values would be stored as
            try:
                return self._entries == JobDataMap(other)._entries
            except TypeMismatchError:
                return False
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{key!r}: {entry.kind.value}={entry.value!r}" for key, entry in self._entries.items())
        return f"JobDataMap({{{body}}}, dirty={self._dirty})"

    def entry(self, key: str) -> DataValue:
        """Get the tagged value stored under a key.

        @param key: The key to look up
        @return: The stored value and its kind
        @raises MissingKeyError: If the key is absent
        """

        if key not in self._entries:
            raise MissingKeyError(f"Key '{key}' not found in job data map")

        return self._entries[key]

    def entries(self) -> Iterator[tuple[str, DataValue]]:
        """Iterate over (key, tagged value) pairs in insertion order."""

        return iter(self._entries.items())

    def kind_of(self, key: str) -> ValueKind:
        return self.entry(key).kind

    def copy(self) -> "JobDataMap":
        """An independent, clean copy with the same entries and kinds."""

        return JobDataMap(self)

    # ++++++++++++++++++++++ Mutation ++++++++++++++++++++++++++++

    def _store(self, key: str, value: DataValue) -> None:
        if not isinstance(key, str):
            raise TypeMismatchError(f"Job data keys must be strings, got {type(key).__name__}")

        self._entries[key] = value
        self._dirty = True

    def put(self, key: str, value: Any) -> None:
        """Store a value natively, inferring its kind from its Python type."""

        self._store(key, DataValue.of(value))

    def put_all(self, data: Mapping[str, Any]) -> None:
        """Store every entry of a mapping. Kinds are kept when copying
        from another JobDataMap."""

        if isinstance(data, JobDataMap):
            for key, entry in data.entries():
                self._store(key, entry)
        else:
            for key, value in data.items():
                self.put(key, value)

    def remove(self, key: str) -> bool:
        """Remove a key, if present.

        @param key: The key to remove
        @return: Whether anything was removed
        """

        if key not in self._entries:
            return False

        del self._entries[key]
        self._dirty = True
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._dirty = True

    def _put_native(self, kind: ValueKind, key: str, value: Any) -> None:
        self._store(key, DataValue(kind=kind, value=native_value(kind, value)))

    def put_string(self, key: str, value: str) -> None:
        self._put_native(ValueKind.STRING, key, value)

    def put_int(self, key: str, value: int) -> None:
        """Store a 32-bit integer natively."""

        self._put_native(ValueKind.INT, key, value)

    def put_long(self, key: str, value: int) -> None:
        """Store a 64-bit integer natively."""

        self._put_native(ValueKind.LONG, key, value)

    def put_float(self, key: str, value: float) -> None:
        """Store a single-precision float natively. The value is rounded
        to single precision."""

        self._put_native(ValueKind.FLOAT, key, value)

    def put_double(self, key: str, value: float) -> None:
        self._put_native(ValueKind.DOUBLE, key, value)

    def put_boolean(self, key: str, value: bool) -> None:
        self._put_native(ValueKind.BOOLEAN, key, value)

    def put_char(self, key: str, value: str) -> None:
        """Store a single character natively."""

        self._put_native(ValueKind.CHAR, key, value)

    def put_uuid(self, key: str, value: uuid.UUID) -> None:
        self._put_native(ValueKind.UUID, key, value)

    def put_datetime(self, key: str, value: datetime) -> None:
        self._put_native(ValueKind.DATETIME, key, value)

    def put_datetime_offset(self, key: str, value: datetime) -> None:
        """Store a timezone-aware datetime natively."""

        self._put_native(ValueKind.DATETIME_OFFSET, key, value)

    def put_timedelta(self, key: str, value: timedelta) -> None:
        self._put_native(ValueKind.TIMESPAN, key, value)

    def put_as_string(self, key: str, value: Any, kind: ValueKind | None = None) -> None:
        """Store the canonical string encoding of a value, not the value.

        @param key: The key to store under
        @param value: The value to encode. None stores an empty string, read
            back as an absent UUID by `get_nullable_uuid_value`
        @param kind: The kind to encode as; inferred from the value when
            omitted. Pass FLOAT or LONG to pick those over DOUBLE or INT
        @raises TypeMismatchError: If the value cannot be encoded as the kind
        """

        if value is None and kind in (None, ValueKind.UUID):
            self.put_string(key, "")
            return

        self.put_string(key, format_value(kind or infer_kind(value), value))

    # ++++++++++++++++++++++ Resolution ++++++++++++++++++++++++++

    def _resolve(self, key: str, kind: ValueKind) -> Any:
        entry = self.entry(key)

        if entry.is_string and kind is not ValueKind.STRING:
            return parse_value(kind, entry.value)

        if entry.kind is not kind:
            raise TypeMismatchError(f"Key '{key}' holds a {entry.kind.value}, not a {kind.value}")

        return entry.value

    def _resolve_from_string(self, key: str, kind: ValueKind) -> Any:
        entry = self.entry(key)

        if not entry.is_string:
            raise TypeMismatchError(f"Key '{key}' holds a {entry.kind.value}, not a string")

        return parse_value(kind, entry.value)

    def _attempt(self, resolve: Callable[[str, ValueKind], T], key: str, kind: ValueKind) -> tuple[bool, T]:
        try:
            return True, resolve(key, kind)
        except JobDataError as err:
            log.debug("Could not read key '%s' as %s: %s", key, kind.value, err)
            return False, codec_for(kind).default

    # ++++++++++++++++++++++ Fail-fast getters +++++++++++++++++++

    def get_string(self, key: str) -> str:
        """Get a value stored as a string, without any parsing."""

        return self._resolve(key, ValueKind.STRING)

    def get_int_value(self, key: str) -> int:
        """Get a 32-bit integer, parsing it if it was stored as a string.

        @raises MissingKeyError: If the key is absent
        @raises FormatError: If the stored string is not an integer
        @raises TypeMismatchError: If the stored value is not an int
        """

        return self._resolve(key, ValueKind.INT)

    def get_long_value(self, key: str) -> int:
        return self._resolve(key, ValueKind.LONG)

    def get_float_value(self, key: str) -> float:
        return self._resolve(key, ValueKind.FLOAT)

    def get_double_value(self, key: str) -> float:
        return self._resolve(key, ValueKind.DOUBLE)

    def get_boolean_value(self, key: str) -> bool:
        return self._resolve(key, ValueKind.BOOLEAN)

    def get_char_value(self, key: str) -> str:
        """Get a character. A string-stored value yields its first character."""

        return self._resolve(key, ValueKind.CHAR)

    def get_uuid_value(self, key: str) -> uuid.UUID:
        return self._resolve(key, ValueKind.UUID)

    def get_nullable_uuid_value(self, key: str) -> uuid.UUID | None:
        """Get a UUID that may be absent. An empty string reads as None.

        @raises MissingKeyError: If the key is absent
        @raises FormatError: If the stored string is neither empty nor a UUID
        @raises TypeMismatchError: If the stored value is not a UUID
        """

        entry = self.entry(key)
        if entry.is_string and entry.value == "":
            return None

        return self._resolve(key, ValueKind.UUID)

    def get_datetime_value(self, key: str) -> datetime:
        return self._resolve(key, ValueKind.DATETIME)

    def get_datetime_offset_value(self, key: str) -> datetime:
        return self._resolve(key, ValueKind.DATETIME_OFFSET)

    def get_timedelta_value(self, key: str) -> timedelta:
        return self._resolve(key, ValueKind.TIMESPAN)

    # ++++++++++++++++++++++ From-string getters +++++++++++++++++

    def get_int_value_from_string(self, key: str) -> int:
        """Parse a string-stored 32-bit integer. Natively stored values
        are rejected with TypeMismatchError."""

        return self._resolve_from_string(key, ValueKind.INT)

    def get_long_value_from_string(self, key: str) -> int:
        return self._resolve_from_string(key, ValueKind.LONG)

    def get_float_value_from_string(self, key: str) -> float:
        return self._resolve_from_string(key, ValueKind.FLOAT)

    def get_double_value_from_string(self, key: str) -> float:
        return self._resolve_from_string(key, ValueKind.DOUBLE)

    def get_boolean_value_from_string(self, key: str) -> bool:
        return self._resolve_from_string(key, ValueKind.BOOLEAN)

    def get_char_from_string(self, key: str) -> str:
        return self._resolve_from_string(key, ValueKind.CHAR)

    def get_uuid_value_from_string(self, key: str) -> uuid.UUID:
        return self._resolve_from_string(key, ValueKind.UUID)

    def get_datetime_value_from_string(self, key: str) -> datetime:
        return self._resolve_from_string(key, ValueKind.DATETIME)

    def get_datetime_offset_value_from_string(self, key: str) -> datetime:
        return self._resolve_from_string(key, ValueKind.DATETIME_OFFSET)

    def get_timedelta_value_from_string(self, key: str) -> timedelta:
        return self._resolve_from_string(key, ValueKind.TIMESPAN)

    # ++++++++++++++++++++++ Non-throwing getters ++++++++++++++++
    #
    # Each returns (found, value). On any lookup, parse or type failure
    # the result is (False, <zero value for the kind>).

    def try_get_int_value(self, key: str) -> tuple[bool, int]:
        return self._attempt(self._resolve, key, ValueKind.INT)

    def try_get_long_value(self, key: str) -> tuple[bool, int]:
        return self._attempt(self._resolve, key, ValueKind.LONG)

    def try_get_float_value(self, key: str) -> tuple[bool, float]:
        return self._attempt(self._resolve, key, ValueKind.FLOAT)

    def try_get_double_value(self, key: str) -> tuple[bool, float]:
        return self._attempt(self._resolve, key, ValueKind.DOUBLE)

    def try_get_boolean_value(self, key: str) -> tuple[bool, bool]:
        return self._attempt(self._resolve, key, ValueKind.BOOLEAN)

    def try_get_char_value(self, key: str) -> tuple[bool, str]:
        return self._attempt(self._resolve, key, ValueKind.CHAR)

    def try_get_uuid_value(self, key: str) -> tuple[bool, uuid.UUID]:
        return self._attempt(self._resolve, key, ValueKind.UUID)

    def try_get_datetime_value(self, key: str) -> tuple[bool, datetime]:
        return self._attempt(self._resolve, key, ValueKind.DATETIME)

    def try_get_datetime_offset_value(self, key: str) -> tuple[bool, datetime]:
        return self._attempt(self._resolve, key, ValueKind.DATETIME_OFFSET)

    def try_get_timedelta_value(self, key: str) -> tuple[bool, timedelta]:
        return self._attempt(self._resolve, key, ValueKind.TIMESPAN)

    def try_get_int_value_from_string(self, key: str) -> tuple[bool, int]:
        return self._attempt(self._resolve_from_string, key, ValueKind.INT)

    def try_get_long_value_from_string(self, key: str) -> tuple[bool, int]:
        return self._attempt(self._resolve_from_string, key, ValueKind.LONG)

    def try_get_float_value_from_string(self, key: str) -> tuple[bool, float]:
        return self._attempt(self._resolve_from_string, key, ValueKind.FLOAT)

    def try_get_double_value_from_string(self, key: str) -> tuple[bool, float]:
        return self._attempt(self._resolve_from_string, key, ValueKind.DOUBLE)

    def try_get_boolean_value_from_string(self, key: str) -> tuple[bool, bool]:
        return self._attempt(self._resolve_from_string, key, ValueKind.BOOLEAN)

    def try_get_char_from_string(self, key: str) -> tuple[bool, str]:
        return self._attempt(self._resolve_from_string, key, ValueKind.CHAR)

    def try_get_uuid_value_from_string(self, key: str) -> tuple[bool, uuid.UUID]:
        return self._attempt(self._resolve_from_string, key, ValueKind.UUID)

    def try_get_datetime_value_from_string(self, key: str) -> tuple[bool, datetime]:
        return self._attempt(self._resolve_from_string, key, ValueKind.DATETIME)

    def try_get_datetime_offset_value_from_string(self, key: str) -> tuple[bool, datetime]:
        return self._attempt(self._resolve_from_string, key, ValueKind.DATETIME_OFFSET)

    def try_get_timedelta_value_from_string(self, key: str) -> tuple[bool, timedelta]:
        return self._attempt(self._resolve_from_string, key, ValueKind.TIMESPAN)

    # ++++++++++++++++++++++ Persistence +++++++++++++++++++++++++

    def save(self) -> SerialisedJobDataMap:
        """Serialize the map's entries. The dirty flag is not saved.

        @return: The serialized map
        """

        entries: list[SerialisedEntry] = []
        for key, entry in self._entries.items():
            value = entry.value if entry.kind in _PASSTHROUGH_KINDS else codec_for(entry.kind).format(entry.value)
            entries.append({"key": key, "kind": entry.kind.value, "value": value})

        return {"entries": entries}

    @classmethod
    def load(cls, data: SerialisedJobDataMap) -> Self:
        """Deserialize a map. The result is clean, as if bulk-constructed.

        @param data: The serialized map data
        @return: The deserialized map
        @raises FormatError: If a typed value cannot be parsed
        """

        loaded = cls()
        for item in data["entries"]:
            kind = ValueKind(item["kind"])
            value = item["value"] if kind in _PASSTHROUGH_KINDS else parse_value(kind, item["value"])
            loaded._store(item["key"], DataValue(kind=kind, value=value))

        loaded.clear_dirty_flag()
        return loaded


def merge_job_data(job_data: JobDataMap | None, trigger_data: JobDataMap | None) -> JobDataMap:
    """Overlay a trigger's data on a job's data, for one execution.

    Neither input is changed. Trigger entries win on key collisions.

    @param job_data: The job descriptor's map, if any
    @param trigger_data: The trigger's map, if any
    @return: A new, clean map
    """

    merged = JobDataMap()
    for source in (job_data, trigger_data):
        if source is not None:
            merged.put_all(source)

    merged.clear_dirty_flag()
    return merged
