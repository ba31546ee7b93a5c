"""Tests for the non-throwing try_get_* accessors"""

import uuid
from datetime import timedelta

from jobkit.job_data_map import JobDataMap


def test_try_get_int_value_on_unparseable_string():
    """Test that a bad string yields (False, 0) instead of raising."""
    data = JobDataMap({"n": "not a number"})

    assert data.try_get_int_value("n") == (False, 0)


def test_try_get_returns_defaults_for_missing_keys():
    """Test that every try_get_* reports missing keys with a zero value."""
    data = JobDataMap()

    assert data.try_get_int_value("missing") == (False, 0)
    assert data.try_get_long_value("missing") == (False, 0)
    assert data.try_get_double_value("missing") == (False, 0.0)
    assert data.try_get_boolean_value("missing") == (False, False)
    assert data.try_get_char_from_string("missing") == (False, "\0")
    assert data.try_get_uuid_value("missing") == (False, uuid.UUID(int=0))
    assert data.try_get_timedelta_value("missing") == (False, timedelta(0))


def test_try_get_reports_type_mismatches():
    """Test that a natively stored value of another kind is a failure, not an error."""
    data = JobDataMap()
    data.put_long("n", 5)

    assert data.try_get_int_value("n") == (False, 0)
    assert data.try_get_long_value("n") == (True, 5)


def test_try_get_reads_both_representations():
    """Test that try_get_* accept string and native values alike."""
    data = JobDataMap({"as_string": "12", "flag": "False"})
    data.put_int("native", 12)

    assert data.try_get_int_value("as_string") == (True, 12)
    assert data.try_get_int_value("native") == (True, 12)
    assert data.try_get_boolean_value("flag") == (True, False)


def test_try_get_from_string_rejects_native_values():
    """Test that try_get_*_from_string fail on native values."""
    data = JobDataMap()
    data.put_int("native", 12)

    assert data.try_get_int_value_from_string("native") == (False, 0)


def test_try_get_uuid_value_uses_uuid_semantics():
    """Test that try_get_uuid_value parses UUIDs, not integers."""
    value = uuid.uuid4()
    data = JobDataMap({"id": value.hex, "number": "42"})

    assert data.try_get_uuid_value("id") == (True, value)
    assert data.try_get_uuid_value("number") == (False, uuid.UUID(int=0))


def test_try_get_char_from_empty_string():
    """Test that an empty string has no first character."""
    data = JobDataMap({"empty": ""})

    assert data.try_get_char_value("empty") == (False, "\0")
