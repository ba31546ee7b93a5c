"""Tests for JobDescriptorBuilder"""

import dataclasses
import logging
import uuid
from unittest.mock import Mock

import pytest

from jobkit.base_types import JobKey, TriState
from jobkit.builder import JobDescriptorBuilder
from jobkit.constants import DEFAULT_GROUP
from jobkit.exception import TypeMismatchError
from jobkit.job_data_map import JobDataMap
from jobkit.values import ValueKind


class SendReport:
    """Stand-in job type."""


def test_chained_configuration_is_visible_after_one_build():
    """Test that every chained call takes effect in a single build."""
    builder = JobDescriptorBuilder.create(SendReport)

    chained = builder.with_identity("A").store_durably().request_recovery()
    descriptor = chained.build()

    assert chained is builder
    assert descriptor.key == JobKey("A", DEFAULT_GROUP)
    assert descriptor.durable is True
    assert descriptor.should_recover is True
    assert descriptor.job_type is SendReport


def test_defaults():
    """Test the descriptor produced by an unconfigured builder."""
    descriptor = JobDescriptorBuilder.create().with_identity("plain").build()

    assert descriptor.description is None
    assert descriptor.durable is False
    assert descriptor.should_recover is False
    assert descriptor.job_type is None
    assert len(descriptor.job_data) == 0
    assert descriptor.concurrent_execution_disallowed is TriState.UNSET
    assert descriptor.persist_job_data_after_execution is TriState.UNSET


def test_builds_without_identity_get_distinct_keys():
    """Test that anonymous jobs are given different generated names."""
    first = JobDescriptorBuilder.create(SendReport).build()
    second = JobDescriptorBuilder.create(SendReport).build()

    assert first.key != second.key
    assert first.group == DEFAULT_GROUP


def test_generated_identity_uses_the_id_generator(sequential_ids):
    """Test that the injected id generator names anonymous jobs."""
    builder = JobDescriptorBuilder.create(SendReport, id_generator=sequential_ids)

    assert builder.build().key == JobKey("job-1")
    assert builder.build().key == JobKey("job-2")


def test_explicit_identity_skips_the_id_generator():
    """Test that an explicit name is used as-is."""
    id_generator = Mock(return_value="unused")
    descriptor = JobDescriptorBuilder.create(id_generator=id_generator).with_identity("nightly", "reports").build()

    assert descriptor.key == JobKey("nightly", "reports")
    id_generator.assert_not_called()


def test_identity_from_a_key():
    """Test that a JobKey sets both name and group."""
    descriptor = JobDescriptorBuilder.create().with_identity(JobKey("nightly", "reports")).build()

    assert descriptor.name == "nightly"
    assert descriptor.group == "reports"


def test_malformed_identity_is_substituted(sequential_ids):
    """Test that empty names and groups are replaced rather than rejected."""
    builder = JobDescriptorBuilder.create(id_generator=sequential_ids)

    assert builder.with_identity("", "reports").build().key == JobKey("job-1", "reports")
    assert builder.with_identity(None).build().key == JobKey("job-2", DEFAULT_GROUP)
    assert builder.with_identity("named", "").build().key == JobKey("named", DEFAULT_GROUP)


def test_later_calls_overwrite_earlier_ones():
    """Test that single-valued settings take the last value given."""
    descriptor = (
        JobDescriptorBuilder.create()
        .with_identity("first")
        .with_identity("second")
        .with_description("old")
        .with_description(None)
        .store_durably()
        .store_durably(False)
        .build()
    )

    assert descriptor.name == "second"
    assert descriptor.description is None
    assert descriptor.durable is False


def test_of_type_sets_the_job_type():
    """Test that the job type can be set after creation."""
    descriptor = JobDescriptorBuilder.create().of_type(SendReport).with_identity("typed").build()

    assert descriptor.job_type is SendReport


def test_tri_state_overrides():
    """Test that overrides are unset until pinned either way."""
    builder = JobDescriptorBuilder.create().with_identity("policy")

    assert builder.build().concurrent_execution_disallowed is TriState.UNSET

    pinned = builder.disallow_concurrent_execution().persist_job_data_after_execution(False).build()

    assert pinned.concurrent_execution_disallowed is TriState.TRUE
    assert pinned.persist_job_data_after_execution is TriState.FALSE


def test_using_job_data_values():
    """Test that job data values are stored natively with their kinds."""
    value = uuid.uuid4()
    descriptor = (
        JobDescriptorBuilder.create()
        .with_identity("data")
        .using_job_data("recipient", "ops@example.com")
        .using_job_data("attempts", 3)
        .using_job_data_long("bytes", 10)
        .using_job_data_float("ratio", 0.5)
        .using_job_data_double("precise", 0.1)
        .using_job_data_boolean("verbose", True)
        .using_job_data_string("format", "pdf")
        .using_job_data_uuid("run", value)
        .using_job_data_char("separator", ";")
        .using_job_data_int("limit", 100)
        .build()
    )
    data = descriptor.job_data

    assert data.get_string("recipient") == "ops@example.com"
    assert data.get_int_value("attempts") == 3
    assert data.kind_of("bytes") is ValueKind.LONG
    assert data.get_float_value("ratio") == 0.5
    assert data.get_double_value("precise") == 0.1
    assert data.get_boolean_value("verbose") is True
    assert data.get_uuid_value("run") == value
    assert data.get_char_value("separator") == ";"
    assert data.get_int_value("limit") == 100


def test_typed_job_data_validates_values():
    """Test that typed job data setters reject values of the wrong type."""
    with pytest.raises(TypeMismatchError):
        JobDescriptorBuilder.create().using_job_data_int("n", "five")  # type: ignore[arg-type]


def test_using_job_data_maps_merge():
    """Test that merged maps overwrite shared keys and keep the rest."""
    map_a = JobDataMap({"x": "from a", "only_a": 1})
    map_b = JobDataMap({"x": "from b", "only_b": 2})

    descriptor = JobDescriptorBuilder.create().with_identity("merge").using_job_data(map_a).using_job_data(map_b).build()

    assert descriptor.job_data == {"x": "from b", "only_a": 1, "only_b": 2}


def test_using_job_data_accepts_plain_mappings():
    """Test that a plain dict can be merged in."""
    descriptor = JobDescriptorBuilder.create().with_identity("dict").using_job_data({"n": 1}).build()

    assert descriptor.job_data.get_int_value("n") == 1


def test_set_job_data_replaces():
    """Test that set_job_data discards keys not in the new map."""
    map_a = JobDataMap({"x": "from a", "only_a": 1})
    map_b = JobDataMap({"x": "from b"})

    descriptor = JobDescriptorBuilder.create().with_identity("replace").using_job_data(map_a).set_job_data(map_b).build()

    assert descriptor.job_data == {"x": "from b"}


def test_set_job_data_keeps_a_private_copy():
    """Test that changing a map after handing it over does not affect the build."""
    job_data = JobDataMap({"x": 1})
    builder = JobDescriptorBuilder.create().with_identity("copy").set_job_data(job_data)

    job_data.put("x", 2)

    assert builder.build().job_data == {"x": 1}


def test_build_snapshots_job_data():
    """Test that later builder changes do not leak into built descriptors."""
    builder = JobDescriptorBuilder.create().with_identity("snapshot").using_job_data("x", 1)

    first = builder.build()
    builder.using_job_data("x", 2).using_job_data("y", 3)
    second = builder.build()

    assert first.job_data == {"x": 1}
    assert second.job_data == {"x": 2, "y": 3}
    assert first.job_data is not second.job_data


def test_built_job_data_starts_clean():
    """Test that a descriptor's map is not marked as changed."""
    descriptor = JobDescriptorBuilder.create().with_identity("clean").using_job_data("x", 1).build()

    assert descriptor.job_data.dirty is False


def test_descriptor_is_frozen():
    """Test that descriptors cannot be reassigned."""
    descriptor = JobDescriptorBuilder.create().with_identity("frozen").build()

    with pytest.raises(dataclasses.FrozenInstanceError):
        descriptor.durable = True  # type: ignore[misc]


def test_get_job_builder_reproduces_the_descriptor():
    """Test that a descriptor's builder builds an equal descriptor."""
    original = (
        JobDescriptorBuilder.create(SendReport)
        .with_identity("nightly", "reports")
        .with_description("Nightly report")
        .store_durably()
        .disallow_concurrent_execution()
        .using_job_data_long("bytes", 10)
        .build()
    )

    builder = original.get_job_builder()
    rebuilt = builder.build()

    assert rebuilt == original
    assert rebuilt.job_data is not original.job_data

    builder.using_job_data("extra", True)
    assert "extra" not in original.job_data


def test_generated_identity_is_logged(caplog, sequential_ids):
    """Test that a debug record is written when a name is generated."""
    caplog.set_level(logging.DEBUG, logger="jobkit.builder")

    JobDescriptorBuilder.create(id_generator=sequential_ids).build()

    assert "generated 'job-1'" in caplog.text
