"""A fluent builder for job descriptors.

    descriptor = (
        JobDescriptorBuilder.create(SendReport)
        .with_identity("nightly-report", "reports")
        .using_job_data("recipient", "ops@example.com")
        .store_durably()
        .build()
    )

Every configuration method changes the builder and returns it. `build()`
snapshots the builder into an immutable JobDescriptor; the builder can be
reconfigured and built again afterwards.
"""

import uuid
from collections.abc import Callable, Mapping
from typing import Any, Self, overload

from jobkit.base_types import JobDescriptor, JobKey, TriState
from jobkit.constants import DEFAULT_GROUP
from jobkit.job_data_map import JobDataMap
from jobkit.utils.id_generator import generate_id
from jobkit.utils.logging_config import get_logger

log = get_logger(__name__)


class JobDescriptorBuilder:
    """Accumulates a job's identity, metadata and data."""

    def __init__(self, job_type: Any = None, id_generator: Callable[[], str] = generate_id) -> None:
        self._job_type = job_type
        # Supplies names for jobs built without an explicit identity
        self._id_generator = id_generator

        self._name: str | None = None
        self._group: str | None = None
        self._description: str | None = None
        self._durable = False
        self._should_recover = False
        # Created on first use
        self._job_data: JobDataMap | None = None
        self._concurrent_execution_disallowed = TriState.UNSET
        self._persist_job_data_after_execution = TriState.UNSET

    @classmethod
    def create(cls, job_type: Any = None, id_generator: Callable[[], str] = generate_id) -> Self:
        """Create a builder for jobs of the given type.

        @param job_type: The executable behaviour the job will run
        @param id_generator: Supplies job names when no identity is set
        """

        return cls(job_type, id_generator)

    @classmethod
    def from_descriptor(cls, descriptor: JobDescriptor) -> Self:
        """Create a builder that reproduces an existing descriptor."""

        builder = cls(descriptor.job_type)
        builder._name = descriptor.key.name
        builder._group = descriptor.key.group
        builder._description = descriptor.description
        builder._durable = descriptor.durable
        builder._should_recover = descriptor.should_recover
        builder._job_data = descriptor.job_data.copy()
        builder._concurrent_execution_disallowed = descriptor.concurrent_execution_disallowed
        builder._persist_job_data_after_execution = descriptor.persist_job_data_after_execution

        return builder

    def of_type(self, job_type: Any) -> Self:
        """Set the executable behaviour the job will run."""

        self._job_type = job_type
        return self

    # ++++++++++++++++++++++ Identity and metadata +++++++++++++++

    def with_identity(self, name: str | JobKey | None, group: str | None = None) -> Self:
        """Set the job's name and group.

        An empty or missing name is replaced by a generated one at build
        time; an empty or missing group becomes the default group.

        @param name: The job name, or a complete JobKey
        @param group: The job group; ignored when a JobKey is given
        """

        if isinstance(name, JobKey):
            self._name = name.name
            self._group = name.group
        else:
            self._name = name
            self._group = group

        return self

    def with_description(self, description: str | None) -> Self:
        """Set the job's description. None clears it."""

        self._description = description
        return self

    def request_recovery(self, should_recover: bool = True) -> Self:
        """Re-run the job after a recovery or fail-over."""

        self._should_recover = should_recover
        return self

    def store_durably(self, durable: bool = True) -> Self:
        """Keep the job stored even when no trigger references it."""

        self._durable = durable
        return self

    def disallow_concurrent_execution(self, concurrent_execution_disallowed: bool = True) -> Self:
        """Pin whether jobs with this key may run concurrently. If never
        called, the scheduler uses the job type's own declaration."""

        self._concurrent_execution_disallowed = TriState.of(concurrent_execution_disallowed)
        return self

    def persist_job_data_after_execution(self, persist_job_data_after_execution: bool = True) -> Self:
        """Pin whether job data is written back after each execution. If
        never called, the scheduler uses the job type's own declaration."""

        self._persist_job_data_after_execution = TriState.of(persist_job_data_after_execution)
        return self

    # ++++++++++++++++++++++ Job data ++++++++++++++++++++++++++++

    def _working_job_data(self) -> JobDataMap:
        if self._job_data is None:
            self._job_data = JobDataMap()
        return self._job_data

    @overload
    def using_job_data(self, key: str, value: Any) -> Self: ...
    @overload
    def using_job_data(self, key: Mapping[str, Any]) -> Self: ...

    def using_job_data(self, key: str | Mapping[str, Any], value: Any = None) -> Self:
        """Add job data.

        With a key and a value, stores the value natively with its inferred
        kind. With a mapping, merges its entries into the job data,
        overwriting existing keys and leaving the others alone.
        """

        if isinstance(key, Mapping):
            self._working_job_data().put_all(key)
        else:
            self._working_job_data().put(key, value)

        return self

    def using_job_data_string(self, key: str, value: str) -> Self:
        self._working_job_data().put_string(key, value)
        return self

    def using_job_data_int(self, key: str, value: int) -> Self:
        self._working_job_data().put_int(key, value)
        return self

    def using_job_data_long(self, key: str, value: int) -> Self:
        self._working_job_data().put_long(key, value)
        return self

    def using_job_data_float(self, key: str, value: float) -> Self:
        self._working_job_data().put_float(key, value)
        return self

    def using_job_data_double(self, key: str, value: float) -> Self:
        self._working_job_data().put_double(key, value)
        return self

    def using_job_data_boolean(self, key: str, value: bool) -> Self:
        self._working_job_data().put_boolean(key, value)
        return self

    def using_job_data_uuid(self, key: str, value: uuid.UUID) -> Self:
        self._working_job_data().put_uuid(key, value)
        return self

    def using_job_data_char(self, key: str, value: str) -> Self:
        self._working_job_data().put_char(key, value)
        return self

    def set_job_data(self, job_data: Mapping[str, Any] | None) -> Self:
        """Replace the job data wholesale, discarding anything added so far.

        The builder keeps its own copy, so later changes to `job_data` are
        not seen.
        """

        log.debug("Replacing job data for job '%s'", self._name)
        self._job_data = JobDataMap(job_data) if job_data is not None else None
        return self

    # ++++++++++++++++++++++ Build +++++++++++++++++++++++++++++++

    def build(self) -> JobDescriptor:
        """Produce a descriptor from the current configuration.

        The descriptor gets its own copy of the job data. If no name was
        set, one is generated.

        @return: The job descriptor
        """

        name = self._name
        if not name:
            name = self._id_generator()
            log.debug("No job name set; generated '%s'", name)

        job_data = self._job_data.copy() if self._job_data is not None else JobDataMap()

        return JobDescriptor(
            key=JobKey(name, self._group or DEFAULT_GROUP),
            job_type=self._job_type,
            description=self._description,
            durable=self._durable,
            should_recover=self._should_recover,
            job_data=job_data,
            concurrent_execution_disallowed=self._concurrent_execution_disallowed,
            persist_job_data_after_execution=self._persist_job_data_after_execution,
        )
