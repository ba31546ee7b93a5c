"""Core type definitions used throughout jobkit."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import TYPE_CHECKING, Any

from jobkit.constants import DEFAULT_GROUP
from jobkit.job_data_map import JobDataMap
from jobkit.scope import LocalScope, job_type_name
from jobkit.serialised import SerialisedJobDescriptor

if TYPE_CHECKING:
    from jobkit.builder import JobDescriptorBuilder

# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++ Job Key +++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++


@total_ordering
@dataclass(frozen=True, eq=True)
class JobKey:
    """Uniquely identifies a job within a scheduler, by name and group."""

    name: str
    group: str = DEFAULT_GROUP

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("A job key needs a non-empty name")
        if not self.group:
            # frozen, so bypass __setattr__
            object.__setattr__(self, "group", DEFAULT_GROUP)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, JobKey):
            return NotImplemented
        return (self.group, self.name) < (other.group, other.name)

    def __str__(self) -> str:
        return f"{self.group}.{self.name}"


# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++ Tri-state overrides +++++++++++++++++++++++
# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++


class TriState(str, Enum):
    """An execution policy that is either pinned, or left to whatever the
    job type declares."""

    # Not pinned; the scheduler resolves it from the job type's metadata
    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def of(cls, flag: bool | None) -> "TriState":
        if flag is None:
            return cls.UNSET
        return cls.TRUE if flag else cls.FALSE

    @property
    def is_set(self) -> bool:
        return self is not TriState.UNSET

    def resolve(self, default: bool | Callable[[], bool]) -> bool:
        """Get the pinned value, or fall back to a default.

        @param default: The value to use when unset. A callable is only
            invoked when needed, so it can wrap a metadata lookup
        @return: The effective value
        """

        if self is TriState.TRUE:
            return True
        if self is TriState.FALSE:
            return False

        return default() if callable(default) else default


# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++
# ++++++++++++++++++++++ Job Descriptor ++++++++++++++++++++++++++++
# ++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++++


@dataclass(frozen=True)
class JobDescriptor:
    """Everything a scheduler needs to know about a job, before it runs.

    Descriptors are produced by JobDescriptorBuilder.build() and are not
    changed afterwards. The job data map is the descriptor's own copy;
    schedulers that overlay trigger data should use `merge_job_data`,
    which builds a new map.
    """

    # The job's identity
    key: JobKey
    # The executable behaviour; opaque to jobkit
    job_type: Any = None
    # Human-readable description, if any
    description: str | None = None
    # Keep the job stored even when no trigger references it
    durable: bool = False
    # Re-run the job after a recovery or fail-over
    should_recover: bool = False
    # Data handed to the job at execution time
    job_data: JobDataMap = field(default_factory=JobDataMap, hash=False)
    # Disallow concurrent execution of jobs with this key
    concurrent_execution_disallowed: TriState = TriState.UNSET
    # Persist the job data after each execution
    persist_job_data_after_execution: TriState = TriState.UNSET

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def group(self) -> str:
        return self.key.group

    def get_job_builder(self) -> "JobDescriptorBuilder":
        """Get a builder pre-configured to produce a copy of this descriptor."""

        from jobkit.builder import JobDescriptorBuilder

        return JobDescriptorBuilder.from_descriptor(self)

    def save(self) -> SerialisedJobDescriptor:
        """Serialize the descriptor to a dictionary.

        @return: The serialized descriptor
        """

        return {
            "name": self.key.name,
            "group": self.key.group,
            "job_type": job_type_name(self.job_type) if self.job_type is not None else None,
            "description": self.description,
            "durable": self.durable,
            "should_recover": self.should_recover,
            "job_data": self.job_data.save(),
            "concurrent_execution_disallowed": self.concurrent_execution_disallowed.value,
            "persist_job_data_after_execution": self.persist_job_data_after_execution.value,
        }

    @classmethod
    def load(cls, scope: LocalScope, data: SerialisedJobDescriptor) -> "JobDescriptor":
        """Deserialize the descriptor from a dictionary.

        @param scope: Resolves the stored job type name to a job type
        @param data: The serialized descriptor data

        @return: The deserialized descriptor
        """

        stored_type = data["job_type"]

        return cls(
            key=JobKey(data["name"], data["group"]),
            job_type=scope.get_job_type(stored_type) if stored_type is not None else None,
            description=data["description"],
            durable=data["durable"],
            should_recover=data["should_recover"],
            job_data=JobDataMap.load(data["job_data"]),
            concurrent_execution_disallowed=TriState(data["concurrent_execution_disallowed"]),
            persist_job_data_after_execution=TriState(data["persist_job_data_after_execution"]),
        )
