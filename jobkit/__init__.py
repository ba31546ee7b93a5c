from jobkit.base_types import JobDescriptor, JobKey, TriState
from jobkit.builder import JobDescriptorBuilder
from jobkit.exception import (
    FormatError,
    IdentityConflictError,
    JobkitError,
    MissingKeyError,
    TypeMismatchError,
)
from jobkit.job_data_map import JobDataMap, merge_job_data
from jobkit.scope import LocalScope
from jobkit.values import DataValue, ValueKind

__version__ = "0.1.0"

__all__ = [
    "DataValue",
    "FormatError",
    "IdentityConflictError",
    "JobDataMap",
    "JobDescriptor",
    "JobDescriptorBuilder",
    "JobKey",
    "JobkitError",
    "LocalScope",
    "MissingKeyError",
    "TriState",
    "TypeMismatchError",
    "ValueKind",
    "merge_job_data",
]
