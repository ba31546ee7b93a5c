"""Serialised (TypedDict) forms for job data maps and job descriptors.

These are the representations handed to stores by save/load round-trips.
They carry no runtime jobkit dependencies.
"""

from typing import Any, TypedDict


class SerialisedEntry(TypedDict):
    """One job data map entry. Typed values are held in their canonical
    string encoding; strings and opaque objects are held as-is."""

    key: str
    kind: str
    value: Any


class SerialisedJobDataMap(TypedDict):
    entries: list[SerialisedEntry]


class SerialisedJobDescriptor(TypedDict):
    """A stored job descriptor. The job type is stored by name, and
    resolved through a scope on load."""

    name: str
    group: str
    job_type: str | None
    description: str | None
    durable: bool
    should_recover: bool
    job_data: SerialisedJobDataMap
    concurrent_execution_disallowed: str
    persist_job_data_after_execution: str
