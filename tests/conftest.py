"""Pytest configuration and fixtures"""

import itertools
import uuid

import pytest

from jobkit.job_data_map import JobDataMap


@pytest.fixture
def loaded_map():
    """Provide a map built from an existing collection, as a store would load it."""
    return JobDataMap({"name": "report", "retries": 3, "ratio": 0.25, "enabled": True})


@pytest.fixture
def sample_uuid():
    return uuid.UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def sequential_ids():
    """Provide a deterministic identity generator: job-1, job-2, ..."""
    counter = itertools.count(1)
    return lambda: f"job-{next(counter)}"
