from typing import Any, Self

from jobkit.exception import JobTypeNotInScopeError, UnnamedJobTypeError


def job_type_name(job_type: Any) -> str:
    """Get the name a job type is registered and saved under.

    @param job_type: A class or function
    @return: Its __name__
    @raises UnnamedJobTypeError: If the job type has no __name__ (e.g. a
        string, a functools.partial, or an instance)
    """

    name = getattr(job_type, "__name__", None)
    if not isinstance(name, str) or not name:
        raise UnnamedJobTypeError(f"Job type {job_type!r} has no name and cannot be registered or saved")

    return name


class LocalScope:
    """A local translation layer between job type names and the job types
    themselves.

    Stores persist a descriptor's job type by name. To load it back, job
    types are explicitly registered with a scope; the alternative is
    registering at import-time, which is too side-effectful.
    """

    def __init__(self, job_types: list[Any] | None = None) -> None:
        self.job_types: dict[str, Any] = {}

        self.add_job_types(job_types or [])

    def add_job_type(self, job_type: Any) -> Self:
        """Add a job type to the scope.

        @param job_type: The job type to add.
        @raises UnnamedJobTypeError: If the job type has no name.
        """

        self.job_types[job_type_name(job_type)] = job_type
        return self

    def add_job_types(self, job_types: list[Any]) -> Self:
        """Add multiple job types to the scope.

        @param job_types: The job types to add.
        """

        for job_type in job_types:
            self.add_job_type(job_type)
        return self

    def get_job_type(self, type_name: str) -> Any:
        """Get a job type from the scope by name.

        @param type_name: The name of the job type to get.
        """

        if type_name not in self.job_types:
            raise JobTypeNotInScopeError(f"Job type '{type_name}' not found in scope. Did you register it?")

        return self.job_types[type_name]
