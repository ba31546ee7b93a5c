"""Exceptions used throughout jobkit."""


class JobkitError(Exception):
    """Base exception for jobkit-related errors."""


class JobDataError(JobkitError):
    """A value could not be read from a job data map."""


class MissingKeyError(JobDataError, KeyError):
    """The requested key is not present in the job data map."""

    def __str__(self) -> str:
        # KeyError repr()s its argument; we want the message as written.
        return str(self.args[0]) if self.args else ""


class FormatError(JobDataError, ValueError):
    """A string-stored value could not be parsed into the requested type."""


class TypeMismatchError(JobDataError, TypeError):
    """A natively-stored value does not have the requested type."""


class IdentityConflictError(JobkitError):
    """A job descriptor's key collides with one already registered.

    Raised by schedulers and stores, never by jobkit itself.
    """


class NotInScopeError(JobkitError):
    """A type was not found in the current scope."""


class JobTypeNotInScopeError(NotInScopeError):
    """A job type was not found in the current scope."""


class UnnamedJobTypeError(NotInScopeError):
    """A job type has no name, so it cannot be registered or saved."""
