"""Discriminated union error types for repobot operations.

Operations return ``Success | <Error>`` instead of raising or returning None,
so callers must narrow the result before using it. Every error type carries a
user-facing ``message`` and a stable ``error_type`` string.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from repobot.gateway.github.types import GitHubApiError


@runtime_checkable
class NonIdealState(Protocol):
    """Structural type shared by all error results."""

    @property
    def message(self) -> str: ...

    @property
    def error_type(self) -> str: ...


@dataclass(frozen=True)
class MissingArgument:
    """A required input was not provided. Implements NonIdealState."""

    message: str

    @property
    def error_type(self) -> str:
        return "missing-argument"


@dataclass(frozen=True)
class FileKindNotImplemented:
    """The requested kind of file cannot be added yet. Implements NonIdealState."""

    message: str

    @property
    def error_type(self) -> str:
        return "not-implemented"


@dataclass(frozen=True)
class InvalidLicense:
    """License id is not a recognized SPDX identifier. Implements NonIdealState."""

    license_id: str

    @property
    def message(self) -> str:
        return (
            f"LicenseError: {self.license_id} is not a valid SPDX license code.\n"
            "See: https://spdx.org/licenses/ for the list of accepted ids"
        )

    @property
    def error_type(self) -> str:
        return "invalid-license"


@dataclass(frozen=True)
class RemoteError:
    """A GitHub API call failed. Implements NonIdealState."""

    operation: str
    status: int
    name: str
    detail: str

    @classmethod
    def from_api_error(cls, operation: str, error: GitHubApiError) -> "RemoteError":
        return cls(operation=operation, status=error.status, name=error.name, detail=error.message)

    @property
    def message(self) -> str:
        return (
            f"{self.operation} failed; name: {self.name}, "
            f"status: {self.status}, msg: {self.detail}"
        )

    @property
    def error_type(self) -> str:
        return "remote-error"


@dataclass(frozen=True)
class ConflictExhausted:
    """Ref kept conflicting after every delete-and-retry. Implements NonIdealState."""

    ref: str
    attempts: int

    @property
    def message(self) -> str:
        return f"{self.ref} still exists after {self.attempts} create attempts"

    @property
    def error_type(self) -> str:
        return "conflict-exhausted"


class ObjectGraphWriteAborted(Exception):
    """A tree could not be created; the run must stop rather than continue.

    This is the one failure that is raised instead of returned: continuing
    after a failed tree write would build commits on a broken object graph.
    """

    def __init__(self, error: RemoteError) -> None:
        super().__init__(error.message)
        self.error = error
