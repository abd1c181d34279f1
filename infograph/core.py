"""Core types used across all modules: Result containers and the error taxonomy."""

from enum import StrEnum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class Diag(BaseModel):
    """A structured diagnostic message."""

    severity: Severity
    code: str
    message: str
    hint: str | None = None


class Result(BaseModel, Generic[T]):  # noqa: UP046 (Pydantic generic models subclass Generic[T])
    """Result container that pairs output with diagnostics.

    Collaborators at the edge (content fetchers) return a Result instead of
    raising, so a failed fetch reads the same as any other outcome.
    """

    data: T | None = None
    diagnostics: list[Diag] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    @property
    def ok(self) -> bool:
        return not self.has_errors

    def error(self, code: str, message: str, *, hint: str | None = None) -> None:
        self.diagnostics.append(Diag(severity=Severity.ERROR, code=code, message=message, hint=hint))

    def warning(self, code: str, message: str, *, hint: str | None = None) -> None:
        self.diagnostics.append(Diag(severity=Severity.WARNING, code=code, message=message, hint=hint))

    def first_error(self) -> Diag | None:
        for d in self.diagnostics:
            if d.severity == Severity.ERROR:
                return d
        return None


class InfographError(Exception):
    """Base error for every failure the core reports to its callers."""

    code = "ERROR"

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def to_diag(self) -> Diag:
        return Diag(severity=Severity.ERROR, code=self.code, message=self.message, hint=self.hint)


class ValidationError(InfographError):
    """Rejected input: blank name, blank content, malformed URL."""

    code = "VALIDATION"


class NotFoundError(InfographError):
    code = "NOT_FOUND"


class StorageError(InfographError):
    """The persistence layer failed to open, read or write a record."""

    code = "STORAGE_ERROR"


class NoSourcesError(InfographError):
    """An infographic was requested for a notebook without sources."""

    code = "NO_SOURCES"


class FetchError(InfographError):
    code = "FETCH_ERROR"
