"""Error taxonomy shared by the repository, services and HTTP layer."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    VALIDATION = "VALIDATION_ERROR"
    INTERNAL = "INTERNAL_ERROR"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION: 400,
    ErrorKind.INTERNAL: 500,
}


class ProblemsError(Exception):
    """Base error; handlers dispatch on ``kind``, never on the message."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return self.kind.status_code


class ProblemNotFoundError(ProblemsError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, problem_id: str) -> None:
        super().__init__("Problem not found", problem_id=problem_id)
        self.problem_id = problem_id


class FilterValidationError(ProblemsError):
    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message, field=field)
        self.field = field
