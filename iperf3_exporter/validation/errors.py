"""Validation error types."""

from typing import List, Optional


class ValidationError(Exception):
    """A validation error for a specific request field."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class MultiError(Exception):
    """
    Several validation errors collected in one pass.

    Request parsing keeps going after the first bad field so the caller
    sees every problem in a single response.
    """

    def __init__(self, errors: Optional[List[ValidationError]] = None):
        self.errors: List[ValidationError] = list(errors or [])
        super().__init__()

    def add_error(self, field: str, message: str) -> None:
        """Record a new error for field."""
        self.errors.append(ValidationError(field, message))

    def append(self, error: ValidationError) -> None:
        """Record an already-built ValidationError."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def fields(self) -> List[str]:
        """Names of the fields that failed, in the order they were checked."""
        return [error.field for error in self.errors]

    def __str__(self) -> str:
        if len(self.errors) == 1:
            return str(self.errors[0])

        msg = "multiple validation errors:"
        for error in self.errors:
            msg += f"\n- {error}"
        return msg


class ResolutionError(Exception):
    """
    A value supplied by the scrape infrastructure could not be resolved.

    Unlike ValidationError this is reported as a server-side failure, since
    the end caller does not control it.
    """
