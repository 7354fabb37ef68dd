from __future__ import annotations


class ValidationError(ValueError):
    """A precondition failed; nothing was written."""


class MissingSelectionError(ValidationError):
    pass


class UnknownScholarTypeError(ValidationError):
    pass


class VacancyError(ValidationError):
    pass


class AlreadyAssignedError(ValidationError):
    pass


class AlreadyForwardedError(ValidationError):
    pass


class RecordNotFoundError(ValidationError):
    pass


class DuplicateRecordsError(ValidationError):
    """Forwarding is blocked while application numbers, emails or phones repeat."""
