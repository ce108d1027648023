"""Exception types shared across Job-Trail."""


class JobTrailError(Exception):
    """Base class for Job-Trail errors."""


class ValidationError(JobTrailError):
    """Raised when caller-supplied data is invalid (bad enum, malformed date)."""


class DuplicateApplicationError(ValidationError):
    """Raised when (user, company, role, date applied) already exists."""

    def __init__(
        self,
        message: str = (
            "Duplicate application: You already applied to this role "
            "at this company on this date"
        ),
    ):
        super().__init__(message)


class NotFoundError(JobTrailError):
    """Raised when an entity or log entry does not exist for the caller."""


class StoreUnavailable(JobTrailError):
    """Raised when the underlying store cannot serve a request."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error
