class GradebookError(Exception):
    """Base class for gradebook store errors."""


class ValidationError(GradebookError):
    """Raised when user-supplied input is rejected."""


class SubjectLimitReached(GradebookError):
    """Raised when adding a subject would exceed the subject cap."""


class SubjectNotFound(GradebookError, KeyError):
    """Raised when no subject has the requested id."""


class AssignmentNotFound(GradebookError, KeyError):
    """Raised when a subject has no assignment with the requested id."""
