"""Domain exceptions shared by the repository and import layers."""


class ValidationError(Exception):
    """Malformed caller input, detected before any I/O."""


class RepositoryError(Exception):
    """Failure at the persistence boundary.

    Carries the operation name so log lines and API errors say which call
    failed, plus the underlying storage exception when there is one.
    """

    def __init__(
        self, operation: str, message: str, original_exception: Exception = None
    ):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
        self.original_exception = original_exception


class NotFoundError(RepositoryError):
    """The referenced content, category or membership does not exist."""
