class RepositoryError(Exception):
    """Base exception for repository-level errors."""


class SavedResponseNotFoundError(RepositoryError):
    """Raised when a saved response does not exist for the requesting user."""
