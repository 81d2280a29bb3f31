"""User domain exceptions."""

from servicedesk.services.exceptions import NotFoundError, ValidationError


class UserNotFound(NotFoundError):
    """User not found."""

    pass


class UsernameTaken(ValidationError):
    """Username already exists."""

    pass
