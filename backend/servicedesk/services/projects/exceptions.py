"""Project domain exceptions."""

from servicedesk.services.exceptions import NotFoundError, ValidationError


class ProjectNotFound(NotFoundError):
    """Project not found."""

    pass


class InvalidProjectReference(ValidationError):
    """Referenced client or user does not exist."""

    pass
