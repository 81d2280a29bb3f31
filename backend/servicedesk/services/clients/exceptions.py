"""Client domain exceptions."""

from servicedesk.services.exceptions import NotFoundError, ValidationError


class ClientNotFound(NotFoundError):
    """Client not found."""

    pass


class ClientInUse(ValidationError):
    """Client is still referenced by contracts, projects or maintenance records."""

    pass
