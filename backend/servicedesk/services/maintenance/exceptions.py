"""Maintenance record domain exceptions."""

from servicedesk.services.exceptions import NotFoundError, ValidationError


class MaintenanceRecordNotFound(NotFoundError):
    """Maintenance record not found."""

    pass


class InvalidMaintenanceRecord(ValidationError):
    """Record fails a field, reference or status requirement.

    The message lists every problem found, separated by "; ".
    """

    pass
