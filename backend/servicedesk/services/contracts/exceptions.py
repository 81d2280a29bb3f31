"""Contract domain exceptions."""

from servicedesk.services.exceptions import NotFoundError, ValidationError


class ContractNotFound(NotFoundError):
    """Contract not found."""

    pass


class InvalidContractDates(ValidationError):
    """End date is not after the start date."""

    pass


class InvalidReference(ValidationError):
    """Referenced client, user or project does not exist."""

    pass
