"""Code allocation exceptions."""

from servicedesk.services.exceptions import ServiceError, ValidationError


class UnknownCategory(ValidationError):
    """Category label is not in the recognized set."""

    def __init__(self, category: str | None):
        self.category = category
        super().__init__(f"Unknown contract category: {category!r}")


class CodeAllocationExhausted(ServiceError):
    """Every attempt collided with a concurrently committed code.

    Retryable by the caller: the whole request may be repeated later.
    """

    def __init__(self, prefix: str, attempts: int):
        self.prefix = prefix
        self.attempts = attempts
        super().__init__(f"Failed to allocate a unique code for prefix {prefix!r} after {attempts} attempts")


class CodeAllocationFailed(ServiceError):
    """Store error unrelated to the allocated code's uniqueness. Never retried.

    The original store error is available as ``__cause__``.
    """

    def __init__(self, prefix: str, reason: str):
        self.prefix = prefix
        self.reason = reason
        super().__init__(f"Code allocation for prefix {prefix!r} failed: {reason}")
