"""Deterministic code allocation for clients and contracts."""

from servicedesk.services.codes.allocator import CodeAllocator
from servicedesk.services.codes.categories import CATEGORY_CODES, category_code
from servicedesk.services.codes.exceptions import CodeAllocationExhausted, CodeAllocationFailed, UnknownCategory
from servicedesk.services.codes.formatting import contract_prefix, format_sequence, name_initial, year_token

__all__ = [
    "CATEGORY_CODES",
    "CodeAllocationExhausted",
    "CodeAllocationFailed",
    "CodeAllocator",
    "UnknownCategory",
    "category_code",
    "contract_prefix",
    "format_sequence",
    "name_initial",
    "year_token",
]
