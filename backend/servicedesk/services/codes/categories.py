"""Contract category labels and their fixed 2-letter codes."""

from types import MappingProxyType

from servicedesk.services.codes.exceptions import UnknownCategory

CATEGORY_CODES = MappingProxyType(
    {
        "SVR": "MS",  # Server maintenance
        "NET": "MN",  # Network maintenance
        "STO": "MT",  # Storage maintenance
        "SEC": "MC",  # Security systems maintenance
        "SW": "MW",  # Software maintenance
        "HW": "MH",  # Hardware maintenance
    }
)


def category_code(category: str | None) -> str:
    """Return the 2-letter code for a category label.

    Raises:
        UnknownCategory: label is empty or not recognized
    """
    label = category.strip() if isinstance(category, str) else ""
    try:
        return CATEGORY_CODES[label]
    except KeyError:
        raise UnknownCategory(category) from None
