"""Pure code formatting rules.

Nothing here touches the database. Sequence numbers are resolved by the
allocator and passed in.

Layouts:
    dedicated number:  <Initial><NN>                      e.g. G03
    contract code:     <Category><YY><DedicatedNumber><NN> e.g. MS25G0103
"""

from string import ascii_uppercase

FALLBACK_INITIAL = "X"
SEQUENCE_WIDTH = 2


def name_initial(name: str | None) -> str:
    """Return the uppercase ASCII initial of a name, or "X" if there is none.

    >>> name_initial("Global Tech Inc.")
    'G'
    >>> name_initial("123 Corp")
    'X'
    """
    if not name:
        return FALLBACK_INITIAL
    initial = name[0].upper()
    # upper() may expand one character into several ("ß" -> "SS")
    if len(initial) == 1 and initial in ascii_uppercase:
        return initial
    return FALLBACK_INITIAL


def year_token(year: int) -> str:
    """Two-digit year, e.g. 2025 -> "25"."""
    return f"{year % 100:02d}"


def contract_prefix(code: str, year: int, dedicated_number: str) -> str:
    """Non-sequence part of a contract code: category code + YY + parent code."""
    return f"{code}{year_token(year)}{dedicated_number}"


def format_sequence(prefix: str, sequence: int) -> str:
    """Append a zero-padded sequence number to a prefix.

    Numbers past 99 widen instead of wrapping.
    """
    if sequence < 1:
        raise ValueError(f"Sequence numbers start at 1, got {sequence}")
    return f"{prefix}{sequence:0{SEQUENCE_WIDTH}d}"
