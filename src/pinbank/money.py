# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Money helpers for PinBank.

All balances are stored as signed integer cents. This module converts between
that representation and the decimal text typed or read by users.

Accepted input (``parse_amount``)
---------------------------------
    [-][$]DIGITS[.DIGITS]

- leading/trailing whitespace is ignored,
- the integer part may be omitted (".5" is 50 cents),
- the fractional part may be omitted or empty ("12" and "12." are 1200 cents),
- fractional digits beyond the second are truncated, never rounded
  ("12.345" is 1234 cents),
- the sign applies to the whole amount ("-0.50" is -50 cents),
- the optional "$" makes every ``format_amount`` output parse back.

Output (``format_amount``)
--------------------------
    [-]$D.CC

where D has no leading zeros and CC is always two digits. Zero is "$0.00".
"""

import re

from .errors import ParseError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Longest dollar part that can still fit in a signed 64-bit cents value.
_MAX_DOLLAR_DIGITS = len(str(INT64_MAX // 100)) + 1

_AMOUNT_RE = re.compile(
    r"(?P<sign>-)?\$?(?P<dollars>[0-9]*)(?:\.(?P<fraction>[0-9]*))?"
)


def parse_amount(text: str) -> int:
    """Parse a decimal amount string into signed integer cents.

    Args:
        text: Amount as typed by a user, e.g. "100", "12.34", " -0.5 ".

    Returns:
        The amount in cents.

    Raises:
        ParseError: if the text is empty, is not a plain decimal number or
            does not fit in a signed 64-bit integer.
    """
    cleaned = text.strip()
    if not cleaned:
        raise ParseError("Empty amount.")

    match = _AMOUNT_RE.fullmatch(cleaned)
    if match is None:
        raise ParseError(
            f"Invalid amount {text!r}: expected digits with an optional '.'."
        )

    dollars = match.group("dollars")
    fraction = match.group("fraction") or ""
    if not dollars and not fraction:
        raise ParseError(f"Invalid amount {text!r}: no digits.")

    dollars = dollars.lstrip("0")
    if len(dollars) > _MAX_DOLLAR_DIGITS:
        raise ParseError(f"Amount {text!r} is too large.")

    cents = int(fraction[:2].ljust(2, "0"))
    magnitude = int(dollars or "0") * 100 + cents
    value = -magnitude if match.group("sign") else magnitude

    if not INT64_MIN <= value <= INT64_MAX:
        raise ParseError(f"Amount {text!r} is too large.")
    return value


def format_amount(cents: int) -> str:
    """Format integer cents as ``[-]$D.CC``."""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}${dollars}.{remainder:02d}"
