# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Error kinds raised by the PinBank ledger core.

Every failure surfaced by the core is a subclass of ``LedgerError`` and
carries a stable ``kind`` identifier, so that user-facing layers (CLI,
interactive menu) can catch a single base class and still report the
precise reason.

Hierarchy
---------
- LedgerError
    - InvalidAmount          non-positive amount
        - ParseError         unparsable or out-of-range amount text
    - InvalidPin             PIN format violation (4-12 digits)
    - InsufficientFunds      withdrawal larger than the balance
    - AuthFailed             unknown id or wrong PIN (merged on purpose)
    - NotFound               lookup by id with no match
    - StoreError             store unreadable/unwritable at path level
    - MalformedRecord        a persisted line that cannot be decoded
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger-core failures."""

    kind = "ledger_error"


class InvalidAmount(LedgerError):
    kind = "invalid_amount"


class ParseError(InvalidAmount):
    kind = "parse_error"


class InvalidPin(LedgerError):
    kind = "invalid_pin"


class InsufficientFunds(LedgerError):
    kind = "insufficient_funds"


class AuthFailed(LedgerError):
    kind = "auth_failed"


class NotFound(LedgerError):
    kind = "not_found"


class StoreError(LedgerError):
    kind = "store_error"


class MalformedRecord(LedgerError):
    """A store line that cannot be decoded into an Account.

    Attributes:
        line_number: 1-based position of the line in the store, if known.
        line: Raw line content (without the trailing newline).
        reason: Short human-readable description of the problem.
    """

    kind = "malformed_record"

    def __init__(
        self, reason: str, line: str = "", line_number: Optional[int] = None
    ) -> None:
        self.reason = reason
        self.line = line
        self.line_number = line_number
        if line_number is None:
            super().__init__(f"Malformed record: {reason}")
        else:
            super().__init__(f"Malformed record at line {line_number}: {reason}")
