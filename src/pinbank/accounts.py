# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Account entity for PinBank.

An account holds its identity, owner name, PIN digest (with its salt) and a
balance in integer cents. The balance can only change through ``deposit`` and
``withdraw``, which keep the invariant ``balance_cents >= 0``.

Accounts are created by the ledger (``Account.open``) or rebuilt verbatim
from the store by the persistence layer; in the latter case the stored salt
and digest are used as-is and no PIN is re-hashed.
"""

from dataclasses import dataclass, field

from .auth import PinAuthenticator, Sha256PinAuthenticator, validate_pin
from .errors import AuthFailed, InsufficientFunds, InvalidAmount


@dataclass
class Account:
    """A PIN-protected account with a non-negative balance in cents."""

    id: int
    owner: str
    salt: int
    pin_digest: str
    balance_cents: int = 0
    authenticator: PinAuthenticator = field(
        default_factory=Sha256PinAuthenticator, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.balance_cents < 0:
            raise InvalidAmount(
                f"Account {self.id} cannot hold a negative balance "
                f"({self.balance_cents} cents)."
            )

    @classmethod
    def open(
        cls,
        account_id: int,
        owner: str,
        pin: str,
        authenticator: PinAuthenticator,
    ) -> "Account":
        """Create a brand-new account with a fresh salt and a zero balance.

        Raises:
            InvalidPin: if ``pin`` is not 4-12 digits.
        """
        account = cls(
            id=account_id,
            owner=owner,
            salt=authenticator.issue_salt(),
            pin_digest="",
            authenticator=authenticator,
        )
        account.set_pin(pin)
        return account

    def deposit(self, cents: int) -> int:
        """Add ``cents`` to the balance and return the new balance."""
        if cents <= 0:
            raise InvalidAmount("Deposit must be positive.")
        self.balance_cents += cents
        return self.balance_cents

    def withdraw(self, cents: int) -> int:
        """Remove ``cents`` from the balance and return the new balance."""
        if cents <= 0:
            raise InvalidAmount("Withdrawal must be positive.")
        if cents > self.balance_cents:
            raise InsufficientFunds("Insufficient funds.")
        self.balance_cents -= cents
        return self.balance_cents

    def set_pin(self, pin: str) -> None:
        """Replace the PIN digest; the salt is kept."""
        validate_pin(pin)
        self.pin_digest = self.authenticator.digest(pin, self.salt)

    def verify_pin(self, pin: str) -> bool:
        return self.authenticator.verify(pin, self.salt, self.pin_digest)

    def change_pin(self, old_pin: str, new_pin: str) -> None:
        """Set a new PIN after checking the current one.

        Raises:
            AuthFailed: if ``old_pin`` does not match.
            InvalidPin: if ``new_pin`` is not 4-12 digits.
        """
        if not self.verify_pin(old_pin):
            raise AuthFailed("Authentication failed. Check ID/PIN.")
        self.set_pin(new_pin)
