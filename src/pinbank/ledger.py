# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Ledger aggregate for PinBank.

The Ledger owns every Account and the id counter. It is a plain object that
callers create and pass around explicitly (there is no module-level bank), so
several ledgers can live side by side, for example in tests.

Responsibilities
----------------
- assign strictly increasing account ids starting at a base value (1001),
- look accounts up by exact id,
- authenticate (id, PIN) pairs without revealing which part was wrong,
- list accounts in storage order,
- load itself from / save itself to the flat-text store (see storage.py).

Balances are changed on the Account returned by ``authenticate``; the ledger
does not wrap deposit/withdraw.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional, Union

import pandas as pd

from .accounts import Account
from .auth import PinAuthenticator, Sha256PinAuthenticator
from .errors import AuthFailed, MalformedRecord, NotFound
from .storage import DEFAULT_BASE_ID, MalformedPolicy, load_accounts, save_accounts
from .views import accounts_to_dataframe

logger = logging.getLogger(__name__)

AUTH_FAILED_MESSAGE = "Authentication failed. Check ID/PIN."


@dataclass(frozen=True)
class AccountSummary:
    """Read-only snapshot of an account, safe to hand to display layers."""

    id: int
    owner: str
    balance_cents: int


class Ledger:
    """Collection of accounts keyed by id, with the id counter."""

    def __init__(
        self,
        authenticator: Optional[PinAuthenticator] = None,
        base_id: int = DEFAULT_BASE_ID,
        accounts: Iterable[Account] = (),
        next_id: Optional[int] = None,
    ) -> None:
        self.authenticator = authenticator or Sha256PinAuthenticator()
        self.base_id = base_id
        self._accounts: dict[int, Account] = {}
        for account in accounts:
            if account.id in self._accounts:
                raise ValueError(f"Duplicate account id {account.id}.")
            self._accounts[account.id] = account

        floor = max(self._accounts, default=base_id - 1) + 1
        self.next_id = floor if next_id is None else max(next_id, floor)
        self.skipped_records: list[MalformedRecord] = []

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._accounts

    def __iter__(self) -> Iterator[Account]:
        return iter(self._accounts.values())

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, owner: str, pin: str) -> int:
        """Open a new account and return its id.

        The PIN is validated before any id is consumed, so a rejected PIN
        leaves ``next_id`` unchanged.

        Raises:
            InvalidPin: if ``pin`` is not 4-12 digits.
        """
        account = Account.open(self.next_id, owner, pin, self.authenticator)
        self._accounts[account.id] = account
        self.next_id += 1
        logger.info("Created account %d", account.id)
        return account.id

    def find_by_id(self, account_id: int) -> Account:
        """Return the account with exactly this id.

        Raises:
            NotFound: if no account has this id.
        """
        try:
            return self._accounts[account_id]
        except KeyError:
            raise NotFound(f"Account {account_id} not found.") from None

    def authenticate(self, account_id: int, pin: str) -> Account:
        """Return the account if ``pin`` matches it.

        Unknown ids and wrong PINs raise the same error with the same
        message.

        Raises:
            AuthFailed: if the id is unknown or the PIN does not match.
        """
        account = self._accounts.get(account_id)
        if account is None or not account.verify_pin(pin):
            raise AuthFailed(AUTH_FAILED_MESSAGE)
        return account

    def list_accounts(self) -> list[AccountSummary]:
        """Snapshot of (id, owner, balance_cents) in storage order."""
        return [
            AccountSummary(id=a.id, owner=a.owner, balance_cents=a.balance_cents)
            for a in self._accounts.values()
        ]

    def accounts_to_dataframe(self) -> pd.DataFrame:
        return accounts_to_dataframe(self.list_accounts())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        path: Union[str, os.PathLike],
        authenticator: Optional[PinAuthenticator] = None,
        malformed_policy: MalformedPolicy = "skip",
        base_id: int = DEFAULT_BASE_ID,
    ) -> "Ledger":
        """Build a ledger from the store at ``path``.

        A missing store yields an empty ledger. Lines skipped under the
        "skip" policy are kept in ``skipped_records``.

        Raises:
            MalformedRecord: on the first malformed line with policy "abort".
        """
        authenticator = authenticator or Sha256PinAuthenticator()
        result = load_accounts(
            path,
            authenticator,
            malformed_policy=malformed_policy,
            base_id=base_id,
        )
        ledger = cls(
            authenticator=authenticator,
            base_id=base_id,
            accounts=result.accounts,
            next_id=result.next_id,
        )
        ledger.skipped_records = list(result.skipped)
        return ledger

    def save(self, path: Union[str, os.PathLike]) -> int:
        """Write every account to ``path`` and return the record count.

        Raises:
            StoreError: if the store cannot be written.
        """
        return save_accounts(self._accounts.values(), path)
