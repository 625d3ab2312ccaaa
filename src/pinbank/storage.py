# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
Persistence layer for PinBank.

Accounts are stored in a flat UTF-8 text file, one account per line, with
five tab-separated fields in a fixed order:

    id <TAB> owner <TAB> salt <TAB> pin_digest <TAB> balance_cents

- ``id``:            decimal integer (> 0)
- ``owner``:         free text, control characters replaced by a space
- ``salt``:          16-digit lowercase hexadecimal integer
- ``pin_digest``:    lowercase hexadecimal digest
- ``balance_cents``: decimal integer (>= 0)

------------------------------------------------------------------------------
Saving
------------------------------------------------------------------------------

``save_accounts`` always replaces the whole file (never appends). Records are
written to a temporary sibling file which is then moved onto the destination,
so an interrupted save leaves the previous store untouched.

------------------------------------------------------------------------------
Loading
------------------------------------------------------------------------------

``load_accounts`` is tolerant at the file level and explicit at the line
level:

1) A missing or unreadable store is not an error: the result is empty and
   ``next_id`` is the ledger base id.

2) Each non-blank line is decoded into a ``DecodeResult``, which carries
   either an Account or a MalformedRecord, never both. Salt, digest and
   balance are taken verbatim (no PIN re-hashing). A line that is not
   valid UTF-8 is malformed.

3) The aggregate policy for malformed lines is explicit:
   - ``"skip"``:  the line is logged, recorded in ``LoadResult.skipped``
     and loading continues,
   - ``"abort"``: the first MalformedRecord is raised.
   A line repeating an id that was already loaded counts as malformed.

4) ``next_id`` is ``max(id) + 1`` over loaded accounts, or the base id when
   nothing was loaded.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, Union

from .accounts import Account
from .auth import SALT_BITS, PinAuthenticator
from .errors import MalformedRecord, StoreError

logger = logging.getLogger(__name__)

MalformedPolicy = Literal["skip", "abort"]
MALFORMED_POLICIES = ("skip", "abort")

DEFAULT_BASE_ID = 1001
FIELD_SEPARATOR = "\t"
FIELD_COUNT = 5

_ID_RE = re.compile(r"[0-9]+")
_BALANCE_RE = re.compile(r"-?[0-9]+")
_SALT_RE = re.compile(r"[0-9a-fA-F]{1,%d}" % (SALT_BITS // 4))
_DIGEST_RE = re.compile(r"[0-9a-fA-F]+")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f-\x9f\u2028\u2029]")


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one store line: an account or an error."""

    account: Optional[Account] = None
    error: Optional[MalformedRecord] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class LoadResult:
    """Accounts rebuilt from the store, with the recovered id counter."""

    accounts: list[Account]
    next_id: int
    skipped: list[MalformedRecord] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Record codec
# ---------------------------------------------------------------------------


def sanitize_owner(owner: str) -> str:
    """Replace control characters (tab, CR, LF, ...) with a space."""
    return _CONTROL_RE.sub(" ", owner)


def encode_record(account: Account) -> str:
    """Encode an account as one store line (without the trailing newline)."""
    fields = [
        str(account.id),
        sanitize_owner(account.owner),
        f"{account.salt:016x}",
        account.pin_digest,
        str(account.balance_cents),
    ]
    return FIELD_SEPARATOR.join(fields)


def decode_record(
    line: str,
    authenticator: PinAuthenticator,
    line_number: Optional[int] = None,
) -> DecodeResult:
    """Decode one store line into an Account.

    Args:
        line: Raw line, with or without its trailing newline.
        authenticator: Capability attached to the rebuilt account.
        line_number: Optional 1-based position, used in error messages.

    Returns:
        A DecodeResult holding either the account or a MalformedRecord.
    """
    raw = line.rstrip("\r\n")

    def _malformed(reason: str) -> DecodeResult:
        return DecodeResult(
            error=MalformedRecord(reason, line=raw, line_number=line_number)
        )

    fields = raw.split(FIELD_SEPARATOR)
    if len(fields) != FIELD_COUNT:
        return _malformed(f"expected {FIELD_COUNT} fields, found {len(fields)}")

    id_raw, owner, salt_raw, digest_raw, balance_raw = fields

    if not _ID_RE.fullmatch(id_raw) or int(id_raw) <= 0:
        return _malformed(f"invalid account id {id_raw!r}")
    if not _SALT_RE.fullmatch(salt_raw):
        return _malformed("invalid salt")
    if not _DIGEST_RE.fullmatch(digest_raw):
        return _malformed("invalid PIN digest")
    if not _BALANCE_RE.fullmatch(balance_raw):
        return _malformed(f"invalid balance {balance_raw!r}")

    balance_cents = int(balance_raw)
    if balance_cents < 0:
        return _malformed(f"negative balance {balance_cents}")

    account = Account(
        id=int(id_raw),
        owner=owner,
        salt=int(salt_raw, 16),
        pin_digest=digest_raw,
        balance_cents=balance_cents,
        authenticator=authenticator,
    )
    return DecodeResult(account=account)


# ---------------------------------------------------------------------------
# File-level operations
# ---------------------------------------------------------------------------


def save_accounts(accounts: Iterable[Account], path: Union[str, os.PathLike]) -> int:
    """Write all accounts to ``path``, replacing any previous content.

    Returns:
        The number of records written.

    Raises:
        StoreError: if the store (or its directory) cannot be written.
    """
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    lines = [encode_record(account) + "\n" for account in accounts]

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "w", encoding="utf-8", newline="\n") as fh:
            fh.writelines(lines)
        os.replace(tmp, target)
    except OSError as exc:
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            logger.debug("Could not remove temporary store file %s", tmp)
        raise StoreError(f"Cannot write account store {target}: {exc}") from exc

    logger.info("Saved %d account(s) to %s", len(lines), target)
    return len(lines)


def load_accounts(
    path: Union[str, os.PathLike],
    authenticator: PinAuthenticator,
    malformed_policy: MalformedPolicy = "skip",
    base_id: int = DEFAULT_BASE_ID,
) -> LoadResult:
    """Rebuild accounts from the store at ``path``.

    Args:
        path: Location of the store file.
        authenticator: Capability attached to every rebuilt account.
        malformed_policy: "skip" to ignore malformed lines, "abort" to raise
            on the first one.
        base_id: Id counter value used when no account is loaded.

    Returns:
        A LoadResult with the accounts in file order, the recovered next id
        and the list of skipped lines.

    Raises:
        MalformedRecord: on the first malformed line when the policy is
            "abort".
        ValueError: if ``malformed_policy`` is not a known policy.
    """
    if malformed_policy not in MALFORMED_POLICIES:
        raise ValueError(
            f"Unknown malformed-record policy {malformed_policy!r}. "
            "Expected 'skip' or 'abort'."
        )

    source = Path(path)
    if not source.exists():
        logger.info("Account store %s not found, starting empty", source)
        return LoadResult(accounts=[], next_id=base_id)

    try:
        content = source.read_bytes()
    except OSError as exc:
        logger.warning(
            "Account store %s is unreadable (%s), starting empty", source, exc
        )
        return LoadResult(accounts=[], next_id=base_id)

    accounts: list[Account] = []
    skipped: list[MalformedRecord] = []
    seen_ids: set[int] = set()

    for line_number, raw in enumerate(content.split(b"\n"), start=1):
        if not raw.strip():
            continue

        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError:
            result = DecodeResult(
                error=MalformedRecord(
                    "invalid UTF-8",
                    line=raw.rstrip(b"\r").decode("utf-8", errors="replace"),
                    line_number=line_number,
                )
            )
        else:
            result = decode_record(line, authenticator, line_number=line_number)
        error = result.error
        if result.account is not None and result.account.id in seen_ids:
            error = MalformedRecord(
                f"duplicate account id {result.account.id}",
                line=line.rstrip("\r"),
                line_number=line_number,
            )

        if error is not None:
            if malformed_policy == "abort":
                raise error
            logger.warning("Skipping line: %s", error)
            skipped.append(error)
            continue

        seen_ids.add(result.account.id)
        accounts.append(result.account)

    next_id = max(seen_ids) + 1 if seen_ids else base_id

    logger.info(
        "Loaded %d account(s) from %s (next id %d, %d line(s) skipped)",
        len(accounts),
        source,
        next_id,
        len(skipped),
    )
    return LoadResult(accounts=accounts, next_id=next_id, skipped=skipped)
