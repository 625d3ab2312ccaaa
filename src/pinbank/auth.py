# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
PIN authentication for PinBank.

A PIN is never stored: each account keeps a random per-account salt and the
digest of (salt, PIN). The digest algorithm is a pluggable capability
(``PinAuthenticator``) so that Account and Ledger do not depend on a specific
hash function.

Two implementations are provided:

- ``Sha256PinAuthenticator`` (default): one SHA-256 pass over the salt bytes
  followed by the PIN,
- ``Pbkdf2PinAuthenticator``: PBKDF2-HMAC-SHA256 with a configurable
  iteration count.

Neither is meant to be cryptographically strong protection for 4-digit PINs;
a store is bound to the algorithm that wrote it.
"""

import hashlib
import hmac
import secrets
from typing import Protocol

from .errors import InvalidPin

SALT_BITS = 64
PIN_MIN_LENGTH = 4
PIN_MAX_LENGTH = 12


class PinAuthenticator(Protocol):
    """Capability used by accounts to hash and check PINs."""

    name: str

    def issue_salt(self) -> int:
        """Return a fresh random salt for a new account."""
        ...

    def digest(self, pin: str, salt: int) -> str:
        """Return the hex digest of ``pin`` mixed with ``salt``."""
        ...

    def verify(self, pin: str, salt: int, expected_digest: str) -> bool:
        """Return True iff ``digest(pin, salt) == expected_digest``."""
        ...


def validate_pin(pin: str) -> None:
    """Check that a PIN is 4 to 12 ASCII decimal digits.

    Raises:
        InvalidPin: if the PIN does not match the expected format.
    """
    if not PIN_MIN_LENGTH <= len(pin) <= PIN_MAX_LENGTH:
        raise InvalidPin(
            f"PIN must be {PIN_MIN_LENGTH}-{PIN_MAX_LENGTH} digits "
            f"(got {len(pin)} characters)."
        )
    if not (pin.isascii() and pin.isdigit()):
        raise InvalidPin("PIN must contain digits only.")


def _salt_bytes(salt: int) -> bytes:
    return salt.to_bytes(SALT_BITS // 8, "big")


class Sha256PinAuthenticator:
    """Salted SHA-256 digest of the PIN."""

    name = "sha256"

    def issue_salt(self) -> int:
        return secrets.randbits(SALT_BITS)

    def digest(self, pin: str, salt: int) -> str:
        return hashlib.sha256(_salt_bytes(salt) + pin.encode("utf-8")).hexdigest()

    def verify(self, pin: str, salt: int, expected_digest: str) -> bool:
        return hmac.compare_digest(self.digest(pin, salt), expected_digest)


class Pbkdf2PinAuthenticator:
    """PBKDF2-HMAC-SHA256 digest of the PIN."""

    name = "pbkdf2"

    def __init__(self, iterations: int = 100_000) -> None:
        if iterations < 1:
            raise ValueError("PBKDF2 iterations must be a positive integer.")
        self.iterations = iterations

    def issue_salt(self) -> int:
        return secrets.randbits(SALT_BITS)

    def digest(self, pin: str, salt: int) -> str:
        raw = hashlib.pbkdf2_hmac(
            "sha256", pin.encode("utf-8"), _salt_bytes(salt), self.iterations
        )
        return raw.hex()

    def verify(self, pin: str, salt: int, expected_digest: str) -> bool:
        return hmac.compare_digest(self.digest(pin, salt), expected_digest)


def get_authenticator(
    name: str = "sha256", iterations: int = 100_000
) -> PinAuthenticator:
    """Build the authenticator registered under ``name``.

    Raises:
        ValueError: if ``name`` is not a known algorithm.
    """
    if name == "sha256":
        return Sha256PinAuthenticator()
    if name == "pbkdf2":
        return Pbkdf2PinAuthenticator(iterations)
    raise ValueError(
        f"Unknown PIN algorithm {name!r}. Expected 'sha256' or 'pbkdf2'."
    )
