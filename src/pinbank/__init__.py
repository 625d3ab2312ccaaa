# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
PinBank
-------

A small ledger engine managing PIN-protected accounts whose balances are kept
in integer cents. The package provides:

- exact-money parsing and formatting (money),
- salted PIN digests behind a pluggable authenticator (auth),
- an Account entity that never lets its balance go negative (accounts),
- a Ledger aggregate assigning ids from 1001 and authenticating users (ledger),
- a flat tab-separated account store with id-counter recovery (storage),
- a thin command-line interface and interactive menu (cli).

PinBank separates the ledger core (accounts, ledger, storage), configuration
(TOML) and presentation (CLI), so the core can be driven from scripts and
tests without any console I/O.


Version: 0.1.0

Usage:
    python -m pinbank.cli --help
"""

__all__ = ["accounts", "auth", "ledger", "money", "storage"]

__version__ = "0.1.0"
