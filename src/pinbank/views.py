# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for PinBank.

These helpers turn account snapshots into pandas DataFrames ready for console
display or CSV export. They only rely on the generic attributes ``id``,
``owner`` and ``balance_cents`` and never touch PIN material.

The DataFrame produced by ``accounts_to_dataframe`` has the columns:

- id:            account id (int)
- owner:         owner name (str)
- balance_cents: balance in cents (int)
- balance:       balance formatted as ``[-]$D.CC`` (str)
"""

from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Optional, Protocol

import pandas as pd

from .money import format_amount

ACCOUNT_COLUMNS = ["id", "owner", "balance_cents", "balance"]


class _AccountLike(Protocol):
    id: int
    owner: str
    balance_cents: int


def accounts_to_dataframe(accounts: Iterable[_AccountLike]) -> pd.DataFrame:
    """Build a DataFrame with one row per account, in the given order."""
    rows = [
        {
            "id": a.id,
            "owner": a.owner,
            "balance_cents": a.balance_cents,
            "balance": format_amount(a.balance_cents),
        }
        for a in accounts
    ]
    if not rows:
        return pd.DataFrame(columns=ACCOUNT_COLUMNS)
    return pd.DataFrame(rows, columns=ACCOUNT_COLUMNS)


def render_accounts(df: pd.DataFrame) -> str:
    """Render the accounts table for the console.

    Mirrors the demo listing of the interactive menu: an empty ledger prints
    "(none)". The ``balance_cents`` column is dropped from the display.
    """
    if df.empty:
        return "(none)"
    display = df[["id", "owner", "balance"]]
    return display.to_string(index=False)


def write_accounts_csv(
    df: pd.DataFrame, output_dir: Path, timestamp: Optional[str] = None
) -> Path:
    """Write the accounts table to ``accounts_<timestamp>.csv`` in output_dir."""
    output_dir.mkdir(parents=True, exist_ok=True)
    if timestamp is None:
        timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")
    path = output_dir / f"accounts_{timestamp}.csv"
    df.to_csv(path, index=False)
    return path
