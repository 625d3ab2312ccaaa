# PinBank - Small ledger engine for PIN-protected accounts
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for PinBank.

The CLI is intentionally thin: it does not implement any ledger logic
itself. It converts user text (ids, PINs, amounts) into calls on the ledger
core and renders results or errors.


Lifecycle
---------

Every invocation follows the same steps:

1) Load the TOML configuration (``pinbank_config.toml`` by default, or the
   file given with ``--config``; built-in defaults apply when the default
   file is absent).

2) Load the ledger from the account store (``store.path`` in the
   configuration, overridable with ``--store``). A missing store starts an
   empty ledger whose first account id is 1001.

3) Run the requested command.

4) Save the store if the command changed the ledger (create, deposit,
   withdraw, change-pin, menu). Read-only commands never rewrite the store.


Commands
--------

    pinbank create --owner "Alice" --pin 1234
    pinbank balance 1001 --pin 1234
    pinbank deposit 1001 50.5 --pin 1234
    pinbank withdraw 1001 10.00 --pin 1234
    pinbank change-pin 1001 --pin 1234 --new-pin 987654
    pinbank list --display-mode both --output reports/
    pinbank menu

When ``--pin`` (or ``--new-pin``) is omitted the PIN is prompted without
echo. Amounts accept "100", "12.34", ".5" or "$12.34"; extra fractional
digits are truncated.

``list`` renders the accounts as a console table (``table``), a timestamped
``accounts_YYYY-MM-DD-HH-MM-SS.csv`` file (``csv``) or both. The default mode
comes from ``display.mode`` in the configuration.

``menu`` starts the interactive menu (create account, login, list accounts,
exit). The store is saved when the user chooses "Exit" or closes the input.


Errors
------

Ledger errors (invalid amount or PIN, insufficient funds, failed
authentication, unwritable store, malformed store under the "abort" policy)
are printed as ``Error: <message>`` on stderr and the process exits with
status 1. The interactive menu reports them and prompts again.
"""

import argparse
import getpass
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Optional

from . import __version__
from .accounts import Account
from .auth import get_authenticator
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .errors import LedgerError, ParseError, StoreError
from .ledger import Ledger
from .logging_config import LOG_LEVELS, setup_logging
from .money import format_amount, parse_amount
from .views import render_accounts, write_accounts_csv

DEFAULT_OUTPUT_DIR = Path("data/output")

InputFn = Callable[[str], str]


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="pinbank",
        description=(
            "PinBank - small ledger engine for PIN-protected accounts. "
            "Creates accounts, authenticates them by id and PIN, moves money "
            "in exact cents and persists everything to a flat text store."
        ),
    )

    # Generic options
    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of pinbank and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. "
            "If omitted, 'pinbank_config.toml' in the current directory is used "
            "when present."
        ),
    )
    ap.add_argument(
        "--store",
        dest="store_path",
        help="Override the account store path defined in the configuration.",
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override the logging.level setting from the configuration file.",
    )

    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Operation to run on the ledger.",
    )

    # create
    create = subparsers.add_parser("create", help="Open a new account.")
    create.add_argument("--owner", help="Owner name (prompted if omitted).")
    create.add_argument("--pin", help="PIN, 4-12 digits (prompted if omitted).")

    # balance / deposit / withdraw
    balance = subparsers.add_parser("balance", help="Show an account balance.")
    balance.add_argument("account_id", type=int, help="Account id.")
    balance.add_argument("--pin", help="Account PIN (prompted if omitted).")

    for name, verb in (
        ("deposit", "Deposit money into"),
        ("withdraw", "Withdraw money from"),
    ):
        sub = subparsers.add_parser(name, help=f"{verb} an account.")
        sub.add_argument("account_id", type=int, help="Account id.")
        sub.add_argument("amount", help="Amount, e.g. 100 or 12.34.")
        sub.add_argument("--pin", help="Account PIN (prompted if omitted).")

    # change-pin
    change_pin = subparsers.add_parser("change-pin", help="Change an account PIN.")
    change_pin.add_argument("account_id", type=int, help="Account id.")
    change_pin.add_argument("--pin", help="Current PIN (prompted if omitted).")
    change_pin.add_argument(
        "--new-pin",
        dest="new_pin",
        help="New PIN, 4-12 digits (prompted if omitted).",
    )

    # list
    list_cmd = subparsers.add_parser("list", help="List all accounts.")
    list_cmd.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=DISPLAY_MODES,
        help=(
            "Override the display.mode setting from the configuration file. "
            "'table' prints to stdout, 'csv' writes a CSV file, 'both' does both."
        ),
    )
    list_cmd.add_argument(
        "--output",
        dest="output_dir",
        help="Directory for CSV output. If omitted, 'data/output' is used.",
    )

    # menu
    subparsers.add_parser("menu", help="Start the interactive menu.")

    return ap


def _read_pin(value: Optional[str], prompt: str) -> str:
    if value is not None:
        return value
    return getpass.getpass(prompt)


# ---------------------------------------------------------------------------
# One-shot command handlers. Each returns True when the ledger changed.
# ---------------------------------------------------------------------------


def _handle_create(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    owner = args.owner if args.owner is not None else input("Owner name: ")
    pin = _read_pin(args.pin, "Choose PIN (4-12 digits): ")
    account_id = ledger.create_account(owner, pin)
    print(f"Account created! Your ID is: {account_id}")
    return True


def _handle_balance(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    account = ledger.authenticate(args.account_id, _read_pin(args.pin, "PIN: "))
    print(f"Balance: {format_amount(account.balance_cents)}")
    return False


def _handle_deposit(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    account = ledger.authenticate(args.account_id, _read_pin(args.pin, "PIN: "))
    new_balance = account.deposit(parse_amount(args.amount))
    print(f"Deposited. New balance: {format_amount(new_balance)}")
    return True


def _handle_withdraw(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    account = ledger.authenticate(args.account_id, _read_pin(args.pin, "PIN: "))
    new_balance = account.withdraw(parse_amount(args.amount))
    print(f"Withdrawn. New balance: {format_amount(new_balance)}")
    return True


def _handle_change_pin(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    account = ledger.authenticate(args.account_id, _read_pin(args.pin, "Current PIN: "))
    account.set_pin(_read_pin(args.new_pin, "New PIN (4-12 digits): "))
    print("PIN changed.")
    return True


def _handle_list(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    df = ledger.accounts_to_dataframe()

    display_mode = config.display_mode
    if args.display_mode:
        display_mode = args.display_mode

    if display_mode in {"table", "both"}:
        print("=== Accounts ===")
        print(render_accounts(df))

    if display_mode in {"csv", "both"}:
        output_dir = Path(args.output_dir) if args.output_dir else DEFAULT_OUTPUT_DIR
        try:
            path = write_accounts_csv(df, output_dir)
        except OSError as exc:
            raise StoreError(f"Cannot write CSV to {output_dir}: {exc}") from exc
        print(f"Wrote {path} ({len(df)} rows)")

    return False


def _handle_menu(
    args: argparse.Namespace, ledger: Ledger, config: AppConfig
) -> bool:
    run_menu(ledger)
    return True


# ---------------------------------------------------------------------------
# Interactive menu
# ---------------------------------------------------------------------------


def _prompt_int(input_fn: InputFn, msg: str) -> int:
    while True:
        text = input_fn(msg)
        try:
            return int(text.strip())
        except ValueError:
            print("Invalid number. Try again.")


def _prompt_amount(input_fn: InputFn, msg: str) -> int:
    while True:
        text = input_fn(msg)
        try:
            return parse_amount(text)
        except ParseError as exc:
            print(f"Invalid amount: {exc} Try again.")


def _account_session(account: Account, input_fn: InputFn) -> None:
    while True:
        print()
        print(f"[Account {account.id}] Options:")
        print(" 1) Check balance")
        print(" 2) Deposit")
        print(" 3) Withdraw")
        print(" 4) Change PIN")
        print(" 5) Logout")
        choice = _prompt_int(input_fn, "Choose: ")
        try:
            if choice == 1:
                print(f"Balance: {format_amount(account.balance_cents)}")
            elif choice == 2:
                cents = _prompt_amount(
                    input_fn, "Amount to deposit (e.g., 100 or 12.34): "
                )
                account.deposit(cents)
                print(f"Deposited. New balance: {format_amount(account.balance_cents)}")
            elif choice == 3:
                cents = _prompt_amount(input_fn, "Amount to withdraw: ")
                account.withdraw(cents)
                print(f"Withdrawn. New balance: {format_amount(account.balance_cents)}")
            elif choice == 4:
                old_pin = input_fn("Current PIN: ")
                new_pin = input_fn("New PIN (4-12 digits): ")
                account.change_pin(old_pin, new_pin)
                print("PIN changed.")
            elif choice == 5:
                print("Logging out...")
                return
            else:
                print("Invalid option.")
        except LedgerError as exc:
            print(f"Error: {exc}")


def run_menu(ledger: Ledger, input_fn: Optional[InputFn] = None) -> None:
    """Run the interactive menu until the user exits or input ends.

    The caller owns persistence: the ledger is saved after this returns.
    """
    if input_fn is None:
        input_fn = input
    print("=== PinBank ===")
    try:
        while True:
            print()
            print("Main Menu:")
            print(" 1) Create account")
            print(" 2) Login")
            print(" 3) List accounts")
            print(" 4) Exit")
            choice = _prompt_int(input_fn, "Choose: ")
            if choice == 1:
                name = input_fn("Owner name: ")
                pin = input_fn("Choose PIN (4-12 digits): ")
                try:
                    account_id = ledger.create_account(name, pin)
                except LedgerError as exc:
                    print(f"Failed to create account: {exc}")
                else:
                    print(f"Account created! Your ID is: {account_id}")
            elif choice == 2:
                account_id = _prompt_int(input_fn, "Account ID: ")
                pin = input_fn("PIN: ")
                try:
                    account = ledger.authenticate(account_id, pin)
                except LedgerError as exc:
                    print(f"Login failed. {exc}")
                    continue
                _account_session(account, input_fn)
            elif choice == 3:
                print()
                print("=== Accounts ===")
                print(render_accounts(ledger.accounts_to_dataframe()))
            elif choice == 4:
                print("Goodbye!")
                return
            else:
                print("Invalid choice.")
    except EOFError:
        print()
        print("Input closed. Goodbye!")


_HANDLERS = {
    "create": _handle_create,
    "balance": _handle_balance,
    "deposit": _handle_deposit,
    "withdraw": _handle_withdraw,
    "change-pin": _handle_change_pin,
    "list": _handle_list,
    "menu": _handle_menu,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the PinBank CLI.

    Parses command-line arguments, loads the configuration and the ledger,
    runs the requested command and saves the store when the ledger changed.

    Returns:
        Process exit status: 0 on success, 1 on a ledger error.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    # --version: short-circuit and exit early.
    if args.version:
        print(f"pinbank version {__version__}")
        return 0

    if args.command is None:
        parser.print_help()
        return 1

    # 1) Load application configuration
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    setup_logging(args.log_level or config.log_level)

    store_path = Path(args.store_path) if args.store_path else config.store.path
    authenticator = get_authenticator(
        config.auth.algorithm, config.auth.pbkdf2_iterations
    )

    try:
        # 2) Load the ledger from the store
        ledger = Ledger.load(
            store_path,
            authenticator=authenticator,
            malformed_policy=config.store.malformed_policy,
            base_id=config.base_id,
        )
        if ledger.skipped_records:
            print(
                f"Warning: {len(ledger.skipped_records)} malformed line(s) "
                f"skipped in {store_path}.",
                file=sys.stderr,
            )

        # 3) Run the command, 4) save if the ledger changed
        changed = _HANDLERS[args.command](args, ledger, config)
        if changed:
            ledger.save(store_path)
    except LedgerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except EOFError:
        print("Error: input closed.", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
