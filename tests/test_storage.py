import pytest

from pinbank.accounts import Account
from pinbank.auth import Sha256PinAuthenticator
from pinbank.errors import MalformedRecord, StoreError
from pinbank.storage import (
    decode_record,
    encode_record,
    load_accounts,
    sanitize_owner,
    save_accounts,
)

AUTH = Sha256PinAuthenticator()


def make_account(account_id: int, owner: str = "Alice", cents: int = 0) -> Account:
    account = Account.open(account_id, owner, "1234", AUTH)
    if cents:
        account.deposit(cents)
    return account


def valid_line(account_id: int, owner: str = "Alice", cents: int = 0) -> str:
    return encode_record(make_account(account_id, owner, cents))


def test_encode_record_layout() -> None:
    account = Account(
        id=1001, owner="Alice", salt=0xAB, pin_digest="deadbeef", balance_cents=4050
    )

    assert encode_record(account) == "1001\tAlice\t00000000000000ab\tdeadbeef\t4050"


def test_sanitize_owner_removes_delimiters() -> None:
    assert sanitize_owner("Al\tice\nSmith\r") == "Al ice Smith "
    assert sanitize_owner("Zoë O'Neil") == "Zoë O'Neil"


def test_encoded_owner_never_breaks_the_line() -> None:
    line = encode_record(make_account(1001, owner="A\tB\nC"))

    assert "\n" not in line
    assert line.count("\t") == 4


def test_decode_record_rebuilds_account_verbatim() -> None:
    original = make_account(1001, owner="  Alice  ", cents=4050)

    result = decode_record(encode_record(original) + "\n", AUTH)

    assert result.ok
    assert result.error is None
    account = result.account
    assert account.id == 1001
    assert account.owner == "  Alice  "
    assert account.balance_cents == 4050
    assert account.salt == original.salt
    assert account.pin_digest == original.pin_digest
    assert account.verify_pin("1234") is True


@pytest.mark.parametrize(
    "line, reason",
    [
        ("1001\tAlice\tab\tcd", "expected 5 fields"),
        ("1001\tAlice\tab\tcd\t10\textra", "expected 5 fields"),
        ("abc\tAlice\tab\tcd\t10", "invalid account id"),
        ("0\tAlice\tab\tcd\t10", "invalid account id"),
        ("+5\tAlice\tab\tcd\t10", "invalid account id"),
        ("1001\tAlice\tzz\tcd\t10", "invalid salt"),
        ("1001\tAlice\t11112222333344445\tcd\t10", "invalid salt"),
        ("1001\tAlice\tab\t\t10", "invalid PIN digest"),
        ("1001\tAlice\tab\tnothex\t10", "invalid PIN digest"),
        ("1001\tAlice\tab\tcd\t10.5", "invalid balance"),
        ("1001\tAlice\tab\tcd\t-10", "negative balance"),
    ],
)
def test_decode_record_reports_malformed_lines(line, reason) -> None:
    result = decode_record(line, AUTH, line_number=3)

    assert not result.ok
    assert result.account is None
    assert isinstance(result.error, MalformedRecord)
    assert reason in result.error.reason
    assert result.error.line_number == 3
    assert result.error.line == line


def test_save_overwrites_previous_content(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    save_accounts([make_account(1001), make_account(1002)], store)
    save_accounts([make_account(1003)], store)

    lines = store.read_text(encoding="utf-8").splitlines()

    assert len(lines) == 1
    assert lines[0].startswith("1003\t")
    assert not (tmp_path / "accounts.tsv.tmp").exists()


def test_save_creates_parent_directory(tmp_path) -> None:
    store = tmp_path / "data" / "db" / "accounts.tsv"

    assert save_accounts([make_account(1001)], store) == 1
    assert store.is_file()


def test_save_to_unwritable_destination_raises_store_error(tmp_path) -> None:
    # The destination is an existing directory: the final replace fails.
    destination = tmp_path / "store_dir"
    destination.mkdir()

    with pytest.raises(StoreError):
        save_accounts([make_account(1001)], destination)
    assert not (tmp_path / "store_dir.tmp").exists()


def test_load_missing_store_is_empty(tmp_path) -> None:
    result = load_accounts(tmp_path / "missing.tsv", AUTH)

    assert result.accounts == []
    assert result.next_id == 1001
    assert result.skipped == []


def test_load_unreadable_store_is_empty(tmp_path) -> None:
    result = load_accounts(tmp_path, AUTH, base_id=2000)

    assert result.accounts == []
    assert result.next_id == 2000


def test_load_recovers_next_id_from_max_id(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    store.write_text(
        "\n".join([valid_line(1005), valid_line(1001), valid_line(1003)]) + "\n",
        encoding="utf-8",
    )

    result = load_accounts(store, AUTH)

    assert [a.id for a in result.accounts] == [1005, 1001, 1003]
    assert result.next_id == 1006


def test_load_skip_policy_ignores_malformed_and_duplicate_lines(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    store.write_text(
        "\n".join(
            [
                valid_line(1001, cents=100),
                "garbage line",
                "",
                valid_line(1002, owner="Bob"),
                valid_line(1001, owner="Duplicate"),
                "1009\tMallory\tab\tcd\t-5",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    result = load_accounts(store, AUTH, malformed_policy="skip")

    assert [(a.id, a.owner) for a in result.accounts] == [
        (1001, "Alice"),
        (1002, "Bob"),
    ]
    assert result.next_id == 1003
    assert [e.line_number for e in result.skipped] == [2, 5, 6]
    assert "duplicate account id 1001" in result.skipped[1].reason


def test_load_abort_policy_raises_first_malformed_record(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    store.write_text(
        valid_line(1001) + "\nnot a record\n" + valid_line(1002) + "\n",
        encoding="utf-8",
    )

    with pytest.raises(MalformedRecord) as excinfo:
        load_accounts(store, AUTH, malformed_policy="abort")

    assert excinfo.value.line_number == 2


def test_load_rejects_unknown_policy(tmp_path) -> None:
    with pytest.raises(ValueError):
        load_accounts(tmp_path / "accounts.tsv", AUTH, malformed_policy="ignore")


def test_load_accepts_crlf_line_endings(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    store.write_bytes(
        (valid_line(1001) + "\r\n" + valid_line(1002) + "\r\n").encode("utf-8")
    )

    result = load_accounts(store, AUTH)

    assert [a.id for a in result.accounts] == [1001, 1002]
    assert result.skipped == []


def test_save_then_load_round_trip(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    accounts = [
        make_account(1001, "Alice", 4050),
        make_account(1002, "Bob\tthe builder", 0),
        make_account(1010, "", 99),
    ]
    save_accounts(accounts, store)

    result = load_accounts(store, AUTH)

    assert [(a.id, a.owner, a.balance_cents) for a in result.accounts] == [
        (1001, "Alice", 4050),
        (1002, "Bob the builder", 0),
        (1010, "", 99),
    ]
    assert result.next_id == 1011
    assert all(a.verify_pin("1234") for a in result.accounts)


def test_load_treats_invalid_utf8_as_malformed(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    save_accounts([make_account(1001, "Zoe"), make_account(1002, "Bob")], store)
    latin1 = store.read_bytes().replace(b"\tZoe\t", b"\tZo\xeb\t")
    store.write_bytes(latin1)

    result = load_accounts(store, AUTH)

    assert [a.id for a in result.accounts] == [1002]
    assert len(result.skipped) == 1
    assert result.skipped[0].reason == "invalid UTF-8"
    assert result.skipped[0].line_number == 1

    save_accounts(result.accounts, store)
    assert b"\xef\xbf\xbd" not in store.read_bytes()


def test_load_abort_policy_raises_on_invalid_utf8(tmp_path) -> None:
    store = tmp_path / "accounts.tsv"
    store.write_bytes(b"1001\tZo\xeb\t00000000000000ab\tdeadbeef\t0\n")

    with pytest.raises(MalformedRecord, match="invalid UTF-8"):
        load_accounts(store, AUTH, malformed_policy="abort")
