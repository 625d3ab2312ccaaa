import pytest

from pinbank.auth import (
    Pbkdf2PinAuthenticator,
    Sha256PinAuthenticator,
    get_authenticator,
    validate_pin,
)
from pinbank.errors import InvalidPin


@pytest.fixture(params=["sha256", "pbkdf2"])
def authenticator(request):
    if request.param == "pbkdf2":
        return Pbkdf2PinAuthenticator(iterations=1000)
    return Sha256PinAuthenticator()


def test_digest_is_deterministic(authenticator) -> None:
    salt = 0x1234_5678_9ABC_DEF0
    assert authenticator.digest("1234", salt) == authenticator.digest("1234", salt)


def test_different_salts_give_different_digests(authenticator) -> None:
    assert authenticator.digest("1234", 1) != authenticator.digest("1234", 2)


def test_verify_matches_only_the_right_pin(authenticator) -> None:
    salt = authenticator.issue_salt()
    digest = authenticator.digest("4321", salt)

    assert authenticator.verify("4321", salt, digest) is True
    assert authenticator.verify("4320", salt, digest) is False
    assert authenticator.verify("4321", salt ^ 1, digest) is False


def test_issue_salt_fits_in_64_bits() -> None:
    auth = Sha256PinAuthenticator()
    salts = {auth.issue_salt() for _ in range(50)}

    assert all(0 <= s < 2**64 for s in salts)
    # Salts are random: 50 draws should not all collide.
    assert len(salts) > 1


def test_digest_is_lowercase_hex() -> None:
    digest = Sha256PinAuthenticator().digest("1234", 42)
    assert len(digest) == 64
    assert digest == digest.lower()
    int(digest, 16)


@pytest.mark.parametrize("pin", ["1234", "0000", "123456789012"])
def test_validate_pin_accepts_4_to_12_digits(pin) -> None:
    validate_pin(pin)


@pytest.mark.parametrize(
    "pin",
    ["", "123", "1234567890123", "12a4", "12 34", "-123", "١٢٣٤"],
)
def test_validate_pin_rejects_bad_format(pin) -> None:
    with pytest.raises(InvalidPin):
        validate_pin(pin)


def test_get_authenticator_by_name() -> None:
    assert isinstance(get_authenticator("sha256"), Sha256PinAuthenticator)

    pbkdf2 = get_authenticator("pbkdf2", iterations=10)
    assert isinstance(pbkdf2, Pbkdf2PinAuthenticator)
    assert pbkdf2.iterations == 10

    with pytest.raises(ValueError):
        get_authenticator("md5")


def test_pbkdf2_rejects_non_positive_iterations() -> None:
    with pytest.raises(ValueError):
        Pbkdf2PinAuthenticator(iterations=0)
