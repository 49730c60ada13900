"""Unit tests for auth/passwords.py -- password policy and bcrypt hashing.

Covers:
- validate_password() accepts passwords meeting every rule
- each single-rule violation (length, lowercase, uppercase, digit, special) is rejected
- characters outside the allowed set are rejected
- hash_password()/verify_password() round trip, wrong password, malformed hash
"""

import pytest

from auth.errors import InvalidPassword
from auth.passwords import hash_password, validate_password, verify_password


@pytest.mark.parametrize(
    "password",
    ["Abcdef1!", "aB3$aaaa", "ZZZZzzz9?", "Passw0rd&Passw0rd&", "x@Y1x@Y1", "Q*w%e!r9"],
)
def test_valid_passwords_are_accepted(password: str) -> None:
    validate_password(password)


@pytest.mark.parametrize(
    "password, rule",
    [
        ("Abcde1!", "shorter than 8"),
        ("ABCDEF1!", "no lowercase"),
        ("abcdef1!", "no uppercase"),
        ("Abcdefg!", "no digit"),
        ("Abcdefg1", "no special character"),
        ("", "empty"),
    ],
)
def test_single_rule_violations_are_rejected(password: str, rule: str) -> None:
    with pytest.raises(InvalidPassword):
        validate_password(password)


@pytest.mark.parametrize("password", ["Abcdef1! ", "Abcdef1#", "Abcdéf1!", "Abc-def1!"])
def test_characters_outside_allowed_set_are_rejected(password: str) -> None:
    with pytest.raises(InvalidPassword):
        validate_password(password)


def test_violation_does_not_say_which_rule_failed() -> None:
    with pytest.raises(InvalidPassword) as short:
        validate_password("Ab1!")
    with pytest.raises(InvalidPassword) as no_digit:
        validate_password("Abcdefg!")
    assert str(short.value) == str(no_digit.value) == "Password does not meet requirements."


class TestHashing:
    def test_round_trip(self) -> None:
        hashed = hash_password("Abcdef1!")
        assert hashed != "Abcdef1!"
        assert hashed.startswith("$2")
        assert verify_password("Abcdef1!", hashed) is True

    def test_other_plaintext_does_not_verify(self) -> None:
        hashed = hash_password("Abcdef1!")
        assert verify_password("Abcdef1?", hashed) is False
        assert verify_password("", hashed) is False

    def test_hashes_are_salted(self) -> None:
        assert hash_password("Abcdef1!") != hash_password("Abcdef1!")

    @pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$2b$12$short"])
    def test_malformed_hash_returns_false(self, bad_hash: str) -> None:
        assert verify_password("Abcdef1!", bad_hash) is False

    def test_long_password_hashes_and_verifies(self) -> None:
        long_password = "Abcdef1!" * 10
        hashed = hash_password(long_password)
        assert verify_password(long_password, hashed) is True

    def test_only_first_72_bytes_are_significant(self) -> None:
        prefix = "Abcdef1!" * 9
        assert len(prefix) == 72
        hashed = hash_password(prefix + "tail")
        assert verify_password(prefix, hashed) is True
        assert verify_password(prefix + "other", hashed) is True
        assert verify_password(prefix[:-1], hashed) is False
