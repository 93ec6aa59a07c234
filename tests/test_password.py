"""Tests for password hashing and the registration password policy."""

import bcrypt
import pytest

from security.password import hash_password, verify_password
from security.password_policy import validate_password


class TestHashPassword:
    def test_scrypt_hash_is_digest_dot_salt(self) -> None:
        stored = hash_password("CorrectPass1")
        digest, salt = stored.split(".")
        assert len(digest) == 128  # 64-byte key, hex encoded
        assert len(salt) == 32
        assert "CorrectPass1" not in stored

    def test_fresh_salt_per_hash(self) -> None:
        assert hash_password("CorrectPass1") != hash_password("CorrectPass1")

    def test_explicit_salt_is_deterministic(self) -> None:
        assert hash_password("CorrectPass1", salt="abcd") == hash_password("CorrectPass1", salt="abcd")

    def test_empty_password_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_password("")

    def test_unknown_scheme_rejected(self) -> None:
        with pytest.raises(ValueError):
            hash_password("CorrectPass1", scheme="md5")


class TestVerifyPassword:
    @pytest.mark.parametrize("plain", ["CorrectPass1", "p", "pässwörd ✓", "x" * 200])
    def test_matches_same_plaintext(self, plain: str) -> None:
        stored = hash_password(plain)
        assert verify_password(plain, stored) is True

    @pytest.mark.parametrize("salt", ["00", "deadbeefdeadbeef", "a1b2c3"])
    def test_rejects_different_plaintext(self, salt: str) -> None:
        stored = hash_password("CorrectPass1", salt=salt)
        assert verify_password("CorrectPass1", stored) is True
        assert verify_password("CorrectPass2", stored) is False
        assert verify_password("correctpass1", stored) is False

    @pytest.mark.parametrize("stored", ["", "nodelimiter", ".salt", "abc.", "zz-not-hex.salt"])
    def test_malformed_hash_never_matches(self, stored: str) -> None:
        assert verify_password("CorrectPass1", stored) is False

    def test_empty_plaintext_never_matches(self) -> None:
        assert verify_password("", hash_password("CorrectPass1")) is False

    def test_bcrypt_hashes_still_verify(self) -> None:
        legacy = bcrypt.hashpw(b"CorrectPass1", bcrypt.gensalt(rounds=4)).decode("utf-8")
        assert verify_password("CorrectPass1", legacy) is True
        assert verify_password("WrongPass", legacy) is False

    def test_bcrypt_scheme(self) -> None:
        stored = hash_password("CorrectPass1", scheme="bcrypt")
        assert stored.startswith("$2")
        assert verify_password("CorrectPass1", stored) is True


class TestPasswordPolicy:
    def test_accepts_reasonable_password(self) -> None:
        assert validate_password("CorrectPass1") == (True, [])

    def test_reports_every_failure(self) -> None:
        valid, errors = validate_password("short")
        assert valid is False
        assert "Password must be at least 8 characters" in errors
        assert "Password must include at least 1 uppercase letter" in errors
        assert "Password must include at least 1 number" in errors

    def test_non_string_rejected(self) -> None:
        assert validate_password(None) == (False, ["Password must be a string"])

    def test_bcrypt_scheme_caps_bytes(self, app) -> None:
        app.config["PASSWORD_HASH_SCHEME"] = "bcrypt"
        wide = "Aa1" + "é" * 40  # 43 characters, 83 bytes
        valid, errors = validate_password(wide)
        assert valid is False
        assert errors == ["Password must be at most 72 bytes"]
        assert validate_password("Aa1" + "é" * 34) == (True, [])

    def test_scrypt_scheme_has_no_byte_cap(self, app) -> None:
        assert validate_password("Aa1" + "é" * 40) == (True, [])
