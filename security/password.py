import hashlib
import hmac
import secrets

import bcrypt

# scrypt cost parameters; salts are hex strings stored after the digest
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEYLEN = 64
SALT_BYTES = 16


def _scrypt(plain_password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        plain_password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=SCRYPT_KEYLEN,
    )


def hash_password(plain_password: str, salt: str = None, scheme: str = "scrypt") -> str:
    """
    scrypt hashes are stored as "<hex digest>.<salt>"; bcrypt hashes keep
    their own "$2b$..." format with the salt embedded.
    """
    if not isinstance(plain_password, str) or len(plain_password) == 0:
        raise ValueError("Password must be a non-empty string")

    if scheme == "bcrypt":
        hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt(rounds=12))
        return hashed.decode("utf-8")
    if scheme != "scrypt":
        raise ValueError(f"Unsupported password hash scheme: {scheme}")

    salt = salt or secrets.token_hex(SALT_BYTES)
    return f"{_scrypt(plain_password, salt).hex()}.{salt}"


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False

    if password_hash.startswith("$2"):
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                password_hash.encode("utf-8")
            )
        except ValueError:
            return False

    hashed, sep, salt = password_hash.partition(".")
    if not sep or not hashed or not salt:
        return False
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False

    return hmac.compare_digest(expected, _scrypt(plain_password, salt))
