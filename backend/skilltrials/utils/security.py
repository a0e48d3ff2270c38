import bcrypt

# bcrypt only reads the first 72 bytes of its input.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")


def hash_password(password: str) -> str:
    """bcrypt hash for a new account or reset password; rejects what bcrypt would truncate."""
    if not password:
        raise ValueError("Password is required")
    raw = _encode(password)
    if len(raw) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be {BCRYPT_MAX_BYTES} bytes or less")
    return bcrypt.hashpw(raw, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    if not password or not hashed:
        return False
    raw = _encode(password)
    if len(raw) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(raw, hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False
