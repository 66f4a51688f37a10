"""Hashing utilities for passwords and verification tokens."""
import secrets
import bcrypt

BCRYPT_ROUNDS = 10

# bcrypt ignores (4.x) or rejects (5.x) anything past this many bytes
MAX_PASSWORD_BYTES = 72

# Compared against when the email is unknown so both failure paths cost a bcrypt check
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(BCRYPT_ROUNDS))


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: The password to hash

    Returns:
        Bcrypt hash string
    """
    salt = bcrypt.gensalt(BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Args:
        password: The password to verify
        password_hash: The stored bcrypt hash

    Returns:
        True if the password matches, False otherwise
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash, or a password longer than bcrypt accepts
        return False


def burn_password_check(password: str) -> None:
    """
    Run a bcrypt comparison whose result is discarded.

    Input bcrypt refuses is dropped silently, as verify_password does for a
    known user.
    """
    try:
        bcrypt.checkpw(password.encode('utf-8'), _DUMMY_HASH)
    except ValueError:
        pass


def generate_verification_token() -> str:
    """
    Generate a new email verification token.

    Returns:
        URL-safe random token string
    """
    return secrets.token_urlsafe(32)


def tokens_match(provided: str, expected: str) -> bool:
    """Constant-time comparison of two tokens."""
    return secrets.compare_digest(provided.encode('utf-8'), expected.encode('utf-8'))
