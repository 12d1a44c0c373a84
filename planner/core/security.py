"""Password and refresh-token hashing (bcrypt) plus input length limits."""

import base64
import hashlib

import bcrypt

# Default bcrypt cost (rounds).
BCRYPT_ROUNDS = 10
BCRYPT_MIN_ROUNDS = 4
BCRYPT_MAX_ROUNDS = 31

# Min/max lengths for credential validation at the API boundary.
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 100
EMAIL_MAX_LEN = 255
NAME_MAX_LEN = 100
PASSWORD_MIN_LEN = 8
LOGIN_PASSWORD_MIN_LEN = 6
PASSWORD_MAX_LEN = 128


def _prehash(plaintext: str) -> bytes:
    # bcrypt only reads the first 72 bytes; JWT refresh tokens are far longer and
    # share a common prefix, so the whole value is digested first.
    digest = hashlib.sha256(plaintext.encode("utf-8")).digest()
    return base64.b64encode(digest)


class PasswordHasher:
    """
    Salted one-way hashing for user passwords and refresh tokens at rest.

    Each call to hash() yields a different digest for the same input.
    verify() goes through bcrypt's constant-time check and returns False
    for empty or malformed digests instead of raising.
    """

    def __init__(self, rounds: int = BCRYPT_ROUNDS) -> None:
        if not BCRYPT_MIN_ROUNDS <= rounds <= BCRYPT_MAX_ROUNDS:
            raise ValueError(
                f"bcrypt rounds must be between {BCRYPT_MIN_ROUNDS} and {BCRYPT_MAX_ROUNDS}"
            )
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a plain value for storage. Never store the plain value."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_prehash(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, digest: str | None) -> bool:
        """Verify a plain value against a stored digest."""
        if not digest:
            return False
        try:
            return bcrypt.checkpw(_prehash(plaintext), digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False
