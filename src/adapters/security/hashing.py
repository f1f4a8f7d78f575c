"""
bcrypt hasher adapter - Implements PasswordHasher protocol.

Used for both candidate passwords and one-time codes; neither is ever
stored or compared in plaintext.
"""

import bcrypt

# bcrypt only considers the first 72 bytes of a secret
_MAX_SECRET_BYTES = 72


def _secret_bytes(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:_MAX_SECRET_BYTES]


class BcryptHasher:
    """
    Implements PasswordHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, cost: int = 10) -> None:
        self._cost = cost

    def hash(self, plaintext: str) -> str:
        return bcrypt.hashpw(_secret_bytes(plaintext), bcrypt.gensalt(rounds=self._cost)).decode()

    def verify(self, plaintext: str, digest: str) -> bool:
        """Constant-time check; a malformed digest is a mismatch, not an error."""
        try:
            return bcrypt.checkpw(_secret_bytes(plaintext), digest.encode())
        except ValueError:
            return False
