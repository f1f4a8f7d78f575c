"""
JWT token issuer adapter - Implements TokenIssuer protocol via PyJWT.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt


class JwtTokenIssuer:
    """Mints signed bearer tokens carrying identity claims."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        default_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._default_ttl = default_ttl

    def issue(self, claims: dict[str, Any], ttl: timedelta | None = None) -> str:
        now = datetime.now(timezone.utc)
        payload = {**claims, "iat": now, "exp": now + (ttl or self._default_ttl)}
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> dict[str, Any]:
        """
        Verify signature and expiry and return the claims.

        Raises:
            jwt.PyJWTError: If the token is invalid or expired
        """
        return jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
