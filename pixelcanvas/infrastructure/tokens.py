"""Token Verifier — maps an opaque bearer token to a user identity.

Invariants:
    - Tokens are only verified here, never issued (the identity service signs them)
    - `sub` carries the integer user id, `name` the display name
    - Every verification failure surfaces as AuthenticationError (never JWTError)

Design Decisions:
    - python-jose HS256 with a shared secret from Settings
    - Verifier is an object (not module functions) so tests can build one per secret
"""

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt

from pixelcanvas.core.domain_types import UserId
from pixelcanvas.core.errors import AuthenticationError


@dataclass(frozen=True)
class Identity:
    """Authenticated actor resolved from a token."""
    user_id: UserId
    name: str


class TokenVerifier:
    """Decodes and validates signed bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm

    def _decode(self, token: str) -> dict[str, Any]:
        return jwt.decode(token, self._secret, algorithms=[self._algorithm])

    def verify(self, token: str | None) -> Identity:
        if not token:
            raise AuthenticationError("Not authenticated")
        try:
            payload = self._decode(token)
            sub = payload.get("sub")
            if sub is None:
                raise AuthenticationError()
            user_id = UserId(int(sub))
        except (JWTError, ValueError, TypeError):
            raise AuthenticationError()
        name = payload.get("name") or f"user-{user_id}"
        return Identity(user_id=user_id, name=str(name))
