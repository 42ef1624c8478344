"""
Identity token decoding and optional provider signature verification.
"""

from __future__ import annotations

import logging

import jwt
from pydantic import ValidationError

from zklogin.common.exceptions import MalformedToken
from zklogin.common.models import JwtClaims

logger = logging.getLogger(__name__)

JWT_PARTS = 3


def decode_token(token: str) -> JwtClaims:
    """Decode token claims without checking the provider signature."""
    if not isinstance(token, str) or len(token.split(".")) != JWT_PARTS:
        msg = "Invalid JWT format"
        raise MalformedToken(msg)
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as e:
        msg = f"Invalid JWT: {e}"
        raise MalformedToken(msg) from e
    try:
        return JwtClaims.model_validate(payload)
    except ValidationError as e:
        msg = f"Invalid JWT claims: {e}"
        raise MalformedToken(msg) from e


def require_subject(claims: JwtClaims) -> str:
    if not claims.sub:
        msg = "Missing user subject (sub)"
        raise MalformedToken(msg)
    return claims.sub


class TokenVerifier:
    """Checks the provider signature of an identity token against its JWKS."""

    def __init__(self, jwks_url: str, audiences: list[str] | None = None):
        self.jwks_url = jwks_url
        self.audiences = audiences or []
        self._jwks_client = jwt.PyJWKClient(jwks_url)

    def verify(self, token: str) -> JwtClaims:
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.audiences or None,
                options={"verify_aud": bool(self.audiences)},
            )
        except jwt.PyJWTError as e:
            logger.warning("Identity token signature check failed: %s", e)
            msg = f"Identity token failed verification: {e}"
            raise MalformedToken(msg) from e
        return JwtClaims.model_validate(payload)
