"""
Deterministic salt derivation with an optional in-process cache.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import TYPE_CHECKING

from zklogin.common.exceptions import InvalidClientId, SaltServiceError, ZkLoginError
from zklogin.common.logging_utils import truncate_token
from zklogin.common.tokens import decode_token, require_subject

if TYPE_CHECKING:
    from zklogin.common.tokens import TokenVerifier

logger = logging.getLogger(__name__)

SALT_BYTES = 16


class SaltStore:
    """Maps a subject identifier to its long-lived salt.

    The salt is HMAC-SHA256(master secret, subject) truncated to 16 bytes
    and rendered as a decimal integer, so it fits below 2**128 and is
    identical across restarts. The cache only saves recomputation.
    """

    def __init__(
        self,
        master_secret: str,
        allowed_client_ids: list[str],
        token_verifier: TokenVerifier | None = None,
        *,
        use_cache: bool = True,
    ):
        if not master_secret:
            msg = "A salt master secret is required"
            raise ValueError(msg)
        self._master_secret = master_secret.encode()
        self.allowed_client_ids = allowed_client_ids
        self.token_verifier = token_verifier
        self.use_cache = use_cache
        self._cache: dict[str, str] = {}

    def derive_salt(self, subject_id: str) -> str:
        """Derive the salt without consulting the cache."""
        digest = hmac.new(self._master_secret, subject_id.encode(), hashlib.sha256)
        return str(int.from_bytes(digest.digest()[:SALT_BYTES], "big"))

    def get_or_create_salt(self, subject_id: str) -> str:
        if self.use_cache and subject_id in self._cache:
            logger.debug("Returning cached salt for user %s", subject_id)
            return self._cache[subject_id]
        salt = self.derive_salt(subject_id)
        if self.use_cache:
            self._cache[subject_id] = salt
        logger.info("Derived salt for user %s", subject_id)
        return salt

    def clear_cache(self) -> None:
        self._cache.clear()

    def salt_for_token(self, token: str | None) -> str:
        """Return the salt for the token's subject after checking the token."""
        logger.info("Salt request for token %s", truncate_token(token or ""))
        try:
            claims = decode_token(token or "")
            if self.token_verifier is not None:
                self.token_verifier.verify(token or "")
            subject = require_subject(claims)
        except ZkLoginError as e:
            logger.warning("Rejected salt request: %s", e)
            raise SaltServiceError(str(e), status_code=403) from e

        audience = claims.audience
        if not audience or audience not in self.allowed_client_ids:
            logger.warning(
                "Client ID mismatch: received=%s expected=%s",
                audience,
                self.allowed_client_ids,
            )
            raise InvalidClientId

        return self.get_or_create_salt(subject)
