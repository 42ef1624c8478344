"""
Session management for one zkLogin attempt: ephemeral key, nonce and epoch bound.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from zklogin.common.crypto import CryptoUtils
from zklogin.common.exceptions import EpochUnavailable, NoActiveSession, ZkLoginError
from zklogin.common.models import (
    AuthenticatedSession,
    JwtClaims,
    SessionBinding,
    ZkProofBundle,
)

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

    from zklogin.common.interfaces import IEpochSource, ISessionStore

logger = logging.getLogger(__name__)


class SessionKeys:
    """Field names in session-scoped storage."""

    EPHEMERAL_PRIVATE_KEY = "ephemeral_private_key"
    MAX_EPOCH = "max_epoch"
    RANDOMNESS = "randomness"
    NONCE = "nonce"
    ZK_PROOF = "zk_proof"
    USER_SALT = "user_salt"
    DECODED_JWT = "decoded_jwt"
    ZKLOGIN_ADDRESS = "zklogin_address"
    SALT_BACKUP_SENT = "salt_backup_sent"

    ALL = (
        EPHEMERAL_PRIVATE_KEY,
        MAX_EPOCH,
        RANDOMNESS,
        NONCE,
        ZK_PROOF,
        USER_SALT,
        DECODED_JWT,
        ZKLOGIN_ADDRESS,
        SALT_BACKUP_SENT,
    )


class SessionManager:
    """Owns the session binding and the authenticated session in storage."""

    def __init__(
        self,
        store: ISessionStore,
        epoch_source: IEpochSource | None = None,
        max_epoch_offset: int = 2,
    ):
        self.store = store
        self.epoch_source = epoch_source
        self.max_epoch_offset = max_epoch_offset

    def _current_epoch(self) -> int:
        if self.epoch_source is None:
            msg = "No epoch source configured"
            raise EpochUnavailable(msg)
        try:
            return self.epoch_source.get_epoch_info().epoch
        except EpochUnavailable:
            raise
        except ZkLoginError as e:
            msg = f"Failed to fetch epoch info: {e}"
            raise EpochUnavailable(msg) from e

    @staticmethod
    def compute_nonce(binding: SessionBinding) -> str:
        """Recompute the nonce from the binding's key, epoch and randomness."""
        private_key = CryptoUtils.private_key_from_hex(binding.ephemeral_private_key)
        return CryptoUtils.generate_nonce(
            CryptoUtils.public_key_bytes(private_key),
            binding.max_epoch,
            binding.randomness,
        )

    @staticmethod
    def ephemeral_key(binding: SessionBinding) -> Ed25519PrivateKey:
        return CryptoUtils.private_key_from_hex(binding.ephemeral_private_key)

    def begin_session(self, current_epoch: int | None = None) -> SessionBinding:
        """Start a login attempt, replacing any attempt already in flight.

        The epoch is read live from the epoch source when not given.
        """
        if current_epoch is None:
            current_epoch = self._current_epoch()
        max_epoch = current_epoch + self.max_epoch_offset

        private_key = CryptoUtils.generate_ephemeral_key()
        randomness = CryptoUtils.generate_randomness()
        nonce = CryptoUtils.generate_nonce(
            CryptoUtils.public_key_bytes(private_key), max_epoch, randomness
        )
        binding = SessionBinding(
            ephemeral_private_key=CryptoUtils.private_key_to_hex(private_key),
            max_epoch=max_epoch,
            randomness=randomness,
            nonce=nonce,
        )

        self.end_session()
        self.store.write(
            {
                SessionKeys.EPHEMERAL_PRIVATE_KEY: binding.ephemeral_private_key,
                SessionKeys.MAX_EPOCH: str(binding.max_epoch),
                SessionKeys.RANDOMNESS: binding.randomness,
                SessionKeys.NONCE: binding.nonce,
            }
        )
        logger.info("Prepared login: maxEpoch=%s nonce=%s", max_epoch, nonce)
        return binding

    def resume_session(self) -> SessionBinding:
        """Reload the persisted binding, failing closed on any missing field."""
        key_hex = self.store.read(SessionKeys.EPHEMERAL_PRIVATE_KEY)
        max_epoch = self.store.read(SessionKeys.MAX_EPOCH)
        randomness = self.store.read(SessionKeys.RANDOMNESS)
        nonce = self.store.read(SessionKeys.NONCE)
        if not key_hex or not max_epoch or not randomness or not nonce:
            raise NoActiveSession("Missing session data. Please login again.")

        try:
            binding = SessionBinding(
                ephemeral_private_key=key_hex,
                max_epoch=int(max_epoch),
                randomness=randomness,
                nonce=nonce,
            )
            # key, epoch and randomness must all still feed the nonce hash
            self.compute_nonce(binding)
        except (ValueError, OverflowError, ValidationError) as e:
            msg = "Corrupted session data. Please login again."
            raise NoActiveSession(msg) from e
        return binding

    def verify_binding(self, binding: SessionBinding, claimed_nonce: str | None) -> bool:
        """Exact comparison of the recomputed nonce with ``claimed_nonce``."""
        if claimed_nonce is None:
            return False
        return self.compute_nonce(binding) == claimed_nonce

    def end_session(self) -> None:
        """Erase every session field."""
        self.store.clear(list(SessionKeys.ALL))

    def save_salt(self, salt: str) -> None:
        self.store.write({SessionKeys.USER_SALT: salt})

    def backup_already_sent(self) -> bool:
        return self.store.read(SessionKeys.SALT_BACKUP_SENT) == "true"

    def mark_backup_sent(self) -> None:
        self.store.write({SessionKeys.SALT_BACKUP_SENT: "true"})

    def save_authenticated(self, session: AuthenticatedSession) -> None:
        self.store.write(
            {
                SessionKeys.ZK_PROOF: session.proof.model_dump_json(by_alias=True),
                SessionKeys.USER_SALT: session.salt,
                SessionKeys.DECODED_JWT: session.claims.model_dump_json(
                    exclude_none=True
                ),
                SessionKeys.ZKLOGIN_ADDRESS: session.address,
            }
        )

    def load_authenticated(self) -> AuthenticatedSession:
        """Reload the authenticated session or raise NoActiveSession."""
        binding = self.resume_session()
        proof = self.store.read(SessionKeys.ZK_PROOF)
        salt = self.store.read(SessionKeys.USER_SALT)
        claims = self.store.read(SessionKeys.DECODED_JWT)
        address = self.store.read(SessionKeys.ZKLOGIN_ADDRESS)
        if not proof or not salt or not claims or not address:
            msg = "Missing zkLogin session data. Please login again."
            raise NoActiveSession(msg)
        try:
            return AuthenticatedSession(
                binding=binding,
                salt=salt,
                proof=ZkProofBundle.model_validate_json(proof),
                claims=JwtClaims.model_validate_json(claims),
                address=address,
            )
        except ValidationError as e:
            msg = "Corrupted zkLogin session data. Please login again."
            raise NoActiveSession(msg) from e

    def is_session_active(self) -> bool:
        return self.store.read(SessionKeys.ZKLOGIN_ADDRESS) is not None

    def get_address(self) -> str | None:
        return self.store.read(SessionKeys.ZKLOGIN_ADDRESS)

    def get_decoded_claims(self) -> JwtClaims | None:
        raw = self.store.read(SessionKeys.DECODED_JWT)
        if not raw:
            return None
        try:
            return JwtClaims.model_validate_json(raw)
        except ValidationError:
            logger.warning("Stored claims are unreadable")
            return None
