"""
Login orchestration: prepare, provider round trip, verification, salt, proof.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from zklogin.client.provider import build_authorize_url
from zklogin.common.address import jwt_to_address
from zklogin.common.crypto import CryptoUtils
from zklogin.common.exceptions import (
    MalformedToken,
    MissingAudience,
    NonceMismatch,
    ZkLoginError,
)
from zklogin.common.models import AuthenticatedSession
from zklogin.common.tokens import decode_token, require_subject

if TYPE_CHECKING:
    from zklogin.client.salt_client import SaltClient
    from zklogin.client.session_manager import SessionManager
    from zklogin.common.interfaces import IProofBroker
    from zklogin.common.tokens import TokenVerifier

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    IDLE = "Idle"
    AWAITING_PROVIDER = "AwaitingProvider"
    TOKEN_RECEIVED = "TokenReceived"
    NONCE_VERIFIED = "NonceVerified"
    SALT_OBTAINED = "SaltObtained"
    PROOF_OBTAINED = "ProofObtained"
    AUTHENTICATED = "Authenticated"


@dataclass
class LoginFailure:
    """Where the last attempt stopped and why."""

    state: LoginState
    error: ZkLoginError


class LoginOrchestrator:
    """Drives one login attempt through the two-phase flow.

    ``prepare_login`` creates the session binding and returns the provider
    URL. ``complete_login`` resumes with the returned token; every failure
    collapses the attempt back to ``Idle`` and discards the binding, since
    the nonce was already spent on the provider redirect.
    """

    def __init__(  # noqa: PLR0913
        self,
        session_manager: SessionManager,
        salt_client: SaltClient,
        proof_broker: IProofBroker,
        client_id: str,
        redirect_url: str,
        authorize_url: str = "https://accounts.google.com/o/oauth2/v2/auth",
        token_verifier: TokenVerifier | None = None,
        key_claim_name: str = "sub",
    ):
        self.session_manager = session_manager
        self.salt_client = salt_client
        self.proof_broker = proof_broker
        self.client_id = client_id
        self.redirect_url = redirect_url
        self.authorize_url = authorize_url
        self.token_verifier = token_verifier
        self.key_claim_name = key_claim_name
        self.state = LoginState.IDLE
        self.failure: LoginFailure | None = None
        if self.session_manager.is_session_active():
            self.state = LoginState.AUTHENTICATED

    def prepare_login(self, current_epoch: int | None = None) -> str:
        """Start a new attempt and return the provider redirect URL."""
        self.failure = None
        try:
            binding = self.session_manager.begin_session(current_epoch)
        except ZkLoginError as e:
            self._fail(e, discard=False)
            raise
        self.state = LoginState.AWAITING_PROVIDER
        return build_authorize_url(
            self.authorize_url, self.client_id, self.redirect_url, binding.nonce
        )

    def complete_login(self, token: str) -> AuthenticatedSession:
        """Resume with the provider's token and finish the login.

        An already authenticated session is returned untouched.
        """
        if self.session_manager.is_session_active():
            existing = self.session_manager.load_authenticated()
            self.state = LoginState.AUTHENTICATED
            logger.info("Session already authenticated; ignoring callback token")
            return existing

        try:
            return self._complete(token)
        except ZkLoginError as e:
            self._fail(e, discard=True)
            raise

    def _complete(self, token: str) -> AuthenticatedSession:
        binding = self.session_manager.resume_session()

        self.state = LoginState.TOKEN_RECEIVED
        claims = decode_token(token)
        if self.token_verifier is not None:
            self.token_verifier.verify(token)
        subject = require_subject(claims)
        if not claims.audience:
            raise MissingAudience
        if not claims.iss:
            msg = "Missing issuer (iss)"
            raise MalformedToken(msg)

        if claims.nonce != binding.nonce:
            logger.error("Nonce mismatch for subject %s", subject)
            msg = "Nonce mismatch. Please try logging in again."
            raise NonceMismatch(msg)
        if not self.session_manager.verify_binding(binding, claims.nonce):
            logger.error("Failed to recreate matching nonce")
            msg = "Ephemeral key mismatch. Please try logging in again."
            raise NonceMismatch(msg)
        self.state = LoginState.NONCE_VERIFIED

        salt = self.salt_client.fetch_salt(token)
        self.session_manager.save_salt(salt)
        # a device copy means this subject was already backed up here
        known_on_device = self.salt_client.recover_locally(subject) is not None
        self.salt_client.remember_locally(subject, salt)
        if not known_on_device and not self.session_manager.backup_already_sent():
            self.session_manager.mark_backup_sent()
            self.salt_client.backup(subject, salt, claims.email)
        self.state = LoginState.SALT_OBTAINED

        private_key = self.session_manager.ephemeral_key(binding)
        proof = self.proof_broker.request_proof(
            token,
            CryptoUtils.extended_public_key(CryptoUtils.public_key_bytes(private_key)),
            binding.max_epoch,
            binding.randomness,
            salt,
        )
        self.state = LoginState.PROOF_OBTAINED

        session = AuthenticatedSession(
            binding=binding,
            salt=salt,
            proof=proof,
            claims=claims,
            address=jwt_to_address(claims, salt, self.key_claim_name),
        )
        self.session_manager.save_authenticated(session)
        self.state = LoginState.AUTHENTICATED
        logger.info("zkLogin complete: address=%s", session.address)
        return session

    def _fail(self, error: ZkLoginError, *, discard: bool) -> None:
        self.failure = LoginFailure(self.state, error)
        logger.warning("Login failed in state %s: %s", self.state.value, error)
        if discard:
            self.session_manager.end_session()
        self.state = LoginState.IDLE

    def logout(self) -> None:
        self.session_manager.end_session()
        self.state = LoginState.IDLE
        self.failure = None
