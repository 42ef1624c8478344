"""
zkLogin client: wires storage, backend, orchestrator and signer from config.
"""

from __future__ import annotations

import logging
from pathlib import Path  # noqa: TC003
from typing import Any

from zklogin.client.backend import BackendClient
from zklogin.client.orchestrator import LoginOrchestrator
from zklogin.client.provider import parse_callback_fragment
from zklogin.client.salt_client import SaltClient
from zklogin.client.session_manager import SessionManager
from zklogin.client.session_store import FileSessionStore, MemorySessionStore
from zklogin.client.signer import SignatureAssembler
from zklogin.common.config import Config
from zklogin.common.exceptions import MalformedToken
from zklogin.common.interfaces import ISessionStore  # noqa: TC001
from zklogin.common.ledger import LedgerClient
from zklogin.common.logging_utils import setup_logger
from zklogin.common.models import (
    AuthenticatedSession,
    CompositeSignature,
    JwtClaims,
)
from zklogin.common.proof_broker import ProofBroker
from zklogin.common.tokens import TokenVerifier


class ZkLoginClient:
    """Client-side entry point for the zkLogin flow."""

    def __init__(  # noqa: PLR0913
        self,
        api_url: str | None = None,
        client_id: str | None = None,
        redirect_url: str | None = None,
        fullnode_url: str | None = None,
        session_file: Path | None = None,
        device_file: Path | None = None,
        session_store: ISessionStore | None = None,
        device_store: ISessionStore | None = None,
        log_level: int | None = None,
        config: Config | None = None,
    ):
        self.config = config or Config()
        self.api_url = api_url or self.config.API_URL
        self.client_id = client_id or self.config.CLIENT_ID
        if not self.client_id:
            msg = "A client id is required (set ZKLOGIN_CLIENT_ID)"
            raise ValueError(msg)

        self.logger = logging.getLogger(__name__)
        setup_logger(
            self.logger, log_level if log_level is not None else self.config.LOG_LEVEL
        )

        if session_store is None:
            session_store = (
                FileSessionStore(session_file) if session_file else MemorySessionStore()
            )
        if device_store is None:
            device_store = (
                FileSessionStore(device_file) if device_file else MemorySessionStore()
            )

        self.backend = BackendClient(self.api_url, timeout=self.config.HTTP_TIMEOUT)
        self.ledger = LedgerClient(
            fullnode_url or self.config.FULLNODE_URL, timeout=self.config.HTTP_TIMEOUT
        )
        self.session_manager = SessionManager(
            session_store, self.backend, self.config.MAX_EPOCH_OFFSET
        )
        self.salt_client = SaltClient(self.backend, device_store)
        self.proof_broker = ProofBroker(
            f"{self.api_url}/zkproof",
            timeout=self.config.PROOF_TIMEOUT,
            key_claim_name=self.config.KEY_CLAIM_NAME,
        )
        token_verifier = None
        if self.config.VERIFY_TOKEN_SIGNATURE:
            token_verifier = TokenVerifier(self.config.JWKS_URL, [self.client_id])
        self.orchestrator = LoginOrchestrator(
            self.session_manager,
            self.salt_client,
            self.proof_broker,
            client_id=self.client_id,
            redirect_url=redirect_url or self.config.REDIRECT_URL,
            authorize_url=self.config.AUTHORIZE_URL,
            token_verifier=token_verifier,
            key_claim_name=self.config.KEY_CLAIM_NAME,
        )
        self.signer = SignatureAssembler(
            self.backend, self.ledger, self.config.KEY_CLAIM_NAME
        )

    def prepare_login(self) -> str:
        """Return the provider URL for a fresh login attempt."""
        return self.orchestrator.prepare_login()

    def complete_login(self, token_or_callback: str) -> AuthenticatedSession:
        """Finish the login from a raw token or the provider redirect URL."""
        token = token_or_callback
        if "#" in token_or_callback or "id_token=" in token_or_callback:
            token = parse_callback_fragment(token_or_callback) or ""
            if not token:
                msg = "No id_token in callback"
                raise MalformedToken(msg)
        return self.orchestrator.complete_login(token)

    def sign_transaction(self, transaction_bytes: bytes) -> CompositeSignature:
        session = self.session_manager.load_authenticated()
        return self.signer.sign(session, transaction_bytes)

    def execute_transaction(self, transaction_bytes: bytes) -> dict[str, Any]:
        session = self.session_manager.load_authenticated()
        return self.signer.execute(session, transaction_bytes)

    def is_session_active(self) -> bool:
        return self.session_manager.is_session_active()

    def get_address(self) -> str | None:
        return self.session_manager.get_address()

    def get_decoded_claims(self) -> JwtClaims | None:
        return self.session_manager.get_decoded_claims()

    def recover_salt(self, user_sub: str) -> str | None:
        """Device copy of a salt, for the recovery indicator only."""
        return self.salt_client.recover_locally(user_sub)

    def clear_salt_backups(self) -> None:
        self.salt_client.clear_salt_backups()

    def logout(self) -> None:
        self.orchestrator.logout()
