"""
Composite signature assembly and transaction submission for zkLogin sessions.
"""

from __future__ import annotations

import base64
import logging
from typing import TYPE_CHECKING, Any

from zklogin.client.session_manager import SessionManager
from zklogin.common.address import address_seed_for
from zklogin.common.bcs import serialize_zklogin_signature
from zklogin.common.crypto import CryptoUtils
from zklogin.common.exceptions import SessionExpired, UnauthorizedSigner
from zklogin.common.models import AuthenticatedSession, CompositeSignature

if TYPE_CHECKING:
    from zklogin.common.interfaces import IEpochSource
    from zklogin.common.ledger import LedgerClient

logger = logging.getLogger(__name__)


class SignatureAssembler:
    """Signs transactions on behalf of an authenticated session."""

    def __init__(
        self,
        epoch_source: IEpochSource,
        ledger: LedgerClient | None = None,
        key_claim_name: str = "sub",
    ):
        self.epoch_source = epoch_source
        self.ledger = ledger
        self.key_claim_name = key_claim_name

    def check_not_expired(self, session: AuthenticatedSession) -> int:
        """Read the live epoch and fail if the session is past it."""
        current_epoch = self.epoch_source.get_epoch_info().epoch
        if current_epoch > session.binding.max_epoch:
            raise SessionExpired(session.binding.max_epoch, current_epoch)
        return current_epoch

    @staticmethod
    def check_signer(session: AuthenticatedSession) -> None:
        """The ephemeral key must be the one the token nonce commits to."""
        binding = session.binding
        try:
            nonce = SessionManager.compute_nonce(binding)
        except (ValueError, OverflowError) as e:
            msg = "Ephemeral key is unreadable"
            raise UnauthorizedSigner(msg) from e
        if nonce != binding.nonce or nonce != session.claims.nonce:
            msg = "Ephemeral key does not match the key bound to the proof"
            raise UnauthorizedSigner(msg)

    def sign(
        self, session: AuthenticatedSession, transaction_bytes: bytes
    ) -> CompositeSignature:
        """Produce a single-use composite signature over ``transaction_bytes``."""
        self.check_not_expired(session)
        self.check_signer(session)

        private_key = SessionManager.ephemeral_key(session.binding)
        user_signature = CryptoUtils.sign_transaction(private_key, transaction_bytes)
        address_seed = address_seed_for(session.claims, session.salt, self.key_claim_name)
        signature = serialize_zklogin_signature(
            session.proof,
            address_seed,
            session.binding.max_epoch,
            user_signature,
        )
        return CompositeSignature(
            signature=signature,
            user_signature=user_signature,
            address_seed=address_seed,
            max_epoch=session.binding.max_epoch,
            tx_bytes=base64.b64encode(transaction_bytes).decode(),
        )

    def execute(
        self, session: AuthenticatedSession, transaction_bytes: bytes
    ) -> dict[str, Any]:
        """Sign and submit a transaction to the ledger."""
        if self.ledger is None:
            msg = "No ledger client configured"
            raise ValueError(msg)
        composite = self.sign(session, transaction_bytes)
        logger.info("Executing transaction from %s", session.address)
        return self.ledger.execute_transaction(composite.tx_bytes, [composite.signature])
