"""
zkLogin backend using FastAPI.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zklogin.common.config import Config
from zklogin.common.exceptions import (
    EpochUnavailable,
    MissingProofInput,
    ProofServiceError,
    SaltServiceError,
    ZkLoginError,
)
from zklogin.common.interfaces import IEpochSource, IProofBroker  # noqa: TC001
from zklogin.common.ledger import LedgerClient
from zklogin.common.logging_utils import setup_logger
from zklogin.common.models import SaltBackupRequest, SaltRequest, ZkProofRequest
from zklogin.common.proof_broker import ProofBroker
from zklogin.common.tokens import TokenVerifier

from .backup import SaltBackupNotifier
from .salt_store import SaltStore


class ZkLoginServer:
    """Backend serving epoch, salt, proof and salt backup routes."""

    def __init__(  # noqa: PLR0913
        self,
        config: Config | None = None,
        log_level: int | None = None,
        epoch_source: IEpochSource | None = None,
        proof_broker: IProofBroker | None = None,
        salt_store: SaltStore | None = None,
        notifier: SaltBackupNotifier | None = None,
    ):
        self.config = config or Config()
        self.logger = logging.getLogger(__name__)
        setup_logger(
            self.logger, log_level if log_level is not None else self.config.LOG_LEVEL
        )
        self.server_host = self.config.SERVER_HOST
        self.server_port = self.config.SERVER_PORT

        self.epoch_source = epoch_source or LedgerClient(
            self.config.FULLNODE_URL, timeout=self.config.HTTP_TIMEOUT
        )
        self.proof_broker = proof_broker or ProofBroker(
            self.config.PROVER_URL,
            timeout=self.config.PROOF_TIMEOUT,
            key_claim_name=self.config.KEY_CLAIM_NAME,
        )
        if salt_store is None:
            if not self.config.SALT_MASTER_SECRET:
                msg = (
                    "ZKLOGIN_SALT_MASTER_SECRET must be set; salts derived from a "
                    "default secret would not be stable or private."
                )
                raise ValueError(msg)
            token_verifier = None
            if self.config.VERIFY_TOKEN_SIGNATURE:
                token_verifier = TokenVerifier(
                    self.config.JWKS_URL, self.config.ALLOWED_CLIENT_IDS
                )
            salt_store = SaltStore(
                self.config.SALT_MASTER_SECRET,
                self.config.ALLOWED_CLIENT_IDS,
                token_verifier,
            )
        self.salt_store = salt_store
        self.notifier = notifier or SaltBackupNotifier()

        self.app = FastAPI()
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=[self.config.REDIRECT_URL],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
        self._setup_routes()

        self.logger.info("Prover URL: %s", self.config.PROVER_URL)
        self.logger.info("Fullnode URL: %s", self.config.FULLNODE_URL)

    def _setup_routes(self) -> None:
        """Setup API routes."""

        @self.app.get("/health")
        def health() -> dict[str, Any]:
            return {"status": "ok", "timestamp": int(time.time())}

        router = APIRouter()
        router.get("/epoch")(self.epoch)
        router.post("/salt")(self.salt)
        router.post("/zkproof")(self.zkproof)
        router.post("/email-salt-backup")(self.email_salt_backup)
        self.app.include_router(router, prefix=self.config.API_PREFIX)

    def epoch(self) -> Any:
        """Handle /epoch endpoint."""
        try:
            return self.epoch_source.get_epoch_info().to_wire()
        except EpochUnavailable as e:
            self.logger.error("Error fetching epoch: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)

    def salt(self, req: SaltRequest) -> Any:
        """Handle /salt endpoint."""
        try:
            return {"salt": self.salt_store.salt_for_token(req.token)}
        except SaltServiceError as e:
            return JSONResponse(
                {
                    "error": "Salt service error",
                    "details": json.dumps({"error": str(e)}),
                },
                status_code=e.status_code,
            )

    def zkproof(self, req: ZkProofRequest) -> Any:
        """Handle /zkproof endpoint."""
        try:
            bundle = self.proof_broker.request_proof(
                req.jwt,
                req.extended_ephemeral_public_key,
                req.max_epoch,
                req.jwt_randomness,
                req.salt,
            )
        except MissingProofInput:
            return JSONResponse({"error": "Missing required fields"}, status_code=400)
        except ProofServiceError as e:
            self.logger.error("Error generating ZK proof: %s", e)
            return JSONResponse({"error": str(e)}, status_code=500)
        return bundle.to_wire()

    def email_salt_backup(self, req: SaltBackupRequest) -> Any:
        """Handle /email-salt-backup endpoint."""
        try:
            return self.notifier.send(req).to_wire()
        except ZkLoginError as e:
            status = 400 if e.status_code == 400 else 500  # noqa: PLR2004
            return JSONResponse({"error": str(e)}, status_code=status)
