"""
Client for the zero-knowledge proving service.
"""

from __future__ import annotations

import logging

import requests
from pydantic import ValidationError

from zklogin.common.exceptions import MissingProofInput, ProofServiceError
from zklogin.common.logging_utils import truncate_token
from zklogin.common.models import ZkProofBundle, ZkProofRequest

logger = logging.getLogger(__name__)


class ProofBroker:
    """Posts proof requests to a prover endpoint and parses the bundle.

    The same broker serves the browser-side client (pointed at the
    backend's ``/zkproof`` route) and the backend (pointed at the prover).
    """

    def __init__(self, prover_url: str, timeout: float = 60, key_claim_name: str = "sub"):
        self.prover_url = prover_url
        self.timeout = timeout
        self.key_claim_name = key_claim_name

    @staticmethod
    def check_inputs(req: ZkProofRequest) -> None:
        """Raise MissingProofInput unless all five inputs are present."""
        values = {
            "jwt": req.jwt,
            "extendedEphemeralPublicKey": req.extended_ephemeral_public_key,
            "maxEpoch": req.max_epoch,
            "jwtRandomness": req.jwt_randomness,
            "salt": req.salt,
        }
        # maxEpoch 0 is rejected like an absent value
        missing = [name for name, value in values.items() if value in (None, "", 0)]
        if missing:
            raise MissingProofInput(missing)

    def request_proof(
        self,
        jwt: str | None,
        extended_ephemeral_public_key: str | None,
        max_epoch: int | None,
        jwt_randomness: str | None,
        salt: str | None,
    ) -> ZkProofBundle:
        """Request a proof; blocks until the prover answers."""
        req = ZkProofRequest(
            jwt=jwt,
            extended_ephemeral_public_key=extended_ephemeral_public_key,
            max_epoch=max_epoch,
            jwt_randomness=jwt_randomness,
            salt=salt,
            key_claim_name=self.key_claim_name,
        )
        return self.submit(req)

    def submit(self, req: ZkProofRequest) -> ZkProofBundle:
        self.check_inputs(req)
        logger.info(
            "Requesting ZK proof (jwt=%s, maxEpoch=%s)",
            truncate_token(req.jwt or ""),
            req.max_epoch,
        )

        try:
            r = requests.post(self.prover_url, json=req.to_wire(), timeout=self.timeout)
        except requests.RequestException as e:
            msg = f"Prover service unreachable: {e}"
            raise ProofServiceError(msg) from e

        if not r.ok:
            logger.error("Prover error response: %s %s", r.status_code, r.text)
            msg = f"Prover service error: {r.reason} - {r.text}"
            raise ProofServiceError(
                msg, upstream_status=r.status_code, upstream_text=r.text
            )

        try:
            bundle = ZkProofBundle.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            msg = f"Prover returned an invalid proof bundle: {e}"
            raise ProofServiceError(
                msg, upstream_status=r.status_code, upstream_text=r.text
            ) from e

        logger.info("ZK proof generated successfully")
        return bundle
