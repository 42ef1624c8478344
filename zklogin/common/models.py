"""
Pydantic models for request/response validation and persisted login state.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WireModel(BaseModel):
    """Base for models exchanged with the backend, prover and ledger."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class EpochInfo(WireModel):
    epoch: int
    epoch_duration_ms: int = Field(alias="epochDurationMs")
    epoch_start_timestamp_ms: int = Field(alias="epochStartTimestampMs")


class SaltRequest(BaseModel):
    token: str | None = None


class SaltResponse(BaseModel):
    salt: str = Field(pattern=r"^[0-9]{1,39}$")


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class ZkProofRequest(WireModel):
    jwt: str | None = None
    extended_ephemeral_public_key: str | None = Field(
        default=None, alias="extendedEphemeralPublicKey"
    )
    max_epoch: int | None = Field(default=None, alias="maxEpoch")
    jwt_randomness: str | None = Field(default=None, alias="jwtRandomness")
    salt: str | None = None
    key_claim_name: str = Field(default="sub", alias="keyClaimName")


class ProofPoints(BaseModel):
    a: list[str]
    b: list[list[str]]
    c: list[str]


class IssBase64Details(WireModel):
    value: str
    index_mod4: int = Field(alias="indexMod4")


class ZkProofBundle(WireModel):
    proof_points: ProofPoints = Field(alias="proofPoints")
    iss_base64_details: IssBase64Details = Field(alias="issBase64Details")
    header_base64: str = Field(alias="headerBase64")


class SaltBackupRequest(WireModel):
    user_sub: str | None = Field(default=None, alias="userSub")
    user_email: str | None = Field(default=None, alias="userEmail")
    user_salt: str | None = Field(default=None, alias="userSalt")
    timestamp: str | None = None


class SaltBackupResponse(WireModel):
    success: bool
    message: str
    user_sub: str = Field(alias="userSub")
    timestamp: str | None = None


class JwtClaims(BaseModel):
    """Decoded identity token claims. Unknown claims are kept."""

    model_config = ConfigDict(extra="allow")

    iss: str | None = None
    sub: str | None = None
    aud: str | list[str] | None = None
    exp: int | None = None
    nbf: int | None = None
    iat: int | None = None
    jti: str | None = None
    nonce: str | None = None
    email: str | None = None

    @property
    def audience(self) -> str | None:
        """First audience entry when the claim is a list."""
        if isinstance(self.aud, list):
            return self.aud[0] if self.aud else None
        return self.aud or None


class SessionBinding(BaseModel):
    """Ephemeral key, epoch bound and randomness behind one login nonce."""

    ephemeral_private_key: str
    max_epoch: int
    randomness: str
    nonce: str


class AuthenticatedSession(BaseModel):
    binding: SessionBinding
    salt: str
    proof: ZkProofBundle
    claims: JwtClaims
    address: str


class CompositeSignature(BaseModel):
    signature: str
    user_signature: str
    address_seed: str
    max_epoch: int
    tx_bytes: str
