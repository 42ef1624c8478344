"""
Address seed and account address derivation from token claims and salt.
"""

from __future__ import annotations

from zklogin.common.crypto import CryptoUtils
from zklogin.common.exceptions import MalformedToken, MissingAudience
from zklogin.common.models import JwtClaims


def address_seed_for(claims: JwtClaims, salt: str, key_claim_name: str = "sub") -> str:
    """Address seed for (salt, key claim, first audience)."""
    audience = claims.audience
    if not audience:
        raise MissingAudience
    claim_value = getattr(claims, key_claim_name, None)
    if not claim_value:
        msg = f"Missing user subject ({key_claim_name})"
        raise MalformedToken(msg)
    try:
        return CryptoUtils.gen_address_seed(salt, key_claim_name, claim_value, audience)
    except ValueError as e:
        msg = "Salt must be a decimal integer string"
        raise MalformedToken(msg) from e


def jwt_to_address(claims: JwtClaims, salt: str, key_claim_name: str = "sub") -> str:
    """Account address for the token's subject under ``salt``."""
    if not claims.iss:
        msg = "Missing issuer (iss)"
        raise MalformedToken(msg)
    seed = address_seed_for(claims, salt, key_claim_name)
    return CryptoUtils.compute_address(seed, claims.iss)
