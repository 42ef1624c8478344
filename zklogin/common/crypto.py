"""Common cryptographic utilities for ephemeral keys, nonces and addresses.
"""

from __future__ import annotations

import base64
import hashlib
import os

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

# BN254 scalar field order, the field zkLogin public inputs live in
BN254_FIELD_SIZE = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
NONCE_LENGTH = 20
ED25519_FLAG = 0x00
ZKLOGIN_FLAG = 0x05
TRANSACTION_INTENT = bytes([0, 0, 0])
GOOGLE_ISSUER = "https://accounts.google.com"


class CryptoUtils:
    """Utility class for cryptographic operations."""

    @staticmethod
    def generate_ephemeral_key() -> Ed25519PrivateKey:
        """Generate a fresh Ed25519 keypair for one login session."""
        return Ed25519PrivateKey.generate()

    @staticmethod
    def private_key_to_hex(private_key: Ed25519PrivateKey) -> str:
        return private_key.private_bytes(
            serialization.Encoding.Raw,
            serialization.PrivateFormat.Raw,
            serialization.NoEncryption(),
        ).hex()

    @staticmethod
    def private_key_from_hex(value: str) -> Ed25519PrivateKey:
        """Load an ephemeral key; raises ValueError on malformed input."""
        return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(value))

    @staticmethod
    def public_key_bytes(private_key: Ed25519PrivateKey) -> bytes:
        return private_key.public_key().public_bytes(
            serialization.Encoding.Raw,
            serialization.PublicFormat.Raw,
        )

    @staticmethod
    def extended_public_key(public_key: bytes) -> str:
        """Decimal form of the scheme-flagged public key, as the prover expects."""
        return str(int.from_bytes(bytes([ED25519_FLAG]) + public_key, "big"))

    @staticmethod
    def generate_randomness(num_bytes: int = 16) -> str:
        return str(int.from_bytes(os.urandom(num_bytes), "big"))

    @staticmethod
    def hash_to_field(tag: bytes, *parts: bytes) -> int:
        """Length-prefixed SHA-256 of the parts, reduced into the BN254 field."""
        digest = hashlib.sha256(tag)
        for part in parts:
            digest.update(len(part).to_bytes(4, "big"))
            digest.update(part)
        return int.from_bytes(digest.digest(), "big") % BN254_FIELD_SIZE

    @staticmethod
    def generate_nonce(public_key: bytes, max_epoch: int, randomness: str) -> str:
        """Derive the login nonce from (public key, max epoch, randomness)."""
        flagged = int.from_bytes(bytes([ED25519_FLAG]) + public_key, "big")
        field = CryptoUtils.hash_to_field(
            b"zklogin-nonce",
            (flagged >> 128).to_bytes(17, "big"),
            (flagged % 2**128).to_bytes(16, "big"),
            max_epoch.to_bytes(8, "big"),
            int(randomness).to_bytes(32, "big"),
        )
        raw = field.to_bytes(32, "big")[-NONCE_LENGTH:]
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()

    @staticmethod
    def gen_address_seed(
        salt: str, claim_name: str, claim_value: str, audience: str
    ) -> str:
        """Derive the address seed from salt, key claim and audience."""
        salt_hash = CryptoUtils.hash_to_field(
            b"zklogin-salt", int(salt).to_bytes(32, "big")
        )
        seed = CryptoUtils.hash_to_field(
            b"zklogin-address-seed",
            claim_name.encode(),
            claim_value.encode(),
            audience.encode(),
            salt_hash.to_bytes(32, "big"),
        )
        return str(seed)

    @staticmethod
    def normalize_issuer(iss: str) -> str:
        if iss == "accounts.google.com":
            return GOOGLE_ISSUER
        return iss

    @staticmethod
    def compute_address(address_seed: str, iss: str) -> str:
        """Account address committed to by (issuer, address seed)."""
        iss_bytes = CryptoUtils.normalize_issuer(iss).encode()
        digest = hashlib.blake2b(digest_size=32)
        digest.update(bytes([ZKLOGIN_FLAG, len(iss_bytes)]))
        digest.update(iss_bytes)
        digest.update(int(address_seed).to_bytes(32, "big"))
        return "0x" + digest.hexdigest()

    @staticmethod
    def sign_transaction(private_key: Ed25519PrivateKey, tx_bytes: bytes) -> str:
        """Sign transaction bytes under the transaction intent.

        Returns the serialized signature (flag || signature || public key),
        base64 encoded.
        """
        digest = hashlib.blake2b(TRANSACTION_INTENT + tx_bytes, digest_size=32)
        signature = private_key.sign(digest.digest())
        serialized = (
            bytes([ED25519_FLAG])
            + signature
            + CryptoUtils.public_key_bytes(private_key)
        )
        return base64.b64encode(serialized).decode()
