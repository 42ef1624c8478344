"""
Minimal BCS (Binary Canonical Serialization) writer for zkLogin signatures.
"""

from __future__ import annotations

import base64

from zklogin.common.crypto import ZKLOGIN_FLAG
from zklogin.common.models import ZkProofBundle


class BcsWriter:
    """Appends BCS-encoded values to an internal buffer."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def uleb128(self, value: int) -> BcsWriter:
        while True:
            byte = value & 0x7F
            value >>= 7
            if value:
                self._buf.append(byte | 0x80)
            else:
                self._buf.append(byte)
                return self

    def u8(self, value: int) -> BcsWriter:
        self._buf += value.to_bytes(1, "little")
        return self

    def u64(self, value: int) -> BcsWriter:
        self._buf += value.to_bytes(8, "little")
        return self

    def byte_vector(self, value: bytes) -> BcsWriter:
        self.uleb128(len(value))
        self._buf += value
        return self

    def string(self, value: str) -> BcsWriter:
        return self.byte_vector(value.encode())

    def string_vector(self, values: list[str]) -> BcsWriter:
        self.uleb128(len(values))
        for value in values:
            self.string(value)
        return self

    def to_bytes(self) -> bytes:
        return bytes(self._buf)


def serialize_zklogin_signature(
    proof: ZkProofBundle,
    address_seed: str,
    max_epoch: int,
    user_signature: str,
) -> str:
    """Serialize the composite signature, flag-prefixed and base64 encoded."""
    writer = BcsWriter()
    points = proof.proof_points
    writer.string_vector(points.a)
    writer.uleb128(len(points.b))
    for row in points.b:
        writer.string_vector(row)
    writer.string_vector(points.c)
    writer.string(proof.iss_base64_details.value)
    writer.u8(proof.iss_base64_details.index_mod4)
    writer.string(proof.header_base64)
    writer.string(address_seed)
    writer.u64(max_epoch)
    writer.byte_vector(base64.b64decode(user_signature))
    return base64.b64encode(bytes([ZKLOGIN_FLAG]) + writer.to_bytes()).decode()
