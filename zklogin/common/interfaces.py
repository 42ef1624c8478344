"""
Interfaces and protocols for dependency injection.
"""

from __future__ import annotations

from typing import Protocol

from zklogin.common.models import EpochInfo, ZkProofBundle


class ISessionStore(Protocol):
    """Key/value storage scoped to one login session or one device."""

    def read(self, key: str) -> str | None: ...

    def write(self, values: dict[str, str]) -> None: ...

    def clear(self, keys: list[str] | None = None) -> None: ...

    def keys(self) -> list[str]: ...


class IEpochSource(Protocol):
    """Live source of the current ledger epoch."""

    def get_epoch_info(self) -> EpochInfo: ...


class IProofBroker(Protocol):
    """Obtains a zero-knowledge proof for a token/key/salt tuple."""

    def request_proof(
        self,
        jwt: str | None,
        extended_ephemeral_public_key: str | None,
        max_epoch: int | None,
        jwt_randomness: str | None,
        salt: str | None,
    ) -> ZkProofBundle: ...
