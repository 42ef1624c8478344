"""
Custom exceptions for the zkLogin flow.
"""

from __future__ import annotations


class ZkLoginError(Exception):
    """Base exception for login, salt, proof and signing failures."""

    restart_required: bool = False

    def __init__(self, message: str, status_code: int = 403) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServiceError(ZkLoginError):
    """Exception for failures reported by a remote collaborator."""

    def __init__(
        self,
        message: str,
        upstream_status: int | None = None,
        upstream_text: str | None = None,
        status_code: int = 502,
    ) -> None:
        super().__init__(message, status_code)
        self.upstream_status = upstream_status
        self.upstream_text = upstream_text


class EpochUnavailable(ServiceError):
    """The current ledger epoch could not be obtained."""


class SaltServiceError(ServiceError):
    """The salt service rejected the request or could not be reached."""


class InvalidClientId(SaltServiceError):
    """The token audience is not one of the allowed client ids."""

    def __init__(self, message: str = "Invalid Client ID") -> None:
        super().__init__(message, status_code=403)


class ProofServiceError(ServiceError):
    """The proving service returned a non-success response."""


class NoActiveSession(ZkLoginError):
    """No usable session binding is persisted."""

    restart_required = True

    def __init__(self, message: str = "No active session. Please login again.") -> None:
        super().__init__(message, 401)


class MalformedToken(ZkLoginError):
    """The identity token could not be decoded or lacks required claims."""

    restart_required = True


class NonceMismatch(ZkLoginError):
    """The token nonce does not belong to the persisted session binding."""

    restart_required = True


class MissingAudience(ZkLoginError):
    """The token carries no audience claim."""

    restart_required = True

    def __init__(self, message: str = 'JWT "aud" claim is missing') -> None:
        super().__init__(message, 400)


class MissingProofInput(ZkLoginError):
    """A proof request was attempted with an empty input."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(missing)}", 400)
        self.missing = missing


class SessionExpired(ZkLoginError):
    """The authenticated session is past its max epoch."""

    restart_required = True

    def __init__(self, max_epoch: int, current_epoch: int) -> None:
        super().__init__(
            f"Session expired: max epoch {max_epoch} is behind current epoch "
            f"{current_epoch}",
            401,
        )
        self.max_epoch = max_epoch
        self.current_epoch = current_epoch


class UnauthorizedSigner(ZkLoginError):
    """The ephemeral key does not match the key the proof was bound to."""

    restart_required = True


class LedgerError(ServiceError):
    """The ledger node rejected or failed a JSON-RPC call."""
