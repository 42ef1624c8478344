"""
Client half of the salt store: remote fetch, best-effort backup, local recovery.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from zklogin.common.exceptions import SaltServiceError, ZkLoginError
from zklogin.common.models import SaltResponse

if TYPE_CHECKING:
    from zklogin.client.backend import BackendClient
    from zklogin.common.interfaces import ISessionStore

logger = logging.getLogger(__name__)

DEVICE_SALT_PREFIX = "zklogin_salt_"


class SaltClient:
    """Fetches salts from the backend and keeps a device-scoped copy.

    The device copy only drives the "recovery available" indicator; the
    backend's deterministic derivation stays authoritative.
    """

    def __init__(self, backend: BackendClient, device_store: ISessionStore):
        self.backend = backend
        self.device_store = device_store

    def fetch_salt(self, token: str) -> str:
        salt = self.backend.fetch_salt(token)
        try:
            return SaltResponse(salt=salt).salt
        except ValidationError as e:
            msg = "Failed to fetch user salt: salt is not a decimal integer"
            raise SaltServiceError(msg) from e

    def backup(self, user_sub: str, salt: str, contact_hint: str | None) -> bool:
        """Send the recovery copy; failures are logged and reported as False."""
        try:
            result = self.backend.send_salt_backup(user_sub, salt, contact_hint or "")
        except ZkLoginError as e:
            logger.warning("Failed to send salt backup email: %s", e)
            return False
        if not result.success:
            logger.warning("Salt backup not accepted: %s", result.message)
            return False
        logger.info("Salt backup email sent to user")
        return True

    def remember_locally(self, user_sub: str, salt: str) -> None:
        self.device_store.write({f"{DEVICE_SALT_PREFIX}{user_sub}": salt})

    def recover_locally(self, user_sub: str) -> str | None:
        return self.device_store.read(f"{DEVICE_SALT_PREFIX}{user_sub}")

    def clear_salt_backups(self) -> None:
        """Remove every device-scoped salt."""
        self.device_store.clear(
            [key for key in self.device_store.keys() if key.startswith(DEVICE_SALT_PREFIX)]
        )
