"""
Salt backup notifications for wallet recovery.
"""

from __future__ import annotations

import logging
from typing import Callable

from zklogin.common.exceptions import ServiceError, ZkLoginError
from zklogin.common.models import SaltBackupRequest, SaltBackupResponse

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "zkLogin Wallet Recovery Code"

EMAIL_TEMPLATE = """Dear User,

Your zkLogin wallet recovery code has been generated.
**KEEP THIS SAFE** - You'll need it to access your wallet on a new device.

Recovery Code: {salt}

This code was generated on: {timestamp}
User ID: {user_sub}

If you didn't request this, please ignore this email.

Do not share this code with anyone.
"""

MailTransport = Callable[[str, str, str], None]


class SaltBackupNotifier:
    """Renders the recovery e-mail and hands it to an optional transport.

    Without a transport the mail is only logged (recipient, subject and
    code length).
    """

    def __init__(self, transport: MailTransport | None = None):
        self.transport = transport

    @staticmethod
    def render(req: SaltBackupRequest) -> str:
        return EMAIL_TEMPLATE.format(
            salt=req.user_salt, timestamp=req.timestamp, user_sub=req.user_sub
        )

    def send(self, req: SaltBackupRequest) -> SaltBackupResponse:
        if not req.user_sub or not req.user_salt:
            msg = "Missing userSub or userSalt"
            raise ZkLoginError(msg, 400)

        body = self.render(req)
        recipient = req.user_email or ""
        logger.info(
            "Salt backup email for user %s: to=%s subject=%s saltLength=%d",
            req.user_sub,
            recipient or "Email not provided",
            EMAIL_SUBJECT,
            len(req.user_salt),
        )

        if self.transport is None:
            message = "Salt backup email would be sent"
        else:
            try:
                self.transport(recipient, EMAIL_SUBJECT, body)
            except OSError as e:
                logger.exception("Error sending salt backup email")
                msg = f"Failed to send salt backup email: {e}"
                raise ServiceError(msg, status_code=500) from e
            message = "Salt backup email sent"

        return SaltBackupResponse(
            success=True,
            message=message,
            user_sub=req.user_sub,
            timestamp=req.timestamp,
        )
