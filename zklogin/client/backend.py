"""
HTTP client for the zkLogin backend: epoch, salt and salt backup endpoints.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import requests
from pydantic import ValidationError

from zklogin.common.exceptions import EpochUnavailable, SaltServiceError
from zklogin.common.models import (
    EpochInfo,
    SaltBackupRequest,
    SaltBackupResponse,
    SaltResponse,
)

logger = logging.getLogger(__name__)


def extract_error_details(text: str) -> str:
    """Pull the innermost error message out of an error body.

    Bodies look like ``{"error": ..., "details": "<json>"}`` where
    ``details`` may itself be a JSON-encoded error object. Falls back to
    the raw text at whatever level parsing stops.
    """
    try:
        data = json.loads(text)
    except ValueError:
        return text
    if not isinstance(data, dict):
        return text

    details = data.get("details")
    if isinstance(details, str) and details:
        try:
            nested = json.loads(details)
        except ValueError:
            return details
        if isinstance(nested, dict) and nested.get("error"):
            return str(nested["error"])
        return details
    if data.get("error"):
        return str(data["error"])
    return text


class BackendClient:
    """Talks to the backend routes under the zkLogin API prefix."""

    def __init__(self, api_url: str, timeout: float = 10):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def get_epoch_info(self) -> EpochInfo:
        """Fetch the live epoch; never cached."""
        try:
            r = requests.get(f"{self.api_url}/epoch", timeout=self.timeout)
        except requests.RequestException as e:
            msg = f"Failed to fetch epoch info: {e}"
            raise EpochUnavailable(msg) from e
        if not r.ok:
            msg = f"Failed to fetch epoch info: {r.status_code} - {r.text}"
            raise EpochUnavailable(
                msg, upstream_status=r.status_code, upstream_text=r.text
            )
        try:
            return EpochInfo.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            msg = f"Failed to fetch epoch info: {e}"
            raise EpochUnavailable(
                msg, upstream_status=r.status_code, upstream_text=r.text
            ) from e

    def fetch_salt(self, token: str) -> str:
        """Exchange the identity token for the user's salt."""
        try:
            r = requests.post(
                f"{self.api_url}/salt",
                json={"token": token},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            msg = f"Failed to fetch user salt: {e}"
            raise SaltServiceError(msg) from e

        if not r.ok:
            details = extract_error_details(r.text)
            logger.error(
                "Salt request failed: status=%s details=%s", r.status_code, details
            )
            msg = f"Failed to fetch user salt: {details}"
            raise SaltServiceError(
                msg, upstream_status=r.status_code, upstream_text=r.text
            )
        try:
            return SaltResponse.model_validate(r.json()).salt
        except (ValueError, ValidationError) as e:
            msg = f"Failed to fetch user salt: {e}"
            raise SaltServiceError(
                msg, upstream_status=r.status_code, upstream_text=r.text
            ) from e

    def send_salt_backup(
        self, user_sub: str, salt: str, user_email: str | None = None
    ) -> SaltBackupResponse:
        """Ask the backend to mail a recovery copy of the salt."""
        req = SaltBackupRequest(
            user_sub=user_sub,
            user_email=user_email,
            user_salt=salt,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        try:
            r = requests.post(
                f"{self.api_url}/email-salt-backup",
                json=req.to_wire(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            msg = f"Salt backup request failed: {e}"
            raise SaltServiceError(msg) from e
        if not r.ok:
            msg = f"Email service returned {r.status_code}"
            raise SaltServiceError(
                msg, upstream_status=r.status_code, upstream_text=r.text
            )
        try:
            return SaltBackupResponse.model_validate(r.json())
        except (ValueError, ValidationError) as e:
            msg = f"Salt backup response unreadable: {e}"
            raise SaltServiceError(msg) from e
