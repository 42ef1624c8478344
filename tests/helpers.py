from __future__ import annotations

from typing import Any

import jwt
import requests

from zklogin.common.exceptions import EpochUnavailable, SaltServiceError
from zklogin.common.models import EpochInfo, SaltBackupResponse, ZkProofBundle

TOKEN_SIGNING_KEY = "test-signing-key-with-at-least-32-bytes!"
CLIENT_ID = "client-a"
ISSUER = "https://accounts.google.com"

PROOF_BUNDLE: dict[str, Any] = {
    "proofPoints": {
        "a": ["11", "12", "1"],
        "b": [["21", "22"], ["23", "24"], ["1", "0"]],
        "c": ["31", "32", "1"],
    },
    "issBase64Details": {
        "value": "yJpc3MiOiJodHRwczovL2FjY291bnRzLmdvb2dsZS5jb20iLC",
        "indexMod4": 1,
    },
    "headerBase64": "eyJhbGciOiJSUzI1NiIsImtpZCI6InRlc3QiLCJ0eXAiOiJKV1QifQ",
}


def make_token(**claims: Any) -> str:
    """Build an HS256 identity token; claims set to None are dropped."""
    payload: dict[str, Any] = {
        "iss": ISSUER,
        "sub": "user-42",
        "aud": CLIENT_ID,
        "exp": 4102444800,
        "iat": 1700000000,
    }
    payload.update(claims)
    for key in [k for k, v in payload.items() if v is None]:
        del payload[key]
    return jwt.encode(payload, TOKEN_SIGNING_KEY, algorithm="HS256")


class MockResponse:
    def __init__(self, status_code: int, json_data: Any = None, text: str | None = None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if text is not None else ("" if json_data is None else str(json_data))
        self.reason = "OK" if status_code < 400 else "Error"  # noqa: PLR2004

    @property
    def ok(self) -> bool:
        return self.status_code < 400  # noqa: PLR2004

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:  # noqa: PLR2004
            raise requests.HTTPError(f"{self.status_code} Client Error", response=self)


class FakeEpochSource:
    def __init__(self, epoch: int = 5, *, fail: bool = False):
        self.epoch = epoch
        self.fail = fail
        self.calls = 0

    def get_epoch_info(self) -> EpochInfo:
        self.calls += 1
        if self.fail:
            raise EpochUnavailable("Failed to fetch epoch info", upstream_status=503)
        return EpochInfo(
            epoch=self.epoch,
            epoch_duration_ms=86400000,
            epoch_start_timestamp_ms=1700000000000,
        )


class FakeBackend:
    """Stands in for BackendClient behind SaltClient."""

    def __init__(self, salt: str = "123456789"):
        self.salt = salt
        self.salt_calls: list[str] = []
        self.backup_calls: list[tuple[str, str, str | None]] = []
        self.fail_salt = False
        self.fail_backup = False

    def fetch_salt(self, token: str) -> str:
        self.salt_calls.append(token)
        if self.fail_salt:
            raise SaltServiceError("Failed to fetch user salt: Invalid Client ID", upstream_status=403)
        return self.salt

    def send_salt_backup(
        self, user_sub: str, salt: str, user_email: str | None = None
    ) -> SaltBackupResponse:
        self.backup_calls.append((user_sub, salt, user_email))
        if self.fail_backup:
            raise SaltServiceError("Email service returned 500", upstream_status=500)
        return SaltBackupResponse(
            success=True,
            message="Salt backup email would be sent",
            user_sub=user_sub,
            timestamp="2026-01-01T00:00:00+00:00",
        )


class FakeProofBroker:
    def __init__(self) -> None:
        self.calls: list[tuple[Any, ...]] = []
        self.error: Exception | None = None

    def request_proof(
        self,
        jwt: str | None,
        extended_ephemeral_public_key: str | None,
        max_epoch: int | None,
        jwt_randomness: str | None,
        salt: str | None,
    ) -> ZkProofBundle:
        self.calls.append(
            (jwt, extended_ephemeral_public_key, max_epoch, jwt_randomness, salt)
        )
        if self.error is not None:
            raise self.error
        return ZkProofBundle.model_validate(PROOF_BUNDLE)
