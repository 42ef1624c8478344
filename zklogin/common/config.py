"""
Configuration settings for the zkLogin client and backend.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Central configuration class for all system settings."""

    def __init__(self) -> None:
        # Login policy
        self.MAX_EPOCH_OFFSET: int = 2  # Sessions stay valid for current epoch + 2
        self.KEY_CLAIM_NAME: str = "sub"
        self.RANDOMNESS_BYTES: int = 16

        # Identity provider
        self.CLIENT_ID: str | None = os.getenv("ZKLOGIN_CLIENT_ID")
        allowed = os.getenv("ZKLOGIN_ALLOWED_CLIENT_IDS")
        if allowed:
            self.ALLOWED_CLIENT_IDS: list[str] = [
                cid.strip() for cid in allowed.split(",") if cid.strip()
            ]
        else:
            self.ALLOWED_CLIENT_IDS = [self.CLIENT_ID] if self.CLIENT_ID else []
        self.REDIRECT_URL: str = os.getenv(
            "ZKLOGIN_REDIRECT_URL", "http://localhost:5173"
        )
        self.AUTHORIZE_URL: str = os.getenv(
            "ZKLOGIN_AUTHORIZE_URL", "https://accounts.google.com/o/oauth2/v2/auth"
        )
        self.VERIFY_TOKEN_SIGNATURE: bool = _env_flag("ZKLOGIN_VERIFY_TOKEN_SIGNATURE")
        self.JWKS_URL: str = os.getenv(
            "ZKLOGIN_JWKS_URL", "https://www.googleapis.com/oauth2/v3/certs"
        )

        # Backend settings
        self.SERVER_HOST: str = os.getenv("ZKLOGIN_SERVER_HOST", "127.0.0.1")
        self.SERVER_PORT: int = int(os.getenv("ZKLOGIN_SERVER_PORT", "3001"))
        self.SERVER_URL: str = f"http://{self.SERVER_HOST}:{self.SERVER_PORT}"
        self.API_PREFIX: str = "/api/zklogin"
        self.API_URL: str = os.getenv(
            "ZKLOGIN_API_URL", f"{self.SERVER_URL}{self.API_PREFIX}"
        )
        self.SALT_MASTER_SECRET: str | None = os.getenv("ZKLOGIN_SALT_MASTER_SECRET")

        # External services
        self.FULLNODE_URL: str = os.getenv(
            "ZKLOGIN_FULLNODE_URL", "https://fullnode.devnet.sui.io"
        )
        self.PROVER_URL: str = os.getenv(
            "ZKLOGIN_PROVER_URL", "https://prover-dev.mystenlabs.com/v1"
        )
        self.HTTP_TIMEOUT: float = float(os.getenv("ZKLOGIN_HTTP_TIMEOUT", "10"))
        self.PROOF_TIMEOUT: float = float(os.getenv("ZKLOGIN_PROOF_TIMEOUT", "60"))

        # File paths
        self.BASE_DIR: Path = Path(__file__).parent.parent
        self.DATA_DIR: Path = Path(
            os.getenv("ZKLOGIN_DATA_DIR", str(self.BASE_DIR / "data"))
        )
        self.SESSION_FILE_PATH: Path = self.DATA_DIR / "session.json"
        self.DEVICE_FILE_PATH: Path = self.DATA_DIR / "device.json"

        # Logging
        self.LOG_LEVEL: int = logging.INFO
