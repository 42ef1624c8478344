"""
JSON-RPC client for the ledger full node.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from pydantic import ValidationError

from zklogin.common.exceptions import EpochUnavailable, LedgerError
from zklogin.common.models import EpochInfo

logger = logging.getLogger(__name__)


class LedgerClient:
    """Reads the live epoch and submits signed transactions."""

    def __init__(self, fullnode_url: str, timeout: float = 10):
        self.fullnode_url = fullnode_url
        self.timeout = timeout
        self._request_id = 0

    def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }
        try:
            r = requests.post(self.fullnode_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            msg = f"Ledger node unreachable: {e}"
            raise LedgerError(msg) from e
        if not r.ok:
            msg = f"Ledger node error: {r.status_code} - {r.text}"
            raise LedgerError(msg, upstream_status=r.status_code, upstream_text=r.text)
        try:
            body = r.json()
        except ValueError as e:
            msg = f"Ledger node returned invalid JSON: {r.text}"
            raise LedgerError(
                msg, upstream_status=r.status_code, upstream_text=r.text
            ) from e
        if "error" in body:
            error = body["error"]
            msg = f"Ledger RPC error: {error.get('message', error)}"
            raise LedgerError(msg, upstream_status=r.status_code, upstream_text=r.text)
        return body.get("result")

    def get_epoch_info(self) -> EpochInfo:
        """Fetch the current epoch from the latest system state."""
        try:
            state = self._call("suix_getLatestSuiSystemState", [])
            return EpochInfo.model_validate(state)
        except LedgerError as e:
            raise EpochUnavailable(
                f"Failed to fetch epoch info: {e}",
                upstream_status=e.upstream_status,
                upstream_text=e.upstream_text,
            ) from e
        except ValidationError as e:
            msg = f"Failed to fetch epoch info: {e}"
            raise EpochUnavailable(msg) from e

    def execute_transaction(self, tx_bytes: str, signatures: list[str]) -> dict[str, Any]:
        """Submit base64 transaction bytes with their signatures."""
        logger.info("Submitting transaction with %d signature(s)", len(signatures))
        result = self._call(
            "sui_executeTransactionBlock",
            [
                tx_bytes,
                signatures,
                {"showEffects": True},
                "WaitForLocalExecution",
            ],
        )
        return result or {}
