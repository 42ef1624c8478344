from typing import Any

import pytest
import requests
from helpers import MockResponse

from zklogin.common.exceptions import EpochUnavailable, LedgerError
from zklogin.common.ledger import LedgerClient

FULLNODE_URL = "http://fullnode.test"


def test_get_epoch_info(monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}

    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        captured.update(kwargs["json"])
        return MockResponse(
            200,
            {
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "epoch": "321",
                    "epochDurationMs": "86400000",
                    "epochStartTimestampMs": "1700000000000",
                    "protocolVersion": "70",
                },
            },
        )

    monkeypatch.setattr(requests, "post", mock_post)
    info = LedgerClient(FULLNODE_URL).get_epoch_info()

    assert captured["method"] == "suix_getLatestSuiSystemState"
    assert info.epoch == 321  # noqa: PLR2004
    assert info.to_wire() == {
        "epoch": 321,
        "epochDurationMs": 86400000,
        "epochStartTimestampMs": 1700000000000,
    }


def test_get_epoch_info_rpc_error(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        requests,
        "post",
        lambda url, **kw: MockResponse(
            200, {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "busy"}}
        ),
    )
    with pytest.raises(EpochUnavailable, match="busy"):
        LedgerClient(FULLNODE_URL).get_epoch_info()


def test_get_epoch_info_http_error(monkeypatch: Any) -> None:
    monkeypatch.setattr(requests, "post", lambda url, **kw: MockResponse(503, text="down"))
    with pytest.raises(EpochUnavailable) as exc_info:
        LedgerClient(FULLNODE_URL).get_epoch_info()
    assert exc_info.value.upstream_status == 503  # noqa: PLR2004


def test_execute_transaction(monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}

    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        captured.update(kwargs["json"])
        return MockResponse(200, {"jsonrpc": "2.0", "id": 1, "result": {"digest": "d1"}})

    monkeypatch.setattr(requests, "post", mock_post)
    result = LedgerClient(FULLNODE_URL).execute_transaction("dHg=", ["c2ln"])

    assert result == {"digest": "d1"}
    assert captured["method"] == "sui_executeTransactionBlock"
    assert captured["params"][:2] == ["dHg=", ["c2ln"]]


def test_execute_transaction_rejected(monkeypatch: Any) -> None:
    monkeypatch.setattr(
        requests,
        "post",
        lambda url, **kw: MockResponse(
            200,
            {"jsonrpc": "2.0", "id": 1, "error": {"code": -32002, "message": "bad sig"}},
        ),
    )
    with pytest.raises(LedgerError, match="bad sig"):
        LedgerClient(FULLNODE_URL).execute_transaction("dHg=", ["c2ln"])
