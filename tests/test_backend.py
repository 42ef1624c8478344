import json
from typing import Any

import pytest
import requests
from helpers import MockResponse

from zklogin.client.backend import BackendClient, extract_error_details
from zklogin.client.salt_client import SaltClient
from zklogin.client.session_store import MemorySessionStore
from zklogin.common.exceptions import EpochUnavailable, SaltServiceError

API_URL = "http://backend.test/api/zklogin"


@pytest.fixture
def backend() -> BackendClient:
    return BackendClient(API_URL)


def test_extract_error_details_nested() -> None:
    body = json.dumps(
        {"error": "Salt service error", "details": json.dumps({"error": "Invalid Client ID"})}
    )
    assert extract_error_details(body) == "Invalid Client ID"


def test_extract_error_details_plain_details() -> None:
    body = json.dumps({"error": "Salt service error", "details": "quota exceeded"})
    assert extract_error_details(body) == "quota exceeded"


def test_extract_error_details_error_only() -> None:
    assert extract_error_details(json.dumps({"error": "boom"})) == "boom"


def test_extract_error_details_raw_text() -> None:
    assert extract_error_details("<html>Bad Gateway</html>") == "<html>Bad Gateway</html>"


def test_get_epoch_info(backend: BackendClient, monkeypatch: Any) -> None:
    def mock_get(url: str, **kwargs: Any) -> MockResponse:
        assert url == f"{API_URL}/epoch"
        return MockResponse(
            200,
            {"epoch": "12", "epochDurationMs": "86400000", "epochStartTimestampMs": "1"},
        )

    monkeypatch.setattr(requests, "get", mock_get)
    assert backend.get_epoch_info().epoch == 12  # noqa: PLR2004


def test_get_epoch_info_upstream_error(backend: BackendClient, monkeypatch: Any) -> None:
    monkeypatch.setattr(
        requests, "get", lambda url, **kw: MockResponse(500, text='{"error":"down"}')
    )
    with pytest.raises(EpochUnavailable) as exc_info:
        backend.get_epoch_info()
    assert exc_info.value.upstream_status == 500  # noqa: PLR2004
    assert exc_info.value.upstream_text == '{"error":"down"}'


def test_get_epoch_info_unreachable(backend: BackendClient, monkeypatch: Any) -> None:
    def mock_get(url: str, **kwargs: Any) -> MockResponse:
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", mock_get)
    with pytest.raises(EpochUnavailable, match="refused"):
        backend.get_epoch_info()


def test_fetch_salt(backend: BackendClient, monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}

    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        captured["url"] = url
        captured["json"] = kwargs["json"]
        return MockResponse(200, {"salt": "123456789"})

    monkeypatch.setattr(requests, "post", mock_post)
    assert backend.fetch_salt("a.b.c") == "123456789"
    assert captured == {"url": f"{API_URL}/salt", "json": {"token": "a.b.c"}}


def test_fetch_salt_rejected(backend: BackendClient, monkeypatch: Any) -> None:
    body = json.dumps(
        {"error": "Salt service error", "details": json.dumps({"error": "Invalid Client ID"})}
    )
    monkeypatch.setattr(requests, "post", lambda url, **kw: MockResponse(403, text=body))

    with pytest.raises(SaltServiceError) as exc_info:
        backend.fetch_salt("a.b.c")
    assert str(exc_info.value) == "Failed to fetch user salt: Invalid Client ID"
    assert exc_info.value.upstream_status == 403  # noqa: PLR2004
    assert exc_info.value.upstream_text == body


@pytest.mark.parametrize("salt", ["-5", "0x1f", "", "1" * 40])
def test_fetch_salt_rejects_non_decimal_salt(
    backend: BackendClient, monkeypatch: Any, salt: str
) -> None:
    monkeypatch.setattr(
        requests, "post", lambda url, **kw: MockResponse(200, {"salt": salt})
    )
    with pytest.raises(SaltServiceError, match="Failed to fetch user salt"):
        backend.fetch_salt("a.b.c")


def test_send_salt_backup(backend: BackendClient, monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}

    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        captured.update(kwargs["json"])
        return MockResponse(
            200,
            {
                "success": True,
                "message": "Salt backup email would be sent",
                "userSub": "user-42",
                "timestamp": kwargs["json"]["timestamp"],
            },
        )

    monkeypatch.setattr(requests, "post", mock_post)
    result = backend.send_salt_backup("user-42", "123", "user@example.com")

    assert result.success
    assert captured["userSub"] == "user-42"
    assert captured["userSalt"] == "123"
    assert captured["userEmail"] == "user@example.com"
    assert captured["timestamp"]


def test_salt_client_backup_swallows_failure(
    backend: BackendClient, monkeypatch: Any
) -> None:
    monkeypatch.setattr(requests, "post", lambda url, **kw: MockResponse(500, text="down"))
    client = SaltClient(backend, MemorySessionStore())
    assert client.backup("user-42", "123", None) is False


def test_salt_client_device_copies() -> None:
    device = MemorySessionStore({"unrelated": "x"})
    client = SaltClient(BackendClient(API_URL), device)
    client.remember_locally("user-42", "123")
    client.remember_locally("user-43", "456")

    assert client.recover_locally("user-42") == "123"
    assert client.recover_locally("nobody") is None

    client.clear_salt_backups()
    assert client.recover_locally("user-42") is None
    assert device.read("unrelated") == "x"
