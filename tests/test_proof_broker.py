from typing import Any

import pytest
import requests
from helpers import PROOF_BUNDLE, MockResponse

from zklogin.common.exceptions import MissingProofInput, ProofServiceError
from zklogin.common.proof_broker import ProofBroker

PROVER_URL = "http://prover.test/v1"
INPUTS = {
    "jwt": "a.b.c",
    "extended_ephemeral_public_key": "1234",
    "max_epoch": 7,
    "jwt_randomness": "5678",
    "salt": "123456789",
}


@pytest.fixture
def broker() -> ProofBroker:
    return ProofBroker(PROVER_URL, timeout=5)


def test_request_proof_posts_all_inputs(broker: ProofBroker, monkeypatch: Any) -> None:
    captured: dict[str, Any] = {}

    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        captured["url"] = url
        captured["json"] = kwargs["json"]
        captured["timeout"] = kwargs["timeout"]
        return MockResponse(200, PROOF_BUNDLE)

    monkeypatch.setattr(requests, "post", mock_post)
    bundle = broker.request_proof(**INPUTS)

    assert captured["url"] == PROVER_URL
    assert captured["timeout"] == 5  # noqa: PLR2004
    assert captured["json"] == {
        "jwt": "a.b.c",
        "extendedEphemeralPublicKey": "1234",
        "maxEpoch": 7,
        "jwtRandomness": "5678",
        "salt": "123456789",
        "keyClaimName": "sub",
    }
    assert bundle.header_base64 == PROOF_BUNDLE["headerBase64"]
    assert bundle.iss_base64_details.index_mod4 == 1
    assert bundle.to_wire() == PROOF_BUNDLE


@pytest.mark.parametrize("missing", sorted(INPUTS))
def test_missing_input_is_never_dispatched(
    broker: ProofBroker, monkeypatch: Any, missing: str
) -> None:
    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        raise AssertionError("prover must not be called")

    monkeypatch.setattr(requests, "post", mock_post)
    inputs = dict(INPUTS)
    inputs[missing] = None
    with pytest.raises(MissingProofInput):
        broker.request_proof(**inputs)


def test_prover_error_is_surfaced_verbatim(broker: ProofBroker, monkeypatch: Any) -> None:
    monkeypatch.setattr(
        requests,
        "post",
        lambda url, **kw: MockResponse(400, text="Invalid nonce in JWT"),
    )
    with pytest.raises(ProofServiceError) as exc_info:
        broker.request_proof(**INPUTS)

    assert "Invalid nonce in JWT" in str(exc_info.value)
    assert exc_info.value.upstream_status == 400  # noqa: PLR2004
    assert exc_info.value.upstream_text == "Invalid nonce in JWT"


def test_prover_unreachable(broker: ProofBroker, monkeypatch: Any) -> None:
    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        raise requests.Timeout("timed out")

    monkeypatch.setattr(requests, "post", mock_post)
    with pytest.raises(ProofServiceError, match="timed out"):
        broker.request_proof(**INPUTS)


def test_prover_returns_garbage(broker: ProofBroker, monkeypatch: Any) -> None:
    monkeypatch.setattr(
        requests, "post", lambda url, **kw: MockResponse(200, {"unexpected": True})
    )
    with pytest.raises(ProofServiceError, match="invalid proof bundle"):
        broker.request_proof(**INPUTS)


def test_zero_max_epoch_is_missing(broker: ProofBroker, monkeypatch: Any) -> None:
    def mock_post(url: str, **kwargs: Any) -> MockResponse:
        raise AssertionError("prover must not be called")

    monkeypatch.setattr(requests, "post", mock_post)
    with pytest.raises(MissingProofInput) as exc_info:
        broker.request_proof(**{**INPUTS, "max_epoch": 0})
    assert exc_info.value.missing == ["maxEpoch"]


def test_request_logs_truncated_token(
    broker: ProofBroker, monkeypatch: Any, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(requests, "post", lambda url, **kw: MockResponse(200, PROOF_BUNDLE))
    token = "header." + "p" * 200 + ".sig"
    with caplog.at_level("INFO", logger="zklogin.common.proof_broker"):
        broker.request_proof(**{**INPUTS, "jwt": token})
    assert "header.ppppppppppppp..." in caplog.text
    assert token not in caplog.text
