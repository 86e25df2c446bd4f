from __future__ import annotations

import types

import pytest
import requests

from peridio.client import APIClient, APIRequest
from peridio.errors import APIRequestError, APIUnavailableError


def _response(status_code: int, payload: object = None, *, text: str = "") -> types.SimpleNamespace:
    def _json() -> object:
        if payload is None:
            raise ValueError("no json")
        return payload

    content = b"" if payload is None and not text else b"{}"
    return types.SimpleNamespace(status_code=status_code, json=_json, content=content, text=text)


def _capture(monkeypatch, client: APIClient, response: types.SimpleNamespace) -> dict:
    captured: dict[str, object] = {}

    def fake_request(  # noqa: ANN202
        method, url, *, params=None, json=None, headers=None, timeout=None, verify=None
    ):
        captured.update(
            method=method,
            url=url,
            params=params,
            json=json,
            headers=headers,
            timeout=timeout,
            verify=verify,
        )
        return response

    monkeypatch.setattr(client._session, "request", fake_request)
    return captured


def test_request_includes_token_authorization_header(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000/", api_key="pk_test", timeout=0.1)
    captured = _capture(monkeypatch, client, _response(200, {"ok": True}))

    result = client.request("GET", "/users/me")

    assert result == {"ok": True}
    assert captured["url"] == "http://localhost:4000/users/me"
    assert captured["headers"]["Authorization"] == "Token pk_test"
    assert captured["headers"]["User-Agent"].startswith("peridio-cli/")
    assert captured["verify"] is True


def test_request_without_api_key_sends_no_authorization(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", timeout=0.1)
    captured = _capture(monkeypatch, client, _response(200, {}))

    client.request("GET", "/users/me")

    assert "Authorization" not in captured["headers"]


def test_ca_path_is_used_for_tls_verification(monkeypatch) -> None:
    client = APIClient(base_url="https://api.example", ca_path="/etc/ca.pem", timeout=0.1)
    captured = _capture(monkeypatch, client, _response(200, {}))

    client.request("GET", "/users/me")

    assert captured["verify"] == "/etc/ca.pem"


def test_send_forwards_request_parts(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", api_key="pk_test", timeout=0.1)
    captured = _capture(monkeypatch, client, _response(201, {"artifact": {"name": "fw"}}))

    result = client.send(
        APIRequest(
            method="POST",
            path="/artifacts",
            params={"limit": 5},
            json_payload={"name": "fw"},
        )
    )

    assert result == {"artifact": {"name": "fw"}}
    assert captured["method"] == "POST"
    assert captured["params"] == {"limit": 5}
    assert captured["json"] == {"name": "fw"}


def test_error_status_raises_request_error_with_detail(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", api_key="pk_test", timeout=0.1)
    body = {"errors": {"detail": "Not Found"}}
    _capture(monkeypatch, client, _response(404, body, text='{"errors": {"detail": "Not Found"}}'))

    with pytest.raises(APIRequestError) as exc_info:
        client.request("GET", "/artifacts/prn:1:x")

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == {"detail": "Not Found"}
    assert exc_info.value.body == body
    assert "404" in str(exc_info.value)


def test_error_status_without_json_uses_text(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", timeout=0.1)
    _capture(monkeypatch, client, _response(502, None, text="bad gateway"))

    with pytest.raises(APIRequestError) as exc_info:
        client.request("GET", "/users/me")

    assert exc_info.value.detail is None
    assert "502 bad gateway" in str(exc_info.value)


def test_no_content_response_returns_none(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", timeout=0.1)
    _capture(monkeypatch, client, _response(204))

    assert client.request("DELETE", "/signing_keys/prn:1:x") is None


def test_transport_failure_raises_unavailable(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", timeout=0.1)

    def fake_request(*args, **kwargs):  # noqa: ANN002, ANN003
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(client._session, "request", fake_request)

    with pytest.raises(APIUnavailableError, match="connection refused"):
        client.request("GET", "/users/me")


def test_get_binary_uses_expected_path(monkeypatch) -> None:
    client = APIClient(base_url="http://localhost:4000", timeout=0.1)
    captured: list[str] = []

    def fake_request(method, path, *, params=None, json_payload=None):  # noqa: ANN001
        captured.append(f"{method} {path}")
        return {"binary": {"hash": "00"}}

    monkeypatch.setattr(client, "request", fake_request)

    assert client.get_binary("prn:1:o:binary:b") == {"binary": {"hash": "00"}}
    assert captured == ["GET /binaries/prn:1:o:binary:b"]
