from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from clarifai_api.config import ClientConfig
from clarifai_api.errors import (
    AuthenticationError,
    BadRequestError,
    ServerError,
    ThrottledError,
    TransportError,
)
from clarifai_api.schemas import ColorRequest, TagRequest
from clarifai_api.transport import HTTPTransport

TOKEN_BODY = {
    "access_token": "abc123",
    "expires_in": 172800,
    "scope": "api_access_write api_access api_access_read",
    "token_type": "Bearer",
}


def fake_response(status: int = 200, body=None, url: str = "https://api.clarifai.com/v1/x/"):
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.url = url
    if body is None:
        response.content = b""
        response.json.side_effect = ValueError("no body")
    else:
        response.content = json.dumps(body).encode()
        response.json.return_value = body
    return response


def make_transport(**config) -> HTTPTransport:
    config.setdefault("access_token", "tok")
    session = MagicMock(spec=requests.Session)
    return HTTPTransport(ClientConfig(**config), session=session)


def test_get_without_body():
    transport = make_transport()
    transport.session.request.return_value = fake_response(body={"status_code": "OK"})

    raw = transport.request("GET", "info")

    assert json.loads(raw) == {"status_code": "OK"}
    transport.session.request.assert_called_once_with(
        "GET",
        "https://api.clarifai.com/v1/info/",
        headers={"Authorization": "Bearer tok"},
        json=None,
        timeout=30.0,
    )


def test_post_sends_json():
    transport = make_transport(api_root="http://localhost:8080/", timeout=5)
    transport.session.request.return_value = fake_response(body={})

    transport.request("POST", "tag", {"url": ["http://x/1.jpg"]})

    args, kwargs = transport.session.request.call_args
    assert args == ("POST", "http://localhost:8080/v1/tag/")
    assert kwargs["headers"] == {"Authorization": "Bearer tok"}
    assert kwargs["json"] == {"url": ["http://x/1.jpg"]}
    assert kwargs["timeout"] == 5.0


def test_token_fetched_once_from_credentials():
    transport = make_transport(access_token=None, client_id="id", client_secret="secret")
    transport.session.post.return_value = fake_response(body=TOKEN_BODY)
    transport.session.request.return_value = fake_response(body={})

    transport.request("GET", "info")
    transport.request("GET", "info")

    transport.session.post.assert_called_once()
    args, kwargs = transport.session.post.call_args
    assert args == ("https://api.clarifai.com/v1/token/",)
    assert kwargs["data"] == {
        "client_id": "id",
        "client_secret": "secret",
        "grant_type": "client_credentials",
    }
    _, kwargs = transport.session.request.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer abc123"


def test_missing_credentials():
    transport = make_transport(access_token=None)
    with pytest.raises(AuthenticationError):
        transport.request("GET", "info")
    transport.session.request.assert_not_called()


def test_token_rejected():
    transport = make_transport(access_token=None, client_id="id", client_secret="bad")
    transport.session.post.return_value = fake_response(
        401, body={"status_code": "TOKEN_INVALID", "status_msg": "Token is not valid."}
    )

    with pytest.raises(AuthenticationError) as exc:
        transport.request("GET", "info")

    assert exc.value.status_code == 401
    assert exc.value.status_msg == "Token is not valid."


def test_unauthorized_drops_token():
    transport = make_transport(access_token=None, client_id="id", client_secret="secret")
    transport.session.post.return_value = fake_response(body=TOKEN_BODY)
    transport.session.request.return_value = fake_response(401, body={"status_code": "TOKEN_EXPIRED"})

    with pytest.raises(AuthenticationError):
        transport.request("GET", "info")
    assert transport.session.request.call_count == 1

    transport.session.request.return_value = fake_response(body={})
    transport.request("GET", "info")
    assert transport.session.post.call_count == 2


def test_unauthorized_keeps_preissued_token():
    transport = make_transport(access_token="stale")
    transport.session.request.return_value = fake_response(
        401, body={"status_code": "TOKEN_INVALID", "status_msg": "Token is not valid."}
    )

    for _ in range(2):
        with pytest.raises(AuthenticationError) as exc:
            transport.request("GET", "info")
        assert exc.value.status_code == 401
        assert exc.value.status_msg == "Token is not valid."

    _, kwargs = transport.session.request.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer stale"
    transport.session.post.assert_not_called()


@pytest.mark.parametrize(
    "status, error_cls",
    [
        (400, BadRequestError),
        (429, ThrottledError),
        (500, ServerError),
        (503, TransportError),
    ],
)
def test_status_mapping(status, error_cls):
    transport = make_transport()
    transport.session.request.return_value = fake_response(
        status, body={"status_code": "ERROR", "status_msg": "nope"}
    )

    with pytest.raises(error_cls) as exc:
        transport.request("POST", "color", {"url": ["http://x/1.jpg"]})

    assert exc.value.status_code == status
    assert exc.value.status_msg == "nope"


def test_error_without_json_body():
    transport = make_transport()
    transport.session.request.return_value = fake_response(502)

    with pytest.raises(TransportError) as exc:
        transport.request("GET", "info")
    assert exc.value.status_msg is None


def test_connection_failure_wrapped():
    transport = make_transport()
    cause = requests.ConnectionError("refused")
    transport.session.request.side_effect = cause

    with pytest.raises(TransportError) as exc:
        transport.request("GET", "info")
    assert exc.value.__cause__ is cause
    assert exc.value.status_code is None


def test_upload_sends_files_and_model(tmp_path):
    first = tmp_path / "cat.jpg"
    second = tmp_path / "dog.jpg"
    first.write_bytes(b"\xff\xd8cat")
    second.write_bytes(b"\xff\xd8dog")
    transport = make_transport()
    transport.session.post.return_value = fake_response(body={"status_code": "OK"})

    transport.upload("tag", TagRequest(files=[str(first), str(second)], model="nsfw-v1.0"))

    args, kwargs = transport.session.post.call_args
    assert args == ("https://api.clarifai.com/v1/tag/",)
    assert kwargs["data"] == {"model": "nsfw-v1.0"}
    assert [name for name, _ in kwargs["files"]] == ["encoded_data", "encoded_data"]
    assert [part[0] for _, part in kwargs["files"]] == ["cat.jpg", "dog.jpg"]
    assert all(part[1].closed for _, part in kwargs["files"])


def test_upload_without_model():
    transport = make_transport()
    transport.session.post.return_value = fake_response(body={})

    transport.upload("color", ColorRequest(files=[]))

    _, kwargs = transport.session.post.call_args
    assert kwargs["data"] == {}


def test_upload_missing_file(tmp_path):
    transport = make_transport()
    with pytest.raises(TransportError):
        transport.upload("color", ColorRequest(files=[str(tmp_path / "missing.jpg")]))
    transport.session.post.assert_not_called()
