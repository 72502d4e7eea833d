"""
Tests for the HTTP client the uploader uses to reach our API.
"""

import pytest
import requests

from reelhub.core.videos.publisher import ServiceError
from reelhub.infrastructure.api_client.client import ApiClientError, ReelHubApiClient


class FakeResponse:
    def __init__(self, status_code: int, payload=None, text: str = "") -> None:
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.text = text
        self.reason = "Reason"

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.headers: dict[str, str] = {}
        self.response = response
        self.error = error
        self.calls: list[tuple] = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


def test_get_upload_auth_parses_credential():
    session = FakeSession(FakeResponse(200, {
        "token": "tok", "expire": 1700000600, "signature": "sig", "publicKey": "pub",
    }))
    client = ReelHubApiClient("http://localhost:8000/", session=session)

    credential = client.get_upload_auth()

    assert credential.token == "tok"
    assert credential.expire == 1700000600
    assert credential.public_key == "pub"
    assert session.calls[0][:2] == ("GET", "http://localhost:8000/api/auth/imagekit-auth")


def test_malformed_credential():
    client = ReelHubApiClient("http://api", session=FakeSession(FakeResponse(200, {"token": "tok"})))

    with pytest.raises(ApiClientError, match="Malformed"):
        client.get_upload_auth()


def test_api_key_header_is_set():
    session = FakeSession(FakeResponse(201, {"_id": "1"}))
    ReelHubApiClient("http://api", api_key="k1", session=session)

    assert session.headers["X-API-Key"] == "k1"


def test_create_video_posts_json():
    session = FakeSession(FakeResponse(201, {"_id": "1", "title": "Sunset"}))
    client = ReelHubApiClient("http://api", session=session)

    record = client.create_video({"title": "Sunset"})

    assert record["_id"] == "1"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://api/api/videos")
    assert kwargs["json"] == {"title": "Sunset"}


def test_error_field_becomes_message():
    session = FakeSession(FakeResponse(400, {"error": "Missing required fields"}))
    client = ReelHubApiClient("http://api", session=session)

    with pytest.raises(ApiClientError) as exc_info:
        client.create_video({})

    assert str(exc_info.value) == "Missing required fields"
    assert exc_info.value.status_code == 400
    assert isinstance(exc_info.value, ServiceError)


def test_non_json_error_uses_text():
    session = FakeSession(FakeResponse(502, text="Bad gateway"))
    client = ReelHubApiClient("http://api", session=session)

    with pytest.raises(ApiClientError, match="Bad gateway"):
        client.get_videos()


def test_connection_failure():
    session = FakeSession(error=requests.ConnectionError("refused"))
    client = ReelHubApiClient("http://api", session=session)

    with pytest.raises(ApiClientError, match="Failed to reach the server"):
        client.get_videos()
