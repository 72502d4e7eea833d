"""
HTTP client for the ReelHub API.

This is the uploader's side of the wire: fetch a signed upload
credential, list videos, publish metadata. It implements the
VideoService protocol the publisher depends on.
"""

import logging
from typing import Any, Optional

import requests

from ...core.videos.publisher import ServiceError, UploadCredential

logger = logging.getLogger(__name__)


class ApiClientError(ServiceError):
    """Raised when the API answers with an error or can't be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ReelHubApiClient:
    """
    Thin wrapper over requests for our own endpoints.

    All paths are relative to `{base_url}/api`.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout_seconds
        if api_key:
            self._session.headers["X-API-Key"] = api_key

    def get_upload_auth(self) -> UploadCredential:
        """Fetch a fresh signed upload credential."""
        data = self._request("GET", "/auth/imagekit-auth")

        try:
            return UploadCredential(
                token=data["token"],
                expire=int(data["expire"]),
                signature=data["signature"],
                public_key=data.get("publicKey", ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ApiClientError(f"Malformed authentication parameters: {e}")

    def get_videos(self) -> list[dict[str, Any]]:
        return self._request("GET", "/videos")

    def get_video(self, video_id: str) -> dict[str, Any]:
        return self._request("GET", f"/videos/{video_id}")

    def create_video(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._request("POST", "/videos", json=payload)

    def get_feed(self) -> dict[str, Any]:
        return self._request("GET", "/feed")

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}/api{endpoint}"

        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(
                "API request failed",
                extra={"method": method, "url": url, "error": str(e)},
            )
            raise ApiClientError("Failed to reach the server")

        if not response.ok:
            message = self._error_message(response)
            logger.warning(
                "API returned error",
                extra={"method": method, "url": url, "status": response.status_code},
            )
            raise ApiClientError(message, status_code=response.status_code)

        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason

        if isinstance(body, dict):
            detail = body.get("error") or body.get("detail")
            if isinstance(detail, str):
                return detail
        return response.text or response.reason
