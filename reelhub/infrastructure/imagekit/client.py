"""
ImageKit direct upload client.

Files go straight from the uploader to ImageKit's upload API, authorized
by a credential our server signed. Our server never handles the bytes.

ImageKit failures are raised as one of four variants so the publish flow
can tell the uploader what went wrong:
- ImageKitInvalidRequestError: 4xx (bad signature, expired token, bad file)
- ImageKitServerError: 5xx
- ImageKitUploadNetworkError: connection failures and timeouts
- ImageKitAbortError: the uploader cancelled

Mock mode keeps uploads in memory, enabling the full flow locally
without an ImageKit account.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import requests
from requests_toolbelt import MultipartEncoder, MultipartEncoderMonitor

from ...core.videos.publisher import (
    InvalidUploadRequestError,
    ProgressCallback,
    UploadCancelledError,
    UploadCredential,
    UploadedFile,
    UploadError,
    UploadNetworkError,
    UploadServerError,
)
from ...core.videos.validation import guess_content_type
from .auth import ImageKitSigner

logger = logging.getLogger(__name__)

DEFAULT_UPLOAD_URL = "https://upload.imagekit.io/api/v1/files/upload"


class ImageKitError(UploadError):
    """Raised when an ImageKit upload fails for an unclassified reason."""
    pass


class ImageKitInvalidRequestError(ImageKitError, InvalidUploadRequestError):
    pass


class ImageKitServerError(ImageKitError, UploadServerError):
    pass


class ImageKitUploadNetworkError(ImageKitError, UploadNetworkError):
    pass


class ImageKitAbortError(ImageKitError, UploadCancelledError):
    pass


@dataclass
class ImageKitConfig:
    """Configuration for ImageKit uploads and delivery."""
    public_key: str
    url_endpoint: str
    upload_url: str = DEFAULT_UPLOAD_URL
    timeout_seconds: float = 300.0  # 100MB on a slow uplink takes a while
    folder: Optional[str] = None
    use_unique_file_name: bool = True

    def __post_init__(self) -> None:
        if not self.url_endpoint:
            raise ValueError("ImageKit URL endpoint is required")
        self.url_endpoint = self.url_endpoint.rstrip("/")


def _check_aborted(abort_event: Optional[threading.Event]) -> None:
    if abort_event is not None and abort_event.is_set():
        raise ImageKitAbortError("Upload aborted")


def _parse_upload_response(payload: dict) -> UploadedFile:
    """Translate ImageKit's upload response into our value object."""
    try:
        return UploadedFile(
            file_id=payload["fileId"],
            name=payload.get("name", ""),
            url=payload.get("url", ""),
            file_path=payload["filePath"],
            thumbnail_url=payload.get("thumbnailUrl") or None,
            size=int(payload.get("size") or 0),
            file_type=payload.get("fileType", ""),
            height=payload.get("height"),
            width=payload.get("width"),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ImageKitError(f"Unexpected upload response: {e}")


class _UploadProgress:
    """
    Callback for MultipartEncoderMonitor.

    Turns bytes sent into a percentage, reporting each value once, and
    stops the body mid-stream when the uploader cancels.
    """

    def __init__(
        self,
        on_progress: Optional[ProgressCallback],
        abort_event: Optional[threading.Event],
    ) -> None:
        self._on_progress = on_progress
        self._abort_event = abort_event
        self.last_percent: Optional[int] = None

    def __call__(self, monitor: MultipartEncoderMonitor) -> None:
        _check_aborted(self._abort_event)
        if monitor.len:
            self.report(min(100, monitor.bytes_read * 100 // monitor.len))

    def report(self, percent: int) -> None:
        if self._on_progress is None or percent == self.last_percent:
            return
        self.last_percent = percent
        self._on_progress(percent)


class ImageKitUploadClient:
    """
    Uploads files to ImageKit with a pre-signed credential.

    The multipart body is streamed through requests-toolbelt's monitor so
    progress follows the bytes actually sent. The session is injectable
    for tests.
    """

    def __init__(
        self,
        config: ImageKitConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

        logger.info(
            "Initialized ImageKit upload client",
            extra={"upload_url": config.upload_url},
        )

    def upload(
        self,
        file_data: bytes,
        file_name: str,
        credential: UploadCredential,
        on_progress: Optional[ProgressCallback] = None,
        abort_event: Optional[threading.Event] = None,
    ) -> UploadedFile:
        """
        Upload a file to ImageKit.

        Progress is reported as the body is read off the wire, and 100 once
        ImageKit accepts the file. Cancelling stops the body between chunks.
        """
        _check_aborted(abort_event)

        fields = {
            "fileName": file_name,
            "publicKey": credential.public_key or self._config.public_key,
            "signature": credential.signature,
            "expire": str(credential.expire),
            "token": credential.token,
            "useUniqueFileName": "true" if self._config.use_unique_file_name else "false",
        }
        if self._config.folder:
            fields["folder"] = self._config.folder
        fields["file"] = (file_name, file_data, guess_content_type(file_name))

        progress = _UploadProgress(on_progress, abort_event)
        monitor = MultipartEncoderMonitor(MultipartEncoder(fields=fields), progress)

        try:
            response = self._session.post(
                self._config.upload_url,
                data=monitor,
                headers={"Content-Type": monitor.content_type},
                timeout=self._config.timeout_seconds,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.error(
                "ImageKit unreachable",
                extra={"file_name": file_name, "error": str(e)},
            )
            raise ImageKitUploadNetworkError(f"Network error: {e}")
        except requests.RequestException as e:
            logger.error(
                "ImageKit request failed",
                extra={"file_name": file_name, "error": str(e)},
            )
            raise ImageKitError(f"Upload request failed: {e}")

        _check_aborted(abort_event)

        if response.status_code >= 500:
            logger.error(
                "ImageKit server error",
                extra={"status": response.status_code, "body": response.text[:200]},
            )
            raise ImageKitServerError(f"ImageKit returned {response.status_code}")

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.warning(
                "ImageKit rejected upload",
                extra={"status": response.status_code, "error": message},
            )
            raise ImageKitInvalidRequestError(message)

        try:
            payload = response.json()
        except ValueError as e:
            raise ImageKitError(f"Upload response was not JSON: {e}")

        uploaded = _parse_upload_response(payload)

        progress.report(100)

        logger.info(
            "Uploaded file to ImageKit",
            extra={
                "file_id": uploaded.file_id,
                "file_path": uploaded.file_path,
                "size_bytes": len(file_data),
            },
        )

        return uploaded

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            return response.json().get("message") or response.reason
        except ValueError:
            return response.text or response.reason


# ---------------------------------------------------------------------------
# Mock Uploader for Local Development
# ---------------------------------------------------------------------------

class MockImageKitClient:
    """
    In-memory ImageKit stand-in.

    Accepts uploads, stores the bytes in a dict and returns responses
    shaped like ImageKit's. If given the signer it checks signatures and
    expiry, so a broken signing path fails the same way it would against
    the real service.
    """

    def __init__(
        self,
        url_endpoint: str = "https://ik.imagekit.io/mock",
        signer: Optional[ImageKitSigner] = None,
    ) -> None:
        self._url_endpoint = url_endpoint.rstrip("/")
        self._signer = signer
        self._files: dict[str, bytes] = {}
        self._used_tokens: set[str] = set()
        logger.info("Initialized mock ImageKit client (in-memory)")

    def upload(
        self,
        file_data: bytes,
        file_name: str,
        credential: UploadCredential,
        on_progress: Optional[ProgressCallback] = None,
        abort_event: Optional[threading.Event] = None,
    ) -> UploadedFile:
        """Store the file in memory."""
        _check_aborted(abort_event)

        if self._signer is not None:
            if not self._signer.verify(
                credential.token,
                credential.expire,
                credential.signature,
            ):
                raise ImageKitInvalidRequestError("Your request contains invalid signature")

        # ImageKit refuses a token twice
        if credential.token in self._used_tokens:
            raise ImageKitInvalidRequestError("The token has already been used")
        self._used_tokens.add(credential.token)

        stem, dot, ext = file_name.rpartition(".")
        if not dot:
            stem, ext = file_name, ""
        unique_name = f"{stem}_{uuid4().hex[:8]}{dot}{ext}"
        file_path = f"/{unique_name}"
        self._files[file_path] = file_data

        if on_progress:
            on_progress(100)

        logger.debug(
            "Stored file in mock ImageKit",
            extra={"file_path": file_path, "size_bytes": len(file_data)},
        )

        return UploadedFile(
            file_id=uuid4().hex,
            name=unique_name,
            url=f"{self._url_endpoint}{file_path}",
            file_path=file_path,
            thumbnail_url=f"{self._url_endpoint}{file_path}/ik-thumbnail.jpg",
            size=len(file_data),
            file_type="non-image",
        )

    def get_file(self, file_path: str) -> bytes:
        """Retrieve an uploaded file (for tests)."""
        if file_path not in self._files:
            raise ImageKitInvalidRequestError(f"File not found: {file_path}")
        return self._files[file_path]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_imagekit_client(
    config: Optional[ImageKitConfig] = None,
    mock_mode: bool = False,
    signer: Optional[ImageKitSigner] = None,
):
    """
    Create an uploader based on configuration.

    Args:
        config: ImageKit configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory uploader
        signer: Lets the mock verify signatures

    Returns:
        ImageKitUploadClient or MockImageKitClient
    """
    if mock_mode:
        if config is not None:
            return MockImageKitClient(url_endpoint=config.url_endpoint, signer=signer)
        return MockImageKitClient(signer=signer)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return ImageKitUploadClient(config)
