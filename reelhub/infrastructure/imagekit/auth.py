"""
ImageKit upload credential signing.

Uploaders never see the private key. They get a random token, an expiry
and a signature over token + expiry, which ImageKit checks with its copy
of the key. ImageKit refuses expiries more than an hour out, so the
default lifetime is half of that.

Signing goes through the ImageKit SDK. The same SDK client builds
delivery URLs (see urls.py), so one ImageKitSigner per configuration is
all the app needs.
"""

import hmac
import logging
import time
from typing import Optional
from uuid import uuid4

from imagekitio import ImageKit

from ...core.videos.publisher import UploadCredential

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL_SECONDS = 30 * 60
MAX_TOKEN_TTL_SECONDS = 60 * 60


class ImageKitAuthError(Exception):
    """Raised when upload credentials can't be produced."""
    pass


class ImageKitSigner:
    """
    Wraps the ImageKit SDK client for everything that needs our keys.

    The SDK refuses to start without both keys and a URL endpoint, so
    missing configuration surfaces here as ImageKitAuthError.
    """

    def __init__(self, private_key: str, public_key: str, url_endpoint: str) -> None:
        if not private_key or not public_key:
            raise ImageKitAuthError("ImageKit private and public keys are required")
        if not url_endpoint:
            raise ImageKitAuthError("ImageKit URL endpoint is required")

        self.public_key = public_key
        self.url_endpoint = url_endpoint.rstrip("/")
        self.imagekit = ImageKit(
            private_key=private_key,
            public_key=public_key,
            url_endpoint=self.url_endpoint,
        )

    def sign(self, token: str, expire: int) -> str:
        """Signature ImageKit expects for this token and expiry."""
        params = self.imagekit.get_authentication_parameters(token, expire)
        return params["signature"]

    def get_upload_auth_params(
        self,
        token: Optional[str] = None,
        expire: Optional[int] = None,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        now: Optional[float] = None,
    ) -> UploadCredential:
        """
        Produce a signed upload credential.

        Args:
            token: Unique per upload. Random UUID4 if not given.
            expire: Unix timestamp (seconds). now + ttl_seconds if not given.
            ttl_seconds: Lifetime when expire isn't given
            now: Current unix time, for tests

        Raises:
            ImageKitAuthError: expiry outside ImageKit's window
        """
        current = int(now if now is not None else time.time())
        token = token or str(uuid4())
        expire = expire or current + ttl_seconds

        if expire <= current:
            raise ImageKitAuthError("Upload credential expiry must be in the future")
        if expire - current > MAX_TOKEN_TTL_SECONDS:
            raise ImageKitAuthError("Upload credential expiry must be less than 1 hour in the future")

        signature = self.sign(token, expire)

        logger.debug("Signed upload credential", extra={"expire": expire})

        return UploadCredential(
            token=token,
            expire=expire,
            signature=signature,
            public_key=self.public_key,
        )

    def verify(
        self,
        token: str,
        expire: int,
        signature: str,
        now: Optional[float] = None,
    ) -> bool:
        """Check a credential the way ImageKit does. Used by the mock uploader."""
        current = int(now if now is not None else time.time())
        if expire <= current:
            return False
        return hmac.compare_digest(self.sign(token, expire), signature)
