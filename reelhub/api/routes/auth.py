"""
Upload credential endpoint.

The uploader calls this right before sending a file to ImageKit. The
response carries a one-time token, its expiry and our signature over
both; ImageKit accepts the upload only if the signature checks out.
The private key stays here.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..dependencies import SettingsDep, get_imagekit_signer

logger = logging.getLogger(__name__)

router = APIRouter()

AUTH_FAILED_MESSAGE = "Authentication for ImageKit failed"


class UploadAuthResponse(BaseModel):
    """Signed upload parameters, returned at the root of the JSON body."""
    token: str = Field(description="One-time upload token")
    expire: int = Field(description="Unix time (seconds) after which the signature is rejected")
    signature: str = Field(description="HMAC-SHA1 of token + expire, keyed with the private key")
    publicKey: str = Field(description="ImageKit public key to send with the upload")


class ErrorResponse(BaseModel):
    error: str


@router.get(
    "/imagekit-auth",
    response_model=UploadAuthResponse,
    status_code=status.HTTP_200_OK,
    summary="Get upload credential",
    description="Returns short-lived signed parameters for a direct ImageKit upload",
    responses={500: {"model": ErrorResponse}},
)
async def imagekit_auth(settings: SettingsDep):
    """
    Sign a fresh upload credential.

    Any failure (usually missing keys) returns 500 with an error field.
    Nothing is retried.
    """
    try:
        signer = get_imagekit_signer(settings)
        credential = signer.get_upload_auth_params(ttl_seconds=settings.upload_token_ttl_seconds)
    except Exception as e:
        logger.error("ImageKit auth error", extra={"error": str(e)})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": AUTH_FAILED_MESSAGE},
        )

    return UploadAuthResponse(
        token=credential.token,
        expire=credential.expire,
        signature=credential.signature,
        publicKey=credential.public_key,
    )
