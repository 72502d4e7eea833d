"""
ImageKit delivery URLs.

Records store what the upload returned: usually a file path like
"/clip_ab12cd34.mp4", sometimes a full URL. Playback URLs add a
transformation so ImageKit serves the portrait rendition. The SDK does
the URL building; transformations always go in the `tr` query parameter
so stored absolute URLs and paths come out the same way.
"""

from typing import Any, Optional
from urllib.parse import urlsplit

from imagekitio import ImageKit

from ...core.videos.models import VideoTransformation

QUERY_TRANSFORMATION = "query"


def transformation_options(transformation: VideoTransformation) -> list[dict[str, str]]:
    """One SDK transformation step: height, width and quality."""
    return [{
        "height": str(transformation.height),
        "width": str(transformation.width),
        "quality": str(transformation.quality),
    }]


def _is_absolute(src: str) -> bool:
    return urlsplit(src).scheme in ("http", "https")


def build_url(imagekit: ImageKit, src: str) -> str:
    """Absolute URLs pass through; paths are resolved against the endpoint."""
    if _is_absolute(src):
        return src
    return imagekit.url({"path": src, "transformation_position": QUERY_TRANSFORMATION})


def build_video_url(
    imagekit: ImageKit,
    src: str,
    transformation: Optional[VideoTransformation] = None,
) -> str:
    """Playback URL with the transformation as a `tr` query parameter."""
    if transformation is None:
        return build_url(imagekit, src)

    options: dict[str, Any] = {
        "transformation": transformation_options(transformation),
        "transformation_position": QUERY_TRANSFORMATION,
    }
    if _is_absolute(src):
        options["src"] = src
    else:
        options["path"] = src

    return imagekit.url(options)
