"""
Publish a local video file to a running ReelHub API.

Runs the same flow as the upload form: check the file, get a signed
credential, upload straight to ImageKit, then publish the metadata.

Usage:
    reelhub-publish clip.mp4 --title "Sunset" --description "Golden hour at the pier"

Reads from the environment (or .env):
    REELHUB_API_URL        API base URL (default http://localhost:8000)
    REELHUB_API_KEY        API key for publishing
    IMAGEKIT_PUBLIC_KEY    Sent with the upload if the API doesn't return one
    IMAGEKIT_URL_ENDPOINT  Base URL for files stored by --mock-upload
    IMAGEKIT_UPLOAD_URL    ImageKit upload API
    MAX_UPLOAD_SIZE_MB     Largest file accepted before uploading
"""

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .config.settings import get_settings
from .core.videos.models import VideoTransformation
from .core.videos.publisher import PublishError, VideoPublisher
from .core.videos.validation import FileValidationError, FormValidationError
from .infrastructure.api_client.client import ReelHubApiClient
from .infrastructure.imagekit.client import ImageKitConfig, create_imagekit_client


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Upload and publish a video to ReelHub")
    parser.add_argument("file", help="Video file to upload")
    parser.add_argument("--title", required=True, help="Video title (3-100 characters)")
    parser.add_argument("--description", required=True, help="Video description (10-500 characters)")
    parser.add_argument("--api-url", default=None, help="API base URL")
    parser.add_argument("--api-key", default=None, help="API key for publishing")
    parser.add_argument("--no-controls", action="store_true", help="Hide native playback controls")
    parser.add_argument("--quality", type=int, default=100, help="Delivery quality (1-100)")
    parser.add_argument("--mock-upload", action="store_true", help="Upload to an in-memory fake instead of ImageKit")
    return parser


def _notify(message: str, level: str) -> None:
    stream = sys.stderr if level == "error" else sys.stdout
    print(f"[{level.upper()}] {message}", file=stream)


def _notify_success(message: str, level: str) -> None:
    # failures are raised and reported once by main()
    if level == "success":
        _notify(message, level)


def _print_progress(percent: int) -> None:
    print(f"Uploading... {percent}%")


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    path = Path(args.file)
    if not path.is_file():
        print(f"ERROR: Cannot find {args.file}", file=sys.stderr)
        return 1

    api_url = args.api_url or os.getenv("REELHUB_API_URL", "http://localhost:8000")
    api_key = args.api_key or os.getenv("REELHUB_API_KEY")
    settings = get_settings()

    uploader = create_imagekit_client(
        config=ImageKitConfig(
            public_key=settings.imagekit_public_key,
            url_endpoint=settings.imagekit_url_endpoint,
            upload_url=settings.imagekit_upload_url,
        ),
        mock_mode=args.mock_upload,
    )
    publisher = VideoPublisher(
        service=ReelHubApiClient(api_url, api_key=api_key),
        uploader=uploader,
        max_upload_size_bytes=settings.max_upload_size_bytes,
        notify=_notify_success,
    )
    publisher.draft.controls = not args.no_controls

    try:
        publisher.draft.transformation = VideoTransformation(quality=args.quality)
        record = publisher.upload_and_publish(
            file_data=path.read_bytes(),
            file_name=path.name,
            title=args.title,
            description=args.description,
            on_progress=_print_progress,
        )
    except KeyboardInterrupt:
        _notify("Upload was cancelled.", "error")
        return 130
    except FormValidationError as e:
        for message in e.errors.values():
            _notify(message, "error")
        return 1
    except (FileValidationError, PublishError, ValueError) as e:
        _notify(str(e), "error")
        return 1

    print(f"Published: {record.get('_id')}")
    print(record.get("playbackUrl") or record["videoUrl"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
