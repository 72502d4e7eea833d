"""
API tests against the app in mock mode.
"""

from urllib.parse import parse_qs, urlsplit

from reelhub.api import dependencies
from reelhub.infrastructure.imagekit.auth import ImageKitSigner

ENDPOINT = "https://ik.imagekit.io/test"


def url_parts(url: str) -> tuple[str, dict[str, list[str]]]:
    split = urlsplit(url)
    return f"{split.scheme}://{split.netloc}{split.path}", parse_qs(split.query)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

class TestHealth:

    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["details"]["mock_mode"] == {"mongo": True, "imagekit": True}

    def test_ready_in_mock_mode(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_not_ready_without_database(self, client_with):
        client = client_with(mongo_mock_mode=False, mongo_uri=None)

        response = client.get("/health/ready")

        assert response.status_code == 503
        checks = {check["name"]: check for check in response.json()["checks"]}
        assert checks["configuration"]["status"] == "error"
        assert "MONGO_URI" in checks["configuration"]["error"]
        assert checks["database"]["status"] == "error"
        assert checks["uploads"]["status"] == "ok"

    def test_not_ready_without_signing_keys(self, client_with):
        client = client_with(imagekit_mock_mode=False, imagekit_private_key="", imagekit_public_key="")

        response = client.get("/health/ready")

        assert response.status_code == 503
        checks = {check["name"]: check for check in response.json()["checks"]}
        assert checks["uploads"]["status"] == "error"
        assert checks["database"]["status"] == "ok"


# ---------------------------------------------------------------------------
# Upload Credential
# ---------------------------------------------------------------------------

class TestImageKitAuth:

    def test_returns_signed_params_at_root(self, client):
        response = client.get("/api/auth/imagekit-auth")

        assert response.status_code == 200
        body = response.json()
        assert set(body) == {"token", "expire", "signature", "publicKey"}
        assert body["publicKey"] == dependencies.MOCK_PUBLIC_KEY
        signer = ImageKitSigner(dependencies.MOCK_PRIVATE_KEY, dependencies.MOCK_PUBLIC_KEY, ENDPOINT)
        assert signer.verify(body["token"], body["expire"], body["signature"])

    def test_uses_configured_keys(self, client_with):
        client = client_with(
            imagekit_mock_mode=False,
            imagekit_private_key="private_live",
            imagekit_public_key="public_live",
        )

        body = client.get("/api/auth/imagekit-auth").json()

        assert body["publicKey"] == "public_live"
        signer = ImageKitSigner("private_live", "public_live", ENDPOINT)
        assert signer.verify(body["token"], body["expire"], body["signature"])

    def test_fresh_token_per_request(self, client):
        first = client.get("/api/auth/imagekit-auth").json()
        second = client.get("/api/auth/imagekit-auth").json()

        assert first["token"] != second["token"]

    def test_missing_keys_fail_with_error_field(self, client_with):
        client = client_with(imagekit_mock_mode=False, imagekit_private_key="", imagekit_public_key="")

        response = client.get("/api/auth/imagekit-auth")

        assert response.status_code == 500
        assert response.json() == {"error": "Authentication for ImageKit failed"}


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------

class TestVideos:

    def test_empty_list(self, client):
        response = client.get("/api/videos")

        assert response.status_code == 200
        assert response.json() == []

    def test_create_requires_api_key(self, client, video_payload):
        response = client.post("/api/videos", json=video_payload)

        assert response.status_code == 403
        assert "API key" in response.json()["error"]

    def test_create_rejects_wrong_api_key(self, client, video_payload):
        response = client.post("/api/videos", json=video_payload, headers={"X-API-Key": "nope"})

        assert response.status_code == 403

    def test_create_video(self, client, auth_headers, video_payload):
        response = client.post("/api/videos", json=video_payload, headers=auth_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["_id"]
        assert body["title"] == video_payload["title"]
        assert body["videoUrl"] == video_payload["videoUrl"]
        assert body["thumbnailUrl"] == video_payload["thumbnailUrl"]
        assert body["controls"] is True
        assert body["transformation"] == {"height": 1920, "width": 1080, "quality": 100}
        assert "createdAt" in body

    def test_create_returns_playback_url(self, client, auth_headers, video_payload):
        video_payload["transformation"] = {"quality": 70}

        body = client.post("/api/videos", json=video_payload, headers=auth_headers).json()

        playback, query = url_parts(body["playbackUrl"])
        assert playback == f"{ENDPOINT}/sunset_ab12cd34.mp4"
        assert query["tr"] == ["h-1920,w-1080,q-70"]

    def test_create_honors_controls_and_quality(self, client, auth_headers, video_payload):
        video_payload.update({"controls": False, "transformation": {"quality": 60}})

        body = client.post("/api/videos", json=video_payload, headers=auth_headers).json()

        assert body["controls"] is False
        assert body["transformation"]["quality"] == 60

    def test_thumbnail_is_optional(self, client, auth_headers, video_payload):
        del video_payload["thumbnailUrl"]

        response = client.post("/api/videos", json=video_payload, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["thumbnailUrl"] is None

    def test_accepts_snake_case(self, client, auth_headers):
        response = client.post("/api/videos", json={
            "title": "Snake case",
            "description": "Posted with python field names.",
            "video_url": "/snake.mp4",
        }, headers=auth_headers)

        assert response.status_code == 201
        assert response.json()["videoUrl"] == "/snake.mp4"

    def test_missing_fields(self, client, auth_headers, video_payload):
        del video_payload["videoUrl"]

        response = client.post("/api/videos", json=video_payload, headers=auth_headers)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}

    def test_length_rules(self, client, auth_headers, video_payload):
        video_payload["title"] = "ab"

        response = client.post("/api/videos", json=video_payload, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"] == "Title must be at least 3 characters"

    def test_schema_errors_use_error_field(self, client, auth_headers, video_payload):
        video_payload["transformation"] = {"quality": 0}

        response = client.post("/api/videos", json=video_payload, headers=auth_headers)

        assert response.status_code == 422
        body = response.json()
        assert set(body) == {"error"}
        assert body["error"].startswith("transformation.quality: ")
        assert "greater than or equal to 1" in body["error"]

    def test_wrong_field_type(self, client, auth_headers, video_payload):
        video_payload["title"] = 123

        response = client.post("/api/videos", json=video_payload, headers=auth_headers)

        assert response.status_code == 422
        assert response.json()["error"].startswith("title: ")

    def test_list_newest_first(self, client, auth_headers, video_payload):
        for title in ("First video", "Second video"):
            client.post("/api/videos", json={**video_payload, "title": title}, headers=auth_headers)

        titles = [video["title"] for video in client.get("/api/videos").json()]

        assert titles == ["Second video", "First video"]

    def test_bad_stored_record_does_not_break_reads(self, client, auth_headers, video_payload):
        client.post("/api/videos", json=video_payload, headers=auth_headers)
        dependencies._mock_video_collection.insert_one(
            {"title": "Hi", "description": "short", "videoUrl": "/x.mp4"}
        )

        videos = client.get("/api/videos")
        feed = client.get("/api/feed")

        assert videos.status_code == 200
        assert [video["title"] for video in videos.json()] == [video_payload["title"]]
        assert feed.status_code == 200
        assert feed.json()["total"] == 1

    def test_get_by_id(self, client, auth_headers, video_payload):
        created = client.post("/api/videos", json=video_payload, headers=auth_headers).json()

        response = client.get(f"/api/videos/{created['_id']}")

        assert response.status_code == 200
        assert response.json()["_id"] == created["_id"]

    def test_get_unknown_id(self, client):
        response = client.get("/api/videos/000000000000000000000000")

        assert response.status_code == 404
        assert response.json() == {"error": "Video not found"}

    def test_database_unavailable(self, client_with):
        client = client_with(mongo_mock_mode=False, mongo_uri=None)

        response = client.get("/api/videos")

        assert response.status_code == 503
        assert response.json() == {"error": "Database unavailable"}


# ---------------------------------------------------------------------------
# Feed
# ---------------------------------------------------------------------------

class TestFeed:

    def test_feed_builds_playback_urls(self, client, auth_headers, video_payload):
        client.post("/api/videos", json=video_payload, headers=auth_headers)

        body = client.get("/api/feed").json()

        assert body["total"] == 1
        item = body["videos"][0]
        playback, query = url_parts(item["playbackUrl"])
        assert playback == f"{ENDPOINT}/sunset_ab12cd34.mp4"
        assert query["tr"] == ["h-1920,w-1080,q-100"]
        assert url_parts(item["thumbnailUrl"])[0] == f"{ENDPOINT}/sunset_ab12cd34.mp4/ik-thumbnail.jpg"
        assert item["aspectRatio"] == "1080:1920"
        assert item["controls"] is True

    def test_feed_poster_falls_back_to_video(self, client, auth_headers, video_payload):
        del video_payload["thumbnailUrl"]
        client.post("/api/videos", json=video_payload, headers=auth_headers)

        item = client.get("/api/feed").json()["videos"][0]

        assert url_parts(item["thumbnailUrl"])[0] == f"{ENDPOINT}/sunset_ab12cd34.mp4"

    def test_feed_limit(self, client, auth_headers, video_payload):
        for i in range(3):
            client.post("/api/videos", json={**video_payload, "title": f"Clip {i}"}, headers=auth_headers)

        body = client.get("/api/feed", params={"limit": 2}).json()

        assert body["total"] == 2

    def test_feed_without_imagekit_config(self, client_with):
        client = client_with(imagekit_mock_mode=False, imagekit_private_key="", imagekit_public_key="")

        response = client.get("/api/feed")

        assert response.status_code == 503
        assert response.json() == {"error": "ImageKit is not configured"}

    def test_feed_rejects_bad_limit(self, client):
        response = client.get("/api/feed", params={"limit": 0})

        assert response.status_code == 422
        assert response.json()["error"].startswith("limit: ")
