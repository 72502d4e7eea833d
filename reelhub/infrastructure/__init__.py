"""
Infrastructure layer - external service integrations.

Each subdirectory wraps an external dependency:
- imagekit: Upload signing, direct uploads and delivery URLs
- mongo: Video record persistence
- api_client: HTTP client for our own API, used by the uploader

These wrappers translate between external formats and our domain models.
"""
