"""
HTTP client for the ReelHub API, used by the upload flow.
"""

from .client import ApiClientError, ReelHubApiClient

__all__ = ["ApiClientError", "ReelHubApiClient"]
