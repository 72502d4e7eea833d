"""
ReelHub - short-video sharing service.

This package contains the complete application:
- core: Framework-agnostic video records, form rules and the publish flow
- infrastructure: External service integrations (ImageKit, MongoDB, HTTP API client)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
