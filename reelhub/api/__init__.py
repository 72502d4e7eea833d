"""
HTTP API: FastAPI routes and dependency providers.
"""
