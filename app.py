"""
App assembly entry point.

Re-exports the FastAPI `app` from `franchisehub.api.main` so the service can be
started with ``uvicorn app:app``.
"""

from franchisehub.api.main import app  # noqa: F401
