"""HTTP/WebSocket API."""

from .app import RunTestsRequest, create_app, create_router

__all__ = ["RunTestsRequest", "create_app", "create_router"]
