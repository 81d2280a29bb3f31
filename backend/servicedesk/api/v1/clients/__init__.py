"""Clients API package."""

from servicedesk.api.v1.clients.client_routes import router

__all__ = ["router"]
