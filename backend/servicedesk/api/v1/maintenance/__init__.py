"""Maintenance records API package."""

from servicedesk.api.v1.maintenance.maintenance_routes import router

__all__ = ["router"]
