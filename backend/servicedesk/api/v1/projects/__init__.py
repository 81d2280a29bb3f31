"""Projects API package."""

from servicedesk.api.v1.projects.project_routes import router

__all__ = ["router"]
