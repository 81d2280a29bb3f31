"""Contracts API package."""

from servicedesk.api.v1.contracts.contract_routes import router

__all__ = ["router"]
