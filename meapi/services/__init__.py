"""Service layer."""

from meapi.services.search_service import SearchService

__all__ = ["SearchService"]
