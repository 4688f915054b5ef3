"""
API route modules.

This package contains all API endpoint routers organized by functionality.
"""

from src.api.routes.search import router as search_router

__all__ = ["search_router"]
