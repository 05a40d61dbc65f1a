"""
Main API router that aggregates all route modules.
"""

from fastapi import APIRouter

from .routes import conversations, files, maintenance, messages


def get_api_router() -> APIRouter:
    """Get the API router with every route module included."""
    api_router = APIRouter()

    api_router.include_router(files.router)
    api_router.include_router(messages.router)
    api_router.include_router(conversations.router)
    api_router.include_router(maintenance.router)

    return api_router
