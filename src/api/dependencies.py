"""
FastAPI dependencies resolving the store handle held on the application state
"""

from fastapi import Depends, Request

from database.user_repository import UserRepository
from services.upsert_handler import UpsertHandler


def get_user_repository(request: Request) -> UserRepository:
    """Get the repository the lifespan attached to this application"""
    repository = getattr(request.app.state, "user_repository", None)
    if repository is None:
        raise RuntimeError("User repository not initialized")
    return repository


def get_upsert_handler(repository: UserRepository = Depends(get_user_repository)) -> UpsertHandler:
    return UpsertHandler(repository)
