"""
User API routes
Plain reads and deletes go straight to the repository; PUT goes through the
UpsertHandler so create-vs-update and conflicts are decided in one place.
"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Response
from fastapi.responses import JSONResponse

from api.dependencies import get_user_repository, get_upsert_handler
from database.errors import RecordNotFoundError
from database.user_repository import UserRepository
from models.user import User, UserPayload
from services.upsert_handler import CreateUser, UpdateUserAt, UpsertHandler, UpsertResult

router = APIRouter()
logger = logging.getLogger(__name__)


def _render(result: UpsertResult) -> Response:
    """Turn an upsert outcome into the HTTP response the client sees"""
    if result.body is None:
        return Response(status_code=result.status_code)

    headers = {"Location": result.location} if result.location else None
    return JSONResponse(status_code=result.status_code, content=result.body, headers=headers)


@router.post("", response_model=User)
async def create_user(
    payload: UserPayload,
    repository: UserRepository = Depends(get_user_repository)
):
    """Create a new user; the store assigns the id"""
    logger.info(f"Got POST Request for User = {payload}")
    return await repository.create(payload)


@router.get("", response_model=List[User])
async def get_all_users(repository: UserRepository = Depends(get_user_repository)):
    """List every user"""
    return await repository.find_all()


@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    repository: UserRepository = Depends(get_user_repository)
):
    """Get user details"""
    try:
        return await repository.find_by_id(user_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("")
async def put_user(
    payload: UserPayload,
    handler: UpsertHandler = Depends(get_upsert_handler)
):
    """PUT against the collection root always creates"""
    logger.info(f"Got PUT Request for User = {payload}")
    return _render(await handler.handle(CreateUser(payload)))


@router.put("/{user_id}")
async def put_user_at(
    user_id: int,
    payload: UserPayload,
    handler: UpsertHandler = Depends(get_upsert_handler)
):
    """Update the user at user_id, or create a new one if it does not exist"""
    logger.info(f"Got PUT Request for Id = {user_id}, User = {payload}")
    return _render(await handler.handle(UpdateUserAt(user_id, payload)))


@router.delete("/{user_id}", status_code=204)
async def delete_user(
    user_id: int,
    repository: UserRepository = Depends(get_user_repository)
):
    """Delete one user"""
    logger.info(f"Deleting User with Id = {user_id}")
    try:
        await repository.delete_by_id(user_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=204)


@router.delete("", status_code=204)
async def delete_all_users(repository: UserRepository = Depends(get_user_repository)):
    """Delete every user"""
    logger.info("Deleting All Users")
    deleted_count = await repository.delete_all()
    logger.info(f"Deleted {deleted_count} users")
    return Response(status_code=204)
