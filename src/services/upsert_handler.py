"""
PUT semantics for users: update in place when the target exists, otherwise create.

  1. 200 OK, no body, for a successful update of an existing user.
  2. 201 Created for a new user, with the stored record echoed in the body
     and its most specific URI in the Location header.
  3. 409 Conflict when a third-party modification made the write stale.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from database.errors import RecordNotFoundError, VersionConflictError
from database.user_repository import UserRepository
from models.user import User, UserPayload
from utils.error_handling import STALE_VERSION_ERROR

logger = logging.getLogger(__name__)

USERS_PATH = "/users"


@dataclass(frozen=True)
class CreateUser:
    """PUT against the collection root"""
    candidate: UserPayload


@dataclass(frozen=True)
class UpdateUserAt:
    """PUT against an explicit user id"""
    user_id: int
    candidate: UserPayload


UpsertCommand = Union[CreateUser, UpdateUserAt]


@dataclass
class UpsertResult:
    """Outcome of an upsert, ready to be rendered as an HTTP response"""
    status_code: int
    body: Optional[Dict[str, Any]] = None
    location: Optional[str] = None

    @classmethod
    def updated(cls) -> "UpsertResult":
        return cls(status_code=200)

    @classmethod
    def created(cls, user: User) -> "UpsertResult":
        return cls(
            status_code=201,
            body=user.model_dump(),
            location=f"{USERS_PATH}/{user.id}"
        )

    @classmethod
    def conflict(cls) -> "UpsertResult":
        return cls(status_code=409, body=dict(STALE_VERSION_ERROR))


class UpsertHandler:
    """Resolves a PUT into exactly one store write"""

    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def handle(self, command: UpsertCommand) -> UpsertResult:
        if isinstance(command, UpdateUserAt):
            logger.info(f"Getting User with Id = {command.user_id} from database...")
            try:
                reference = await self.repository.get_reference_by_id(command.user_id)
            except RecordNotFoundError as e:
                # Absence selects the create branch
                logger.info(f"Error: {e}")
            else:
                return await self._update(reference, command.candidate)

        return await self._create(command.candidate)

    async def _update(self, reference: User, candidate: UserPayload) -> UpsertResult:
        reference.update_from(candidate)
        logger.info(f"Updating in Database user with Id = {reference.id}")
        try:
            await self.repository.update(reference)
        except (VersionConflictError, RecordNotFoundError) as e:
            logger.info(
                f"Conflict - Could Not Update in Database user with Id = {reference.id}, "
                f"Error Message = {e}"
            )
            return UpsertResult.conflict()
        return UpsertResult.updated()

    async def _create(self, candidate: UserPayload) -> UpsertResult:
        logger.info(f"Creating User in Database user = {candidate}")
        try:
            saved = await self.repository.create(candidate)
        except VersionConflictError as e:
            logger.info(f"Conflict - Could Not Create in Database user = {candidate}, Error Message = {e}")
            return UpsertResult.conflict()
        logger.info(f"Created User in Database user = {saved}")
        return UpsertResult.created(saved)
