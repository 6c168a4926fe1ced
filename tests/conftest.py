"""
pytest configuration and fixtures for the user registry test suite
An in-memory repository stands in for Postgres and enforces the same
optimistic-version rules.
"""

import itertools
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from app import create_app
from database.errors import RecordNotFoundError, VersionConflictError
from database.user_repository import UserRepository
from models.user import User, UserPayload


class InMemoryUserRepository(UserRepository):
    """Dict-backed store; ids come from a counter so they are never reused"""

    def __init__(self):
        self.rows: Dict[int, User] = {}
        self._ids = itertools.count(1)
        self.writes = 0

    async def create(self, payload: UserPayload) -> User:
        if payload.version is not None:
            raise VersionConflictError(payload.id, payload.version)
        self.writes += 1
        user = User(id=next(self._ids), version=0, name=payload.name, email=payload.email)
        self.rows[user.id] = user
        return user.model_copy()

    async def find_by_id(self, user_id: int) -> User:
        if user_id not in self.rows:
            raise RecordNotFoundError(user_id)
        return self.rows[user_id].model_copy()

    async def get_reference_by_id(self, user_id: int) -> User:
        stored = await self.find_by_id(user_id)
        return User(id=stored.id, version=stored.version)

    async def find_all(self) -> List[User]:
        return [self.rows[user_id].model_copy() for user_id in sorted(self.rows)]

    async def update(self, user: User) -> User:
        self.writes += 1
        stored = self.rows.get(user.id)
        if stored is None:
            raise RecordNotFoundError(user.id)
        if stored.version != user.version:
            raise VersionConflictError(user.id, user.version)
        updated = User(id=user.id, version=user.version + 1, name=user.name, email=user.email)
        self.rows[user.id] = updated
        return updated.model_copy()

    async def delete_by_id(self, user_id: int) -> None:
        if self.rows.pop(user_id, None) is None:
            raise RecordNotFoundError(user_id)

    async def delete_all(self) -> int:
        count = len(self.rows)
        self.rows.clear()
        return count

    async def check_connection(self) -> bool:
        return True


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def client(repository):
    """HTTP client against an app wired to the in-memory repository"""
    with TestClient(create_app(repository=repository)) as test_client:
        yield test_client


@pytest.fixture
def krishna() -> Dict[str, str]:
    return {"name": "Krishna V. Yadav", "email": "krishna@heaven.com"}
