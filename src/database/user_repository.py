"""
User persistence: the repository contract and its asyncpg implementation
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, List

import asyncpg

from database.errors import RecordNotFoundError, RepositoryError, VersionConflictError
from models.user import User, UserPayload

logger = logging.getLogger(__name__)


class UserRepository(ABC):
    """Store contract for users with optimistic version enforcement"""

    @abstractmethod
    async def create(self, payload: UserPayload) -> User:
        """Persist a brand-new user; the store assigns the id and version 0"""

    @abstractmethod
    async def find_by_id(self, user_id: int) -> User:
        """Return the fully loaded user or raise RecordNotFoundError"""

    @abstractmethod
    async def get_reference_by_id(self, user_id: int) -> User:
        """Return a reference carrying only id and version, or raise RecordNotFoundError"""

    @abstractmethod
    async def find_all(self) -> List[User]:
        """Return every stored user ordered by id"""

    @abstractmethod
    async def update(self, user: User) -> User:
        """Write name/email if the stored version still equals user.version"""

    @abstractmethod
    async def delete_by_id(self, user_id: int) -> None:
        """Delete one user or raise RecordNotFoundError"""

    @abstractmethod
    async def delete_all(self) -> int:
        """Delete every user and return how many were removed"""

    @abstractmethod
    async def check_connection(self) -> bool:
        """Round-trip to the store, raising if it is unreachable"""


class PostgresUserRepository(UserRepository):
    """UserRepository backed by the `users` table through an asyncpg pool"""

    TABLE_NAME = "users"
    COLUMNS = "id, version, name, email"

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def create(self, payload: UserPayload) -> User:
        if payload.version is not None:
            # The client claims to hold a version of a record that is not stored
            logger.warning(f"Refusing to create user from payload presenting version {payload.version}")
            raise VersionConflictError(payload.id, payload.version)

        query = (
            f"INSERT INTO {self.TABLE_NAME} (version, name, email) "
            f"VALUES (0, $1, $2) RETURNING {self.COLUMNS}"
        )
        row = await self._fetchrow(query, payload.name, payload.email, transactional=True)
        if not row:
            raise RepositoryError("Insert operation failed - no data returned")
        return User(**dict(row))

    async def find_by_id(self, user_id: int) -> User:
        query = f"SELECT {self.COLUMNS} FROM {self.TABLE_NAME} WHERE id = $1"
        row = await self._fetchrow(query, user_id)
        if not row:
            raise RecordNotFoundError(user_id)
        return User(**dict(row))

    async def get_reference_by_id(self, user_id: int) -> User:
        query = f"SELECT id, version FROM {self.TABLE_NAME} WHERE id = $1"
        row = await self._fetchrow(query, user_id)
        if not row:
            raise RecordNotFoundError(user_id)
        return User(id=row["id"], version=row["version"])

    async def find_all(self) -> List[User]:
        query = f"SELECT {self.COLUMNS} FROM {self.TABLE_NAME} ORDER BY id"
        logger.info(f"Executing READ query: {query}")

        async with self.db_pool.acquire() as conn:
            try:
                rows = await conn.fetch(query)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error: {e}")
                raise RepositoryError(f"Database query failed: {str(e)}")

        return [User(**dict(row)) for row in rows]

    async def update(self, user: User) -> User:
        query = (
            f"UPDATE {self.TABLE_NAME} SET name = $1, email = $2, version = version + 1 "
            f"WHERE id = $3 AND version = $4 RETURNING {self.COLUMNS}"
        )
        params = [user.name, user.email, user.id, user.version]

        async with self.db_pool.acquire() as conn:
            async with conn.transaction():
                logger.info(f"Executing UPDATE: {query}")
                logger.info(f"Parameters: {params}")

                try:
                    row = await conn.fetchrow(query, *params)
                    if row:
                        return User(**dict(row))

                    # Zero rows: either the version moved on or the row is gone
                    exists = await conn.fetchval(
                        f"SELECT 1 FROM {self.TABLE_NAME} WHERE id = $1", user.id
                    )
                except asyncpg.PostgresError as e:
                    logger.error(f"Database error during UPDATE: {e}")
                    raise RepositoryError(f"Database UPDATE failed: {str(e)}")

        if exists:
            raise VersionConflictError(user.id, user.version)
        raise RecordNotFoundError(user.id)

    async def delete_by_id(self, user_id: int) -> None:
        deleted_count = await self._execute_delete(
            f"DELETE FROM {self.TABLE_NAME} WHERE id = $1", user_id
        )
        if deleted_count == 0:
            raise RecordNotFoundError(user_id)

    async def delete_all(self) -> int:
        return await self._execute_delete(f"DELETE FROM {self.TABLE_NAME}")

    async def check_connection(self) -> bool:
        async with self.db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        return True

    async def _fetchrow(self, query: str, *params: Any, transactional: bool = False):
        """Run a single-row statement, optionally inside a transaction"""
        logger.info(f"Executing query: {query}")
        logger.info(f"Parameters: {list(params)}")

        async with self.db_pool.acquire() as conn:
            try:
                if transactional:
                    async with conn.transaction():
                        return await conn.fetchrow(query, *params)
                return await conn.fetchrow(query, *params)
            except asyncpg.PostgresError as e:
                logger.error(f"Database error: {e}")
                raise RepositoryError(f"Database query failed: {str(e)}")

    async def _execute_delete(self, query: str, *params: Any) -> int:
        async with self.db_pool.acquire() as conn:
            async with conn.transaction():
                logger.info(f"Executing DELETE: {query}")
                logger.info(f"Parameters: {list(params)}")

                try:
                    result = await conn.execute(query, *params)
                except asyncpg.PostgresError as e:
                    logger.error(f"Database error during DELETE: {e}")
                    raise RepositoryError(f"Database DELETE failed: {str(e)}")

        # asyncpg returns "DELETE N" where N is the number of rows
        return int(result.split()[-1]) if result else 0
