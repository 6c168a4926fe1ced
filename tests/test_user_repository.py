"""
PostgresUserRepository against a mocked asyncpg pool
"""

from unittest.mock import AsyncMock, MagicMock

import asyncpg
import pytest

from database.errors import RecordNotFoundError, RepositoryError, VersionConflictError
from database.user_repository import PostgresUserRepository
from models.user import User, UserPayload


class _AsyncContext:
    """Minimal async context manager returning a fixed value"""

    def __init__(self, value=None):
        self.value = value

    async def __aenter__(self):
        return self.value

    async def __aexit__(self, exc_type, exc, tb):
        return False


@pytest.fixture
def conn():
    connection = MagicMock()
    connection.fetchrow = AsyncMock(return_value=None)
    connection.fetch = AsyncMock(return_value=[])
    connection.fetchval = AsyncMock(return_value=None)
    connection.execute = AsyncMock(return_value="DELETE 0")
    connection.transaction = MagicMock(side_effect=lambda: _AsyncContext())
    return connection


@pytest.fixture
def pg_repository(conn):
    pool = MagicMock()
    pool.acquire = MagicMock(side_effect=lambda: _AsyncContext(conn))
    return PostgresUserRepository(pool)


class TestPostgresUserRepository:

    @pytest.mark.asyncio
    async def test_create_inserts_with_version_zero(self, pg_repository, conn):
        conn.fetchrow.return_value = {"id": 1, "version": 0, "name": "Ann", "email": "ann@example.com"}

        user = await pg_repository.create(UserPayload(id=55, name="Ann", email="ann@example.com"))

        assert user == User(id=1, version=0, name="Ann", email="ann@example.com")
        query, *params = conn.fetchrow.await_args.args
        assert query.startswith("INSERT INTO users")
        assert params == ["Ann", "ann@example.com"]
        conn.transaction.assert_called_once()

    @pytest.mark.asyncio
    async def test_create_presenting_version_conflicts_without_writing(self, pg_repository, conn):
        with pytest.raises(VersionConflictError):
            await pg_repository.create(UserPayload(id=3, version=1, name="Ann"))

        conn.fetchrow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_find_by_id_missing_raises(self, pg_repository):
        with pytest.raises(RecordNotFoundError) as excinfo:
            await pg_repository.find_by_id(8)

        assert excinfo.value.record_id == 8

    @pytest.mark.asyncio
    async def test_reference_carries_only_id_and_version(self, pg_repository, conn):
        conn.fetchrow.return_value = {"id": 4, "version": 2}

        reference = await pg_repository.get_reference_by_id(4)

        assert reference == User(id=4, version=2)
        query = conn.fetchrow.await_args.args[0]
        assert query.startswith("SELECT id, version FROM users")

    @pytest.mark.asyncio
    async def test_find_all_orders_by_id(self, pg_repository, conn):
        conn.fetch.return_value = [
            {"id": 1, "version": 0, "name": "A", "email": "a@example.com"},
            {"id": 2, "version": 3, "name": "B", "email": "b@example.com"},
        ]

        users = await pg_repository.find_all()

        assert [user.id for user in users] == [1, 2]
        assert "ORDER BY id" in conn.fetch.await_args.args[0]

    @pytest.mark.asyncio
    async def test_update_bumps_version_when_current(self, pg_repository, conn):
        conn.fetchrow.return_value = {"id": 4, "version": 3, "name": "New", "email": "new@example.com"}

        updated = await pg_repository.update(User(id=4, version=2, name="New", email="new@example.com"))

        assert updated.version == 3
        query, *params = conn.fetchrow.await_args.args
        assert "version = version + 1" in query
        assert "WHERE id = $3 AND version = $4" in query
        assert params == ["New", "new@example.com", 4, 2]

    @pytest.mark.asyncio
    async def test_update_with_stale_version_conflicts(self, pg_repository, conn):
        conn.fetchrow.return_value = None
        conn.fetchval.return_value = 1

        with pytest.raises(VersionConflictError) as excinfo:
            await pg_repository.update(User(id=4, version=1, name="Late"))

        assert excinfo.value.record_id == 4
        assert excinfo.value.version == 1

    @pytest.mark.asyncio
    async def test_update_of_vanished_row_is_not_found(self, pg_repository, conn):
        conn.fetchrow.return_value = None
        conn.fetchval.return_value = None

        with pytest.raises(RecordNotFoundError):
            await pg_repository.update(User(id=4, version=1, name="Late"))

    @pytest.mark.asyncio
    async def test_delete_by_id_missing_raises(self, pg_repository, conn):
        conn.execute.return_value = "DELETE 0"

        with pytest.raises(RecordNotFoundError):
            await pg_repository.delete_by_id(12)

    @pytest.mark.asyncio
    async def test_delete_all_returns_count(self, pg_repository, conn):
        conn.execute.return_value = "DELETE 3"

        assert await pg_repository.delete_all() == 3
        assert conn.execute.await_args.args == ("DELETE FROM users",)

    @pytest.mark.asyncio
    async def test_postgres_errors_are_wrapped(self, pg_repository, conn):
        conn.fetch.side_effect = asyncpg.PostgresError("relation \"users\" does not exist")

        with pytest.raises(RepositoryError, match="Database query failed"):
            await pg_repository.find_all()
