"""
Blog Backend — User Service Unit Tests
========================================

What we test:
    ✅ Signup persists a validated user and reports conflicts
    ✅ Both name guards (validate() and the pre-insert hook) block inserts
    ✅ A racing duplicate signup is stopped by the UNIQUE constraint
    ✅ Update writes only supplied fields, validates only on request
    ✅ SQLAlchemy failures are wrapped in DatabaseError
    ✅ Timestamps read back from the store are still UTC
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from app.models.user import User
from app.services.user_service import UserService


class TestCreateUser:

    def setup_method(self):
        self.service = UserService()

    @pytest.mark.asyncio
    async def test_create_user_success(self, database, user_count):
        async with database.session() as db:
            result = await self.service.create_user(
                db=db, name="Alice Smith", email="alice@example.com", role="admin"
            )

        assert result.id == 1
        assert result.role == "admin"
        assert result.created_at is not None

        assert await user_count() == 1

    @pytest.mark.asyncio
    async def test_create_user_conflict(self, database, user_count):
        async with database.session() as db:
            await self.service.create_user(db=db, name="Alice Smith", email="alice@example.com")

        with pytest.raises(ConflictError) as exc_info:
            async with database.session() as db:
                await self.service.create_user(db=db, name="Alicia", email="alice@example.com")

        assert exc_info.value.message == "Email already exists."
        assert await user_count() == 1

    @pytest.mark.asyncio
    async def test_short_name_rejected_by_validation(self, database, user_count):
        with pytest.raises(ValidationError) as exc_info:
            async with database.session() as db:
                await self.service.create_user(db=db, name="Al", email="al@example.com")

        assert exc_info.value.errors == ["Name must be at least 3 characters long."]
        assert await user_count() == 0

    @pytest.mark.asyncio
    async def test_insert_hook_rejects_short_name_without_validation(self, database, user_count):
        with pytest.raises(ValidationError) as exc_info:
            async with database.session() as db:
                db.add(User(name="Al", email="al@example.com", role="user"))
                await db.flush()

        assert exc_info.value.message == "Name must be greater than 2 characters."
        assert await user_count() == 0

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_hits_unique_constraint(self, database, user_count):
        # The pending row is invisible to the email lookup, as a concurrent
        # signup that has not been inserted yet would be.
        with pytest.raises(DatabaseError) as exc_info:
            async with database.session() as db:
                with db.no_autoflush:
                    db.add(User(name="First Alice", email="alice@example.com"))
                    await self.service.create_user(
                        db=db, name="Second Alice", email="alice@example.com"
                    )

        assert "UNIQUE constraint failed" in exc_info.value.message
        assert await user_count() == 0

    @pytest.mark.asyncio
    async def test_database_failure_is_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("database is locked")
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_user(
                db=mock_db_session, name="Alice Smith", email="alice@example.com"
            )

        assert exc_info.value.message == "database is locked"
        mock_db_session.add.assert_not_called()


class TestUpdateUser:

    def setup_method(self):
        self.service = UserService()

    async def _signup(self, database, **fields):
        async with database.session() as db:
            return await self.service.create_user(db=db, **fields)

    @pytest.mark.asyncio
    async def test_update_not_found(self, database):
        with pytest.raises(NotFoundError) as exc_info:
            async with database.session() as db:
                await self.service.update_user(db=db, user_id=42, changes={"name": "Someone"})

        assert exc_info.value.message == "User not found."

    @pytest.mark.asyncio
    async def test_update_only_touches_supplied_fields(self, database):
        created = await self._signup(
            database, name="Alice Smith", email="alice@example.com", role="user"
        )

        async with database.session() as db:
            updated = await self.service.update_user(
                db=db, user_id=created.id, changes={"role": "admin"}
            )

        assert updated.role == "admin"
        assert updated.name == "Alice Smith"
        assert updated.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_update_bypasses_validation_by_default(self, database):
        created = await self._signup(database, name="Alice Smith", email="alice@example.com")

        async with database.session() as db:
            updated = await self.service.update_user(
                db=db,
                user_id=created.id,
                changes={"name": "Al", "email": "not-an-email", "role": "root"},
            )

        assert (updated.name, updated.email, updated.role) == ("Al", "not-an-email", "root")

        async with database.session() as db:
            stored = await db.get(User, created.id)
            assert stored.email == "not-an-email"

    @pytest.mark.asyncio
    async def test_update_can_opt_into_validation(self, database):
        created = await self._signup(database, name="Alice Smith", email="alice@example.com")

        with pytest.raises(ValidationError):
            async with database.session() as db:
                await self.service.update_user(
                    db=db,
                    user_id=created.id,
                    changes={"email": "not-an-email"},
                    validate=True,
                )

        async with database.session() as db:
            stored = await db.get(User, created.id)
            assert stored.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_update_ignores_unknown_fields(self, database):
        created = await self._signup(database, name="Alice Smith", email="alice@example.com")

        async with database.session() as db:
            updated = await self.service.update_user(
                db=db, user_id=created.id, changes={"id": 99, "name": "Alice J"}
            )

        assert updated.id == created.id
        assert updated.name == "Alice J"

    @pytest.mark.asyncio
    async def test_reread_timestamps_stay_utc(self, database):
        created = await self._signup(database, name="Alice Smith", email="alice@example.com")

        async with database.session() as db:
            stored = await db.get(User, created.id)

        assert stored.created_at.tzinfo is not None
        assert stored.created_at.utcoffset() == timedelta(0)
        assert stored.created_at == created.created_at

        async with database.session() as db:
            updated = await self.service.update_user(
                db=db, user_id=created.id, changes={"name": "Alice J"}
            )

        assert updated.created_at.utcoffset() == timedelta(0)
        assert updated.updated_at.utcoffset() == timedelta(0)
        assert updated.updated_at >= updated.created_at
