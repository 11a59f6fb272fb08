"""
Tests for UserRepository

Covers:
- CRUD round trips
- Case-insensitive email uniqueness
- Argument validation before any store access
- Cascade of orders on delete
"""
import pytest
from decimal import Decimal

from dataaccess.db.models import Order, User
from dataaccess.repositories import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    UserRepository,
)


class TestConstruction:
    """Tests for repository construction"""

    def test_requires_session(self):
        with pytest.raises(InvalidArgumentError):
            UserRepository(None)


class TestAddUser:
    """Tests for add()"""

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_keeps_fields(self, user_repo):
        user = User(first_name="John", last_name="Doe", email="john@example.com")

        result = await user_repo.add(user)

        assert result.id is not None
        assert result.id > 0
        fetched = await user_repo.get_by_id(result.id)
        assert fetched is not None
        assert fetched.first_name == "John"
        assert fetched.last_name == "Doe"
        assert fetched.email == "john@example.com"

    @pytest.mark.asyncio
    async def test_add_keeps_email_casing(self, user_repo):
        result = await user_repo.add(User(first_name="Ann", last_name="Lee", email="Ann.Lee@Example.com"))

        assert result.email == "Ann.Lee@Example.com"
        assert result.email_normalized == "ann.lee@example.com"

    @pytest.mark.asyncio
    async def test_add_none_raises(self, user_repo):
        with pytest.raises(InvalidArgumentError):
            await user_repo.add(None)

    @pytest.mark.asyncio
    async def test_add_wrong_type_raises(self, user_repo):
        with pytest.raises(InvalidArgumentError):
            await user_repo.add(Order(user_id=1, product="X", quantity=1, price=Decimal("1.00")))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [
            {"first_name": "", "last_name": "Doe", "email": "a@b.com"},
            {"first_name": "John", "last_name": "   ", "email": "a@b.com"},
            {"first_name": "John", "last_name": "Doe", "email": " "},
            {"first_name": "J" * 101, "last_name": "Doe", "email": "a@b.com"},
        ],
    )
    async def test_add_invalid_fields_raises(self, user_repo, fields):
        with pytest.raises(InvalidArgumentError):
            await user_repo.add(User(**fields))

        assert await user_repo.get_all() == []

    @pytest.mark.asyncio
    async def test_add_duplicate_email_different_case_raises_conflict(self, user_repo):
        await user_repo.add(User(first_name="A", last_name="One", email="dup@x.com"))

        with pytest.raises(ConflictError) as exc_info:
            await user_repo.add(User(first_name="B", last_name="Two", email="DUP@x.com"))

        assert exc_info.value.field == "email"
        assert len(await user_repo.get_all()) == 1

    @pytest.mark.asyncio
    async def test_add_duplicate_email_same_case_raises_conflict(self, user_repo):
        await user_repo.add(User(first_name="A", last_name="One", email="a@b.com"))

        with pytest.raises(ConflictError):
            await user_repo.add(User(first_name="B", last_name="Two", email="A@B.com"))


class TestGetUsers:
    """Tests for get_all(), get_by_id() and get_by_email()"""

    @pytest.mark.asyncio
    async def test_get_all_empty(self, user_repo):
        assert await user_repo.get_all() == []

    @pytest.mark.asyncio
    async def test_get_all_returns_every_user(self, user_repo, make_user):
        first = await make_user(first_name="First")
        second = await make_user(first_name="Second")

        result = await user_repo.get_all()

        assert [u.id for u in result] == [first.id, second.id]

    @pytest.mark.asyncio
    async def test_get_by_id_missing_returns_none(self, user_repo):
        assert await user_repo.get_by_id(999) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [0, -1])
    async def test_get_by_id_non_positive_raises(self, user_repo, bad_id):
        with pytest.raises(InvalidArgumentError):
            await user_repo.get_by_id(bad_id)

    @pytest.mark.asyncio
    async def test_get_by_email_is_case_insensitive(self, user_repo):
        user = await user_repo.add(User(first_name="John", last_name="Doe", email="john@example.com"))

        result = await user_repo.get_by_email("JOHN@EXAMPLE.COM")

        assert result is not None
        assert result.id == user.id

    @pytest.mark.asyncio
    async def test_get_by_email_missing_returns_none(self, user_repo):
        assert await user_repo.get_by_email("nobody@example.com") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_email", [None, "", "   "])
    async def test_get_by_email_blank_raises(self, user_repo, bad_email):
        with pytest.raises(InvalidArgumentError):
            await user_repo.get_by_email(bad_email)


class TestUpdateUser:
    """Tests for update()"""

    @pytest.mark.asyncio
    async def test_update_overwrites_fields(self, user_repo, make_user):
        user = await make_user()

        result = await user_repo.update(
            User(id=user.id, first_name="Updated", last_name="Name", email="updated@example.com")
        )

        assert result.id == user.id
        assert result.first_name == "Updated"
        assert result.last_name == "Name"
        assert result.email == "updated@example.com"
        assert await user_repo.get_by_email("UPDATED@example.com") is result

    @pytest.mark.asyncio
    async def test_update_returns_tracked_entity_and_keeps_id(self, user_repo, make_user):
        user = await make_user()
        incoming = User(id=user.id, first_name="New", last_name="Name", email=user.email)

        result = await user_repo.update(incoming)

        assert result is user
        assert result is not incoming
        assert result.id == user.id

    @pytest.mark.asyncio
    async def test_update_none_raises(self, user_repo):
        with pytest.raises(InvalidArgumentError):
            await user_repo.update(None)

    @pytest.mark.asyncio
    async def test_update_missing_user_raises_not_found(self, user_repo):
        with pytest.raises(NotFoundError) as exc_info:
            await user_repo.update(User(id=999, first_name="No", last_name="One", email="no@one.com"))

        assert exc_info.value.entity_id == 999

    @pytest.mark.asyncio
    async def test_update_without_id_raises_not_found(self, user_repo):
        with pytest.raises(NotFoundError):
            await user_repo.update(User(first_name="No", last_name="Id", email="no@id.com"))

    @pytest.mark.asyncio
    async def test_update_to_taken_email_raises_conflict(self, user_repo, make_user):
        await make_user(email="taken@example.com")
        user = await make_user(email="mine@example.com")

        with pytest.raises(ConflictError):
            await user_repo.update(
                User(id=user.id, first_name="X", last_name="Y", email="TAKEN@example.com")
            )

        reloaded = await user_repo.get_by_id(user.id)
        assert reloaded.email == "mine@example.com"
        assert reloaded.first_name == "Test"

    @pytest.mark.asyncio
    async def test_update_changing_only_case_of_own_email(self, user_repo, make_user):
        user = await make_user(email="case@example.com")

        result = await user_repo.update(
            User(id=user.id, first_name=user.first_name, last_name=user.last_name, email="CASE@example.com")
        )

        assert result.email == "CASE@example.com"
        assert result.email_normalized == "case@example.com"

    @pytest.mark.asyncio
    async def test_update_tracked_instance_to_taken_email_raises_conflict(self, user_repo, make_user):
        await make_user(email="taken@example.com")
        user = await make_user(email="mine@example.com")

        user.email = "taken@EXAMPLE.com"
        with pytest.raises(ConflictError) as exc_info:
            await user_repo.update(user)

        assert exc_info.value.value == "taken@EXAMPLE.com"
        # The rejected edit is discarded, so the session stays usable
        assert user.email == "mine@example.com"
        assert user.email_normalized == "mine@example.com"
        await user_repo.session.flush()
        assert await user_repo.email_exists("mine@example.com") is True

    @pytest.mark.asyncio
    async def test_update_tracked_instance(self, user_repo, make_user):
        user = await make_user(email="before@example.com")

        user.email = "after@example.com"
        result = await user_repo.update(user)

        assert result is user
        assert await user_repo.email_exists("before@example.com") is False
        assert await user_repo.email_exists("after@example.com") is True


class TestDeleteUser:
    """Tests for delete()"""

    @pytest.mark.asyncio
    async def test_delete_existing_user(self, user_repo, make_user):
        user = await make_user()

        assert await user_repo.delete(user.id) is True
        assert await user_repo.get_by_id(user.id) is None
        assert await user_repo.exists(user.id) is False

    @pytest.mark.asyncio
    async def test_delete_missing_user_returns_false(self, user_repo):
        assert await user_repo.delete(999) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [0, -1])
    async def test_delete_non_positive_raises(self, user_repo, bad_id):
        with pytest.raises(InvalidArgumentError):
            await user_repo.delete(bad_id)

    @pytest.mark.asyncio
    async def test_delete_cascades_to_orders(self, user_repo, order_repo, make_user):
        user = await make_user()
        other = await make_user()
        await order_repo.add(Order(user_id=user.id, product="A", quantity=1, price=Decimal("1.00")))
        await order_repo.add(Order(user_id=user.id, product="B", quantity=2, price=Decimal("2.00")))
        kept = await order_repo.add(Order(user_id=other.id, product="C", quantity=3, price=Decimal("3.00")))

        assert await user_repo.delete(user.id) is True

        assert await order_repo.get_by_user_id(user.id) == []
        remaining = await order_repo.get_all()
        assert [o.order_id for o in remaining] == [kept.order_id]


class TestExistence:
    """Tests for exists() and email_exists()"""

    @pytest.mark.asyncio
    async def test_exists(self, user_repo, make_user):
        user = await make_user()

        assert await user_repo.exists(user.id) is True
        assert await user_repo.exists(999) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", [0, -5])
    async def test_exists_non_positive_is_false(self, user_repo, bad_id):
        assert await user_repo.exists(bad_id) is False

    @pytest.mark.asyncio
    async def test_email_exists_is_case_insensitive(self, user_repo, make_user):
        await make_user(email="Mixed@Example.com")

        assert await user_repo.email_exists("mixed@example.com") is True
        assert await user_repo.email_exists("MIXED@EXAMPLE.COM") is True
        assert await user_repo.email_exists("other@example.com") is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("blank", [None, "", "  "])
    async def test_email_exists_blank_is_false(self, user_repo, blank):
        assert await user_repo.email_exists(blank) is False
