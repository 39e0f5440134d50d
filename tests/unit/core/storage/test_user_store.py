"""
UserStore / HouseholdDirectory 테스트
"""

import asyncio
from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.interfaces import IBalanceRepository, IHouseholdDirectory, IUserDirectory
from core.domain.errors import NotFoundError, ValidationError
from core.storage import HouseholdDirectory, UserStore


D = Decimal


class TestUsers:
    """사용자"""

    def test_implements_protocols(self, users) -> None:
        assert isinstance(users, IBalanceRepository)
        assert isinstance(users, IUserDirectory)
        assert isinstance(users, IHouseholdDirectory)

    @pytest.mark.asyncio
    async def test_new_user_zero_balances(self, users) -> None:
        user = await users.get_user(3)

        assert user.username == "carla"
        assert user.personal_balance == D("0")
        assert user.family_balance == D("0")
        assert user.household_id is None

    @pytest.mark.asyncio
    async def test_duplicate_username(self, users) -> None:
        with pytest.raises(ValidationError):
            await users.create_user("ana")

    @pytest.mark.asyncio
    async def test_get_by_username(self, users) -> None:
        assert (await users.get_user_by_username("bruno")).id == 2
        assert await users.get_user_by_username("nobody") is None


class TestIncrementBalances:
    """잔고 증감"""

    @pytest.mark.asyncio
    async def test_increment(self, users) -> None:
        updated = await users.increment_user_balances(1, D("-50.5"), D("50.5"))

        assert updated.personal_balance == D("-50.5")
        assert updated.family_balance == D("50.5")
        assert (await users.get_user(1)).family_balance == D("50.5")

    @pytest.mark.asyncio
    async def test_missing_user(self, users) -> None:
        with pytest.raises(NotFoundError):
            await users.increment_user_balances(99, D("1"), D("0"))

    @pytest.mark.asyncio
    async def test_concurrent_increments_not_lost(self, users) -> None:
        await asyncio.gather(
            *(users.increment_user_balances(1, D("-1"), D("1")) for _ in range(20))
        )

        user = await users.get_user(1)
        assert user.personal_balance == D("-20")
        assert user.family_balance == D("20")

    @pytest.mark.asyncio
    async def test_concurrent_increments_across_connections(self, tmp_path) -> None:
        db_path = tmp_path / "nido.db"
        async with SQLiteAdapter(db_path) as setup:
            await init_schema(setup)
            await UserStore(setup).create_user("ana")

        async def bump() -> None:
            async with SQLiteAdapter(db_path) as db:
                await UserStore(db).increment_user_balances(1, D("2"), D("0"))

        await asyncio.gather(*(bump() for _ in range(5)))

        async with SQLiteAdapter(db_path) as db:
            user = await UserStore(db).get_user(1)
        assert user.personal_balance == D("10")


class TestHouseholds:
    """가구"""

    @pytest.mark.asyncio
    async def test_creator_is_member(self, users) -> None:
        household = await users.get_household(1)

        assert household.name == "Casa"
        assert household.created_by_user_id == 1
        assert await users.get_member_ids(1) == {1, 2}

    @pytest.mark.asyncio
    async def test_list_members(self, users) -> None:
        members = await users.list_members(1)
        assert [m.username for m in members] == ["ana", "bruno"]

    @pytest.mark.asyncio
    async def test_leave_household(self, users) -> None:
        user = await users.set_household(2, None)

        assert user.household_id is None
        assert await users.get_member_ids(1) == {1}

    @pytest.mark.asyncio
    async def test_set_household_missing_user(self, users) -> None:
        with pytest.raises(NotFoundError):
            await users.set_household(99, 1)


class TestHouseholdDirectory:
    @pytest.mark.asyncio
    async def test_reads_members_from_file(self, tmp_path) -> None:
        db_path = tmp_path / "nido.db"
        async with SQLiteAdapter(db_path) as db:
            await init_schema(db)
            store = UserStore(db)
            ana = await store.create_user("ana")
            await store.create_household("Casa", ana.id)

        directory = HouseholdDirectory(db_path)

        assert await directory.get_member_ids(1) == {ana.id}
        assert await directory.get_member_ids(2) == set()
