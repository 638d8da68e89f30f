"""Integration tests for AdminService."""

import pytest

from tourney_api.application import AdminService, WalletService
from tourney_api.core.enums import TransactionType
from tests.factories import AccountFactory


@pytest.mark.integration
class TestAdminService:
    """Role flags, user listing and the global ledger."""

    @pytest.mark.asyncio
    async def test_make_and_remove_admin(self, admin_service: AdminService, database_manager):
        user = await AccountFactory.create(database_manager)

        assert await admin_service.make_admin(user.id) is True
        assert (await database_manager.get_profile(user.id)).is_admin is True

        assert await admin_service.remove_admin(user.id) is True
        assert (await database_manager.get_profile(user.id)).is_admin is False

    @pytest.mark.asyncio
    async def test_make_admin_unknown_user(self, admin_service: AdminService):
        assert await admin_service.make_admin(999) is False
        assert await admin_service.remove_admin(999) is False

    @pytest.mark.asyncio
    async def test_list_users_newest_first(self, admin_service: AdminService, database_manager):
        users = await AccountFactory.create_multiple(database_manager, 3)

        profiles = await admin_service.list_users()

        assert [p.user_id for p in profiles] == [u.id for u in reversed(users)]

    @pytest.mark.asyncio
    async def test_list_transactions_spans_all_users(
        self, admin_service: AdminService, wallet_service: WalletService, database_manager
    ):
        alice, bob = await AccountFactory.create_multiple(database_manager, 2)
        await wallet_service.deposit(alice.id, "10.00")
        await wallet_service.grant_bonus(bob.id, "2.00")

        transactions = await admin_service.list_transactions()

        assert [(t.user_id, t.type) for t in transactions] == [
            (bob.id, TransactionType.BONUS),
            (alice.id, TransactionType.DEPOSIT),
        ]
