"""Integration tests for DatabaseManager."""

import asyncio
import os
import subprocess
import sys
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncSession

from tourney_api.config import Config
from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.core.enums import GameSessionStatus, JoinOutcome, TransactionStatus, TransactionType
from tourney_api.core.errors import ConflictError, InsufficientFundsError, NotFoundError
from tests.conftest import USE_POSTGRES
from tests.factories import AccountFactory, TournamentFactory
from tests.utils import count_participant_rows, count_transactions, get_profile_wallet_balance

project_root = Path(__file__).parent.parent


@pytest.mark.integration
class TestDatabaseManager:
    """Test suite for DatabaseManager lifecycle and sessions."""

    @pytest.mark.asyncio
    async def test_database_manager_initialization(self, test_config: Config):
        """Test database manager initialization and cleanup."""
        manager = DatabaseManager(test_config)

        # Initially not initialized
        with pytest.raises(RuntimeError, match="not initialized"):
            async with manager.get_session():
                pass

        await manager.initialize()

        async with manager.get_session() as session:
            assert isinstance(session, AsyncSession)

        await manager.close()

        with pytest.raises(RuntimeError, match="not initialized"):
            async with manager.get_session():
                pass

    @pytest.mark.asyncio
    async def test_double_initialization_warning(self, test_config: Config, caplog):
        """Test that double initialization logs a warning."""
        manager = DatabaseManager(test_config)

        await manager.initialize()
        await manager.initialize()

        assert "already initialized" in caplog.text

        await manager.close()

    @pytest.mark.asyncio
    async def test_session_context_manager(self, database_manager: DatabaseManager):
        """Test session context manager behavior."""
        async with database_manager.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            assert result.scalar() == 1

    @pytest.mark.asyncio
    async def test_create_and_drop_tables(self, database_manager: DatabaseManager):
        """Test table creation and dropping."""

        def table_names(sync_conn):
            return set(inspect(sync_conn).get_table_names())

        async with database_manager.engine.connect() as conn:
            tables = await conn.run_sync(table_names)
        assert {
            "users",
            "profiles",
            "wallets",
            "transactions",
            "tournaments",
            "tournament_participants",
            "game_sessions",
        } <= tables

        await database_manager.drop_tables()
        async with database_manager.engine.connect() as conn:
            tables = await conn.run_sync(table_names)
        assert "wallets" not in tables

        await database_manager.create_tables()


@pytest.mark.integration
@pytest.mark.skipif(USE_POSTGRES, reason="migration check runs against a fresh SQLite file")
class TestMigrations:
    """The alembic schema matches what the store code expects."""

    @pytest.mark.asyncio
    async def test_alembic_upgrade_head(self, test_config: Config):
        env = os.environ.copy()
        env["DATABASE_URL"] = test_config.get_database_url()

        result = subprocess.run(
            [sys.executable, "-m", "alembic", "upgrade", "head"],
            cwd=str(project_root),
            env=env,
            capture_output=True,
            text=True,
            timeout=30,
        )
        assert result.returncode == 0, result.stderr

        manager = DatabaseManager(test_config)
        await manager.initialize()
        try:
            user = await AccountFactory.create(manager, username="migrated")
            wallet, _ = await manager.credit_wallet(
                user.id, Decimal("1.00"), TransactionType.DEPOSIT
            )
            assert wallet.balance == Decimal("1.00")
        finally:
            await manager.close()


@pytest.mark.integration
class TestAccountStore:
    """Account creation and identity updates."""

    @pytest.mark.asyncio
    async def test_create_account_creates_profile_and_empty_wallet(
        self, database_manager: DatabaseManager
    ):
        user, profile, wallet = await database_manager.create_account(
            username="alice", email="alice@example.com", password_hash="hash"
        )

        assert user.id is not None
        assert profile.user_id == user.id
        assert profile.username == "alice"
        assert profile.is_admin is False
        assert profile.wallet_balance == Decimal("0.00")
        assert wallet.user_id == user.id
        assert wallet.balance == Decimal("0.00")
        assert wallet.bonus_balance == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_create_account_duplicate_leaves_no_partial_rows(
        self, database_manager: DatabaseManager
    ):
        await AccountFactory.create(database_manager, username="alice")

        with pytest.raises(ConflictError):
            await database_manager.create_account(
                username="alice", email="other@example.com", password_hash="hash"
            )

        assert await database_manager.get_user_by_email("other@example.com") is None
        assert len(await database_manager.get_all_profiles()) == 1

    @pytest.mark.asyncio
    async def test_update_account_keeps_user_and_profile_in_step(
        self, database_manager: DatabaseManager
    ):
        user = await AccountFactory.create(database_manager, username="alice")

        profile = await database_manager.update_account(user.id, username="alicia")

        assert profile.username == "alicia"
        assert (await database_manager.get_user(user.id)).username == "alicia"

    @pytest.mark.asyncio
    async def test_update_account_unknown_user(self, database_manager: DatabaseManager):
        assert await database_manager.update_account(999, username="ghost") is None


@pytest.mark.integration
class TestWalletStore:
    """Atomic balance changes with ledger entries."""

    @pytest.mark.asyncio
    async def test_credit_updates_balance_snapshot_and_ledger(
        self, database_manager: DatabaseManager
    ):
        user = await AccountFactory.create(database_manager)

        wallet, transaction = await database_manager.credit_wallet(
            user.id, Decimal("12.34"), TransactionType.DEPOSIT, payment_method="card"
        )

        assert wallet.balance == Decimal("12.34")
        assert transaction.type == TransactionType.DEPOSIT
        assert transaction.status == TransactionStatus.COMPLETED
        assert transaction.amount == Decimal("12.34")
        assert transaction.payment_method == "card"
        assert await get_profile_wallet_balance(database_manager, user.id) == Decimal("12.34")

    @pytest.mark.asyncio
    async def test_credit_to_bonus_leaves_balance(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)

        wallet, _ = await database_manager.credit_wallet(
            user.id, Decimal("3.00"), TransactionType.BONUS, to_bonus=True
        )

        assert wallet.balance == Decimal("0.00")
        assert wallet.bonus_balance == Decimal("3.00")

    @pytest.mark.asyncio
    async def test_credit_missing_wallet(self, database_manager: DatabaseManager):
        with pytest.raises(NotFoundError):
            await database_manager.credit_wallet(404, Decimal("1.00"), TransactionType.DEPOSIT)

    @pytest.mark.asyncio
    async def test_debit_is_guarded_by_balance(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)
        await database_manager.credit_wallet(user.id, Decimal("5.00"), TransactionType.DEPOSIT)

        with pytest.raises(InsufficientFundsError) as exc_info:
            await database_manager.debit_wallet(
                user.id, Decimal("5.01"), TransactionType.WITHDRAWAL
            )

        assert exc_info.value.available == "5.00"
        assert (await database_manager.get_wallet(user.id)).balance == Decimal("5.00")
        assert await count_transactions(database_manager, user.id) == 1

    @pytest.mark.asyncio
    async def test_debit_defaults_to_pending(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)
        await database_manager.credit_wallet(user.id, Decimal("5.00"), TransactionType.DEPOSIT)

        wallet, transaction = await database_manager.debit_wallet(
            user.id, Decimal("5.00"), TransactionType.WITHDRAWAL
        )

        assert wallet.balance == Decimal("0.00")
        assert transaction.status == TransactionStatus.PENDING

    @pytest.mark.asyncio
    async def test_concurrent_debits_never_overdraw(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)
        await database_manager.credit_wallet(user.id, Decimal("10.00"), TransactionType.DEPOSIT)

        results = await asyncio.gather(
            *[
                database_manager.debit_wallet(
                    user.id, Decimal("3.00"), TransactionType.WITHDRAWAL
                )
                for _ in range(5)
            ],
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InsufficientFundsError)]
        assert len(succeeded) == 3
        assert len(rejected) == 2
        assert (await database_manager.get_wallet(user.id)).balance == Decimal("1.00")
        assert await count_transactions(database_manager, user.id) == 4

    @pytest.mark.asyncio
    async def test_ledger_is_newest_first(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)
        for amount in ("1.00", "2.00", "3.00"):
            await database_manager.credit_wallet(
                user.id, Decimal(amount), TransactionType.DEPOSIT
            )

        transactions = await database_manager.get_user_transactions(user.id)

        assert [t.amount for t in transactions] == [
            Decimal("3.00"),
            Decimal("2.00"),
            Decimal("1.00"),
        ]


@pytest.mark.integration
class TestTournamentStore:
    """Tournament CRUD and participant registration."""

    @pytest.mark.asyncio
    async def test_add_participant_outcomes(self, database_manager: DatabaseManager):
        first, second = await AccountFactory.create_multiple(database_manager, 2)
        tournament = await TournamentFactory.create(database_manager, max_players=1)

        assert await database_manager.add_participant(tournament.id, first.id) == JoinOutcome.JOINED
        assert (
            await database_manager.add_participant(tournament.id, first.id)
            == JoinOutcome.ALREADY_JOINED
        )
        assert await database_manager.add_participant(tournament.id, second.id) == JoinOutcome.FULL

        stored = await database_manager.get_tournament(tournament.id)
        assert stored.current_players == 1
        assert await count_participant_rows(database_manager, tournament.id) == 1

    @pytest.mark.asyncio
    async def test_update_tournament_partial(self, database_manager: DatabaseManager):
        tournament = await TournamentFactory.create(database_manager, title="Old")

        updated = await database_manager.update_tournament(
            tournament.id, {"title": "New", "prize_pool": Decimal("250.00")}
        )

        assert updated.title == "New"
        assert updated.prize_pool == Decimal("250.00")
        assert updated.game == tournament.game
        assert updated.max_players == tournament.max_players

    @pytest.mark.asyncio
    async def test_update_tournament_rejects_current_players(
        self, database_manager: DatabaseManager
    ):
        tournament = await TournamentFactory.create(database_manager)

        with pytest.raises(ValueError):
            await database_manager.update_tournament(tournament.id, {"current_players": 3})

    @pytest.mark.asyncio
    async def test_update_tournament_cannot_shrink_below_players(
        self, database_manager: DatabaseManager
    ):
        users = await AccountFactory.create_multiple(database_manager, 2)
        tournament = await TournamentFactory.create(database_manager, max_players=4)
        for user in users:
            await database_manager.add_participant(tournament.id, user.id)

        with pytest.raises(ConflictError):
            await database_manager.update_tournament(tournament.id, {"max_players": 1})

        assert (await database_manager.get_tournament(tournament.id)).max_players == 4

    @pytest.mark.asyncio
    async def test_delete_tournament_cascades_participants(
        self, database_manager: DatabaseManager
    ):
        user = await AccountFactory.create(database_manager)
        tournament = await TournamentFactory.create(database_manager)
        await database_manager.add_participant(tournament.id, user.id)

        assert await database_manager.delete_tournament(tournament.id) is True
        assert await database_manager.get_tournament(tournament.id) is None
        assert await count_participant_rows(database_manager, tournament.id) == 0
        assert await database_manager.delete_tournament(tournament.id) is False


@pytest.mark.integration
class TestGameSessionStore:
    """Game session updates."""

    @pytest.mark.asyncio
    async def test_finishing_status_stamps_ended_at(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)
        game_session = await database_manager.create_game_session(user.id, "chess")

        scored = await database_manager.update_game_session(game_session.id, {"score": 10})
        assert scored.ended_at is None

        finished = await database_manager.update_game_session(
            game_session.id, {"status": GameSessionStatus.ABANDONED}
        )
        assert finished.status == GameSessionStatus.ABANDONED
        assert finished.ended_at is not None
        assert finished.ended_at >= game_session.created_at

    @pytest.mark.asyncio
    async def test_ended_at_is_not_client_settable(self, database_manager: DatabaseManager):
        user = await AccountFactory.create(database_manager)
        game_session = await database_manager.create_game_session(user.id, "chess")

        with pytest.raises(ValueError):
            await database_manager.update_game_session(game_session.id, {"ended_at": None})

    @pytest.mark.asyncio
    async def test_update_missing_session(self, database_manager: DatabaseManager):
        assert await database_manager.update_game_session(999, {"score": 1}) is None
