"""Database infrastructure layer.

``DatabaseManager`` owns the async engine and exposes one method per store
operation. Every method runs in its own session; compound writes (balance
update plus ledger insert, participant insert plus counter increment)
commit together or not at all.
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

from sqlalchemy import event, select, update, delete, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.pool import NullPool

from ...config import Config
from ...core.entities import (
    User,
    Profile,
    Wallet,
    Transaction,
    Tournament,
    TournamentParticipant,
    GameSession,
)
from ...core.enums import TransactionType, TransactionStatus, GameSessionStatus, JoinOutcome
from ...core.errors import ConflictError, NotFoundError, InsufficientFundsError
from ...core.money import ZERO, format_amount
from .models import (
    Base,
    User as UserModel,
    Profile as ProfileModel,
    Wallet as WalletModel,
    Transaction as TransactionModel,
    Tournament as TournamentModel,
    TournamentParticipant as TournamentParticipantModel,
    GameSession as GameSessionModel,
)

logger = logging.getLogger(__name__)

TOURNAMENT_UPDATABLE_FIELDS = frozenset(
    {"title", "game", "description", "banner_url", "entry_fee", "prize_pool", "max_players"}
)
GAME_SESSION_UPDATABLE_FIELDS = frozenset({"status", "score"})


def _enable_sqlite_write_locking(engine: AsyncEngine) -> None:
    """Make SQLite transactions take the write lock up front.

    pysqlite's deferred BEGIN lets two connections read and then race to
    upgrade their locks, which fails immediately with "database is locked".
    BEGIN IMMEDIATE makes writers queue on the busy timeout instead.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class DatabaseManager:
    """Manages database connection and provides direct repository methods."""

    def __init__(self, config: Config):
        self.config = config
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    async def initialize(self) -> None:
        """Initialize database engine and session factory."""
        if self._engine is not None:
            logger.warning("Database manager already initialized")
            return

        connect_args: Dict[str, Any] = {}
        if self.config.is_sqlite():
            connect_args["timeout"] = 30

        self._engine = create_async_engine(
            self.config.get_database_url(),
            echo=self.config.log_level == "DEBUG",
            poolclass=NullPool,  # One connection per session
            pool_pre_ping=True,
            connect_args=connect_args,
        )

        if self.config.is_sqlite():
            _enable_sqlite_write_locking(self._engine)

        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        logger.info("Database manager initialized successfully")

    async def close(self) -> None:
        """Close database engine and clean up resources."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            logger.info("Database manager closed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session with automatic cleanup."""
        if self._session_factory is None:
            raise RuntimeError(
                "Database manager not initialized. Call initialize() first."
            )

        async with self._session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_tables(self) -> None:
        """Create all database tables. Used for testing and initial setup."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables created successfully")

    async def drop_tables(self) -> None:
        """Drop all database tables. Used for testing cleanup."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

        logger.info("Database tables dropped successfully")

    @property
    def engine(self) -> AsyncEngine:
        """Get the database engine."""
        if self._engine is None:
            raise RuntimeError(
                "Database manager not initialized. Call initialize() first."
            )
        return self._engine

    # Conversion methods
    def _convert_db_user_to_core_entity(self, record: UserModel) -> User:
        return User(
            username=record.username,
            email=record.email,
            password_hash=record.password,
            created_at=record.created_at,
            id=record.id,
        )

    def _convert_db_profile_to_core_entity(self, record: ProfileModel) -> Profile:
        return Profile(
            user_id=record.user_id,
            username=record.username,
            email=record.email,
            wallet_balance=record.wallet_balance,
            is_admin=record.is_admin,
            is_owner=record.is_owner,
            created_at=record.created_at,
            id=record.id,
        )

    def _convert_db_wallet_to_core_entity(self, record: WalletModel) -> Wallet:
        return Wallet(
            user_id=record.user_id,
            balance=record.balance,
            bonus_balance=record.bonus_balance,
            created_at=record.created_at,
            updated_at=record.updated_at,
            id=record.id,
        )

    def _convert_db_transaction_to_core_entity(self, record: TransactionModel) -> Transaction:
        return Transaction(
            user_id=record.user_id,
            type=TransactionType(record.type),
            amount=record.amount,
            status=TransactionStatus(record.status),
            payment_id=record.payment_id,
            payment_method=record.payment_method,
            description=record.description,
            created_at=record.created_at,
            id=record.id,
        )

    def _convert_db_tournament_to_core_entity(self, record: TournamentModel) -> Tournament:
        return Tournament(
            title=record.title,
            game=record.game,
            entry_fee=record.entry_fee,
            prize_pool=record.prize_pool,
            max_players=record.max_players,
            current_players=record.current_players,
            description=record.description,
            banner_url=record.banner_url,
            created_at=record.created_at,
            updated_at=record.updated_at,
            id=record.id,
        )

    def _convert_db_participant_to_core_entity(
        self, record: TournamentParticipantModel
    ) -> TournamentParticipant:
        return TournamentParticipant(
            tournament_id=record.tournament_id,
            user_id=record.user_id,
            joined_at=record.joined_at,
            id=record.id,
        )

    def _convert_db_game_session_to_core_entity(self, record: GameSessionModel) -> GameSession:
        return GameSession(
            user_id=record.user_id,
            game=record.game,
            status=GameSessionStatus(record.status),
            tournament_id=record.tournament_id,
            score=record.score,
            created_at=record.created_at,
            updated_at=record.updated_at,
            ended_at=record.ended_at,
            id=record.id,
        )

    # User and profile repository methods
    async def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
    ) -> Tuple[User, Profile, Wallet]:
        """Create a user together with its profile and an empty wallet.

        Raises:
            ConflictError: If the username or email is already registered
        """
        async with self.get_session() as session:
            user = UserModel(username=username, email=email, password=password_hash)
            session.add(user)
            try:
                await session.flush()
            except IntegrityError:
                await session.rollback()
                raise ConflictError("User already exists")

            profile = ProfileModel(
                user_id=user.id,
                username=username,
                email=email,
                wallet_balance=ZERO,
                is_admin=False,
                is_owner=False,
            )
            wallet = WalletModel(user_id=user.id, balance=ZERO, bonus_balance=ZERO)
            session.add_all([profile, wallet])
            await session.commit()

            for record in (user, profile, wallet):
                await session.refresh(record)

            return (
                self._convert_db_user_to_core_entity(user),
                self._convert_db_profile_to_core_entity(profile),
                self._convert_db_wallet_to_core_entity(wallet),
            )

    async def get_user(self, user_id: int) -> Optional[User]:
        """Get a user by ID."""
        async with self.get_session() as session:
            result = await session.execute(select(UserModel).where(UserModel.id == user_id))
            record = result.scalar_one_or_none()
            return self._convert_db_user_to_core_entity(record) if record else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address."""
        async with self.get_session() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            record = result.scalar_one_or_none()
            return self._convert_db_user_to_core_entity(record) if record else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username."""
        async with self.get_session() as session:
            result = await session.execute(
                select(UserModel).where(UserModel.username == username)
            )
            record = result.scalar_one_or_none()
            return self._convert_db_user_to_core_entity(record) if record else None

    async def update_account(
        self,
        user_id: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Optional[Profile]:
        """Update identity fields on the user and its profile together.

        Returns:
            The updated profile, or None if the user does not exist
        """
        values = {}
        if username is not None:
            values["username"] = username
        if email is not None:
            values["email"] = email

        async with self.get_session() as session:
            if values:
                try:
                    result = await session.execute(
                        update(UserModel)
                        .where(UserModel.id == user_id)
                        .values(**values)
                        .execution_options(synchronize_session=False)
                    )
                except IntegrityError:
                    await session.rollback()
                    raise ConflictError("Username or email already taken")
                if result.rowcount == 0:
                    return None
                await session.execute(
                    update(ProfileModel)
                    .where(ProfileModel.user_id == user_id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )

            result = await session.execute(
                select(ProfileModel).where(ProfileModel.user_id == user_id)
            )
            record = result.scalar_one_or_none()
            await session.commit()
            return self._convert_db_profile_to_core_entity(record) if record else None

    async def get_profile(self, user_id: int) -> Optional[Profile]:
        """Get the profile of a user."""
        async with self.get_session() as session:
            result = await session.execute(
                select(ProfileModel).where(ProfileModel.user_id == user_id)
            )
            record = result.scalar_one_or_none()
            return self._convert_db_profile_to_core_entity(record) if record else None

    async def get_profile_by_username(self, username: str) -> Optional[Profile]:
        """Get a profile by username."""
        async with self.get_session() as session:
            result = await session.execute(
                select(ProfileModel).where(ProfileModel.username == username)
            )
            record = result.scalar_one_or_none()
            return self._convert_db_profile_to_core_entity(record) if record else None

    async def get_all_profiles(self) -> List[Profile]:
        """Get all profiles, newest first."""
        async with self.get_session() as session:
            result = await session.execute(
                select(ProfileModel).order_by(
                    ProfileModel.created_at.desc(), ProfileModel.id.desc()
                )
            )
            return [self._convert_db_profile_to_core_entity(p) for p in result.scalars().all()]

    async def set_admin_flag(self, user_id: int, is_admin: bool) -> bool:
        """Set the admin flag on a profile. Returns whether a profile matched."""
        async with self.get_session() as session:
            result = await session.execute(
                update(ProfileModel)
                .where(ProfileModel.user_id == user_id)
                .values(is_admin=is_admin)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0

    # Wallet repository methods
    async def get_wallet(self, user_id: int) -> Optional[Wallet]:
        """Get the wallet of a user."""
        async with self.get_session() as session:
            record = await self._load_wallet(session, user_id)
            return self._convert_db_wallet_to_core_entity(record) if record else None

    async def _load_wallet(self, session: AsyncSession, user_id: int) -> Optional[WalletModel]:
        result = await session.execute(
            select(WalletModel)
            .where(WalletModel.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _record_balance_change(
        self,
        session: AsyncSession,
        user_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        status: TransactionStatus,
        payment_id: Optional[str],
        payment_method: Optional[str],
        description: Optional[str],
    ) -> Tuple[Wallet, Transaction]:
        """Refresh the profile snapshot and append the ledger entry, then commit."""
        wallet = await self._load_wallet(session, user_id)

        await session.execute(
            update(ProfileModel)
            .where(ProfileModel.user_id == user_id)
            .values(wallet_balance=wallet.balance)
            .execution_options(synchronize_session=False)
        )

        transaction = TransactionModel(
            user_id=user_id,
            type=transaction_type.value,
            amount=amount,
            status=status.value,
            payment_id=payment_id,
            payment_method=payment_method,
            description=description,
        )
        session.add(transaction)
        await session.commit()
        await session.refresh(transaction)

        return (
            self._convert_db_wallet_to_core_entity(wallet),
            self._convert_db_transaction_to_core_entity(transaction),
        )

    async def credit_wallet(
        self,
        user_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        *,
        to_bonus: bool = False,
        payment_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Tuple[Wallet, Transaction]:
        """Add funds to a wallet and append the matching ledger entry.

        The balance is incremented server-side in the same transaction as
        the ledger insert.

        Args:
            user_id: Wallet owner
            amount: Positive amount, already quantized to cents
            transaction_type: Ledger entry type
            status: Ledger entry status
            to_bonus: Credit ``bonus_balance`` instead of ``balance``

        Raises:
            NotFoundError: If the user has no wallet
        """
        column = WalletModel.bonus_balance if to_bonus else WalletModel.balance

        async with self.get_session() as session:
            result = await session.execute(
                update(WalletModel)
                .where(WalletModel.user_id == user_id)
                .values({column.key: func.round(column + amount, 2), "updated_at": func.now()})
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError("Wallet not found")

            return await self._record_balance_change(
                session,
                user_id,
                amount,
                transaction_type,
                status,
                payment_id,
                payment_method,
                description,
            )

    async def debit_wallet(
        self,
        user_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        status: TransactionStatus = TransactionStatus.PENDING,
        *,
        payment_id: Optional[str] = None,
        payment_method: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Tuple[Wallet, Transaction]:
        """Remove funds from a wallet and append the matching ledger entry.

        The decrement is guarded by ``balance >= amount`` in the UPDATE
        itself, so concurrent debits can never overdraw the wallet.

        Raises:
            NotFoundError: If the user has no wallet
            InsufficientFundsError: If the balance does not cover the amount
        """
        async with self.get_session() as session:
            result = await session.execute(
                update(WalletModel)
                .where(WalletModel.user_id == user_id, WalletModel.balance >= amount)
                .values(balance=func.round(WalletModel.balance - amount, 2), updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                wallet = await self._load_wallet(session, user_id)
                if wallet is None:
                    raise NotFoundError("Wallet not found")
                raise InsufficientFundsError(
                    user_id, format_amount(amount), format_amount(wallet.balance)
                )

            return await self._record_balance_change(
                session,
                user_id,
                amount,
                transaction_type,
                status,
                payment_id,
                payment_method,
                description,
            )

    # Transaction ledger repository methods
    async def get_user_transactions(self, user_id: int) -> List[Transaction]:
        """Get ledger entries of a user, newest first."""
        async with self.get_session() as session:
            result = await session.execute(
                select(TransactionModel)
                .where(TransactionModel.user_id == user_id)
                .order_by(TransactionModel.created_at.desc(), TransactionModel.id.desc())
            )
            return [self._convert_db_transaction_to_core_entity(t) for t in result.scalars().all()]

    async def get_all_transactions(self) -> List[Transaction]:
        """Get the whole ledger, newest first."""
        async with self.get_session() as session:
            result = await session.execute(
                select(TransactionModel).order_by(
                    TransactionModel.created_at.desc(), TransactionModel.id.desc()
                )
            )
            return [self._convert_db_transaction_to_core_entity(t) for t in result.scalars().all()]

    # Tournament repository methods
    async def get_tournaments(self) -> List[Tournament]:
        """Get all tournaments, newest first."""
        async with self.get_session() as session:
            result = await session.execute(
                select(TournamentModel).order_by(
                    TournamentModel.created_at.desc(), TournamentModel.id.desc()
                )
            )
            return [self._convert_db_tournament_to_core_entity(t) for t in result.scalars().all()]

    async def get_tournament(self, tournament_id: int) -> Optional[Tournament]:
        """Get a tournament by ID."""
        async with self.get_session() as session:
            result = await session.execute(
                select(TournamentModel)
                .where(TournamentModel.id == tournament_id)
                .execution_options(populate_existing=True)
            )
            record = result.scalar_one_or_none()
            return self._convert_db_tournament_to_core_entity(record) if record else None

    async def create_tournament(
        self,
        title: str,
        game: str,
        entry_fee: Decimal,
        prize_pool: Decimal,
        max_players: int,
        description: Optional[str] = None,
        banner_url: Optional[str] = None,
    ) -> Tournament:
        """Create a new tournament with no participants."""
        async with self.get_session() as session:
            tournament = TournamentModel(
                title=title,
                game=game,
                entry_fee=entry_fee,
                prize_pool=prize_pool,
                max_players=max_players,
                current_players=0,
                description=description,
                banner_url=banner_url,
            )
            session.add(tournament)
            await session.commit()
            await session.refresh(tournament)
            return self._convert_db_tournament_to_core_entity(tournament)

    async def update_tournament(
        self, tournament_id: int, updates: Dict[str, Any]
    ) -> Optional[Tournament]:
        """Apply a partial update to a tournament.

        ``current_players`` is not updatable here; it only moves on join.

        Raises:
            ValueError: If ``updates`` names a field that cannot be updated
            ConflictError: If ``max_players`` would drop below the current count
        """
        unknown = set(updates) - TOURNAMENT_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update tournament fields: {sorted(unknown)}")

        async with self.get_session() as session:
            try:
                result = await session.execute(
                    update(TournamentModel)
                    .where(TournamentModel.id == tournament_id)
                    .values(**updates, updated_at=func.now())
                    .execution_options(synchronize_session=False)
                )
            except IntegrityError:
                await session.rollback()
                raise ConflictError("max_players cannot be lower than current players")
            if result.rowcount == 0:
                return None

            result = await session.execute(
                select(TournamentModel)
                .where(TournamentModel.id == tournament_id)
                .execution_options(populate_existing=True)
            )
            record = result.scalar_one()
            await session.commit()
            return self._convert_db_tournament_to_core_entity(record)

    async def delete_tournament(self, tournament_id: int) -> bool:
        """Delete a tournament and, by cascade, its participant rows."""
        async with self.get_session() as session:
            result = await session.execute(
                delete(TournamentModel).where(TournamentModel.id == tournament_id)
            )
            await session.commit()
            return result.rowcount > 0

    async def add_participant(self, tournament_id: int, user_id: int) -> JoinOutcome:
        """Register a user in a tournament.

        The participant insert and the ``current_players`` increment run in
        one transaction. The unique (tournament_id, user_id) constraint
        decides races between duplicate joins; the guarded increment
        decides races for the last slot.
        """
        async with self.get_session() as session:
            existing = await session.execute(
                select(TournamentParticipantModel.id).where(
                    TournamentParticipantModel.tournament_id == tournament_id,
                    TournamentParticipantModel.user_id == user_id,
                )
            )
            if existing.scalar_one_or_none() is not None:
                return JoinOutcome.ALREADY_JOINED

            session.add(
                TournamentParticipantModel(tournament_id=tournament_id, user_id=user_id)
            )
            try:
                await session.flush()
            except IntegrityError as e:
                await session.rollback()
                logger.info(
                    f"Participant insert rejected for tournament {tournament_id}, "
                    f"user {user_id}: {e.orig}"
                )
                return JoinOutcome.ALREADY_JOINED

            result = await session.execute(
                update(TournamentModel)
                .where(
                    TournamentModel.id == tournament_id,
                    TournamentModel.current_players < TournamentModel.max_players,
                )
                .values(
                    current_players=TournamentModel.current_players + 1,
                    updated_at=func.now(),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await session.rollback()
                return JoinOutcome.FULL

            await session.commit()
            return JoinOutcome.JOINED

    async def get_participants(self, tournament_id: int) -> List[TournamentParticipant]:
        """Get participants of a tournament in join order."""
        async with self.get_session() as session:
            result = await session.execute(
                select(TournamentParticipantModel)
                .where(TournamentParticipantModel.tournament_id == tournament_id)
                .order_by(TournamentParticipantModel.joined_at, TournamentParticipantModel.id)
            )
            return [self._convert_db_participant_to_core_entity(p) for p in result.scalars().all()]

    # GameSession repository methods
    async def create_game_session(
        self,
        user_id: int,
        game: str,
        tournament_id: Optional[int] = None,
    ) -> GameSession:
        """Create a new active game session."""
        async with self.get_session() as session:
            game_session = GameSessionModel(
                user_id=user_id,
                game=game,
                tournament_id=tournament_id,
                status=GameSessionStatus.ACTIVE.value,
            )
            session.add(game_session)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise NotFoundError("User or tournament not found")
            await session.refresh(game_session)
            return self._convert_db_game_session_to_core_entity(game_session)

    async def update_game_session(
        self, session_id: int, updates: Dict[str, Any]
    ) -> Optional[GameSession]:
        """Apply a partial update to a game session.

        A status that finishes the session stamps ``ended_at`` with the
        database clock.
        """
        unknown = set(updates) - GAME_SESSION_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update game session fields: {sorted(unknown)}")

        values: Dict[str, Any] = dict(updates)
        status = values.get("status")
        if status is not None:
            status = GameSessionStatus(status)
            values["status"] = status.value
            if status.is_finished:
                values["ended_at"] = func.now()

        async with self.get_session() as session:
            result = await session.execute(
                update(GameSessionModel)
                .where(GameSessionModel.id == session_id)
                .values(**values, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                return None

            result = await session.execute(
                select(GameSessionModel)
                .where(GameSessionModel.id == session_id)
                .execution_options(populate_existing=True)
            )
            record = result.scalar_one()
            await session.commit()
            return self._convert_db_game_session_to_core_entity(record)

    async def get_user_game_sessions(self, user_id: int) -> List[GameSession]:
        """Get game sessions of a user, newest first."""
        async with self.get_session() as session:
            result = await session.execute(
                select(GameSessionModel)
                .where(GameSessionModel.user_id == user_id)
                .order_by(GameSessionModel.created_at.desc(), GameSessionModel.id.desc())
            )
            return [self._convert_db_game_session_to_core_entity(g) for g in result.scalars().all()]
