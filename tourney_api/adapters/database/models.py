"""SQLAlchemy models for the Tourney API service."""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from sqlalchemy import (
    String,
    DateTime,
    Integer,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Index,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import declarative_base, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# Monetary columns: 10 integer digits, 2 decimal places
Money = Numeric(12, 2, asdecimal=True)


class User(Base):
    """Model for user accounts."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)  # Password hash
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())

    # Relationships
    profile: Mapped["Profile"] = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    wallet: Mapped["Wallet"] = relationship(
        "Wallet", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


class Profile(Base):
    """Model for the per-user profile view."""

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    # Snapshot of wallets.balance, refreshed with every balance mutation
    wallet_balance: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_owner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())

    user: Mapped["User"] = relationship("User", back_populates="profile")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_profiles_user_id"),
        Index("idx_profiles_username", "username"),
        Index("idx_profiles_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Profile(user_id={self.user_id}, username='{self.username}', is_admin={self.is_admin})>"


class Wallet(Base):
    """Model for user wallets."""

    __tablename__ = "wallets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    balance: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    bonus_balance: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=func.now(), onupdate=func.now()
    )

    user: Mapped["User"] = relationship("User", back_populates="wallet")

    __table_args__ = (
        UniqueConstraint("user_id", name="uq_wallets_user_id"),
        CheckConstraint("balance >= 0", name="chk_wallets_balance_nonneg"),
        CheckConstraint("bonus_balance >= 0", name="chk_wallets_bonus_nonneg"),
    )

    def __repr__(self) -> str:
        return f"<Wallet(user_id={self.user_id}, balance={self.balance}, bonus={self.bonus_balance})>"


class Transaction(Base):
    """Model for append-only ledger entries."""

    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # deposit, withdrawal, win, loss, bonus
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)  # pending, completed
    payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())

    __table_args__ = (
        CheckConstraint("amount > 0", name="chk_transactions_amount_positive"),
        Index("idx_transactions_user_created", "user_id", "created_at"),
        Index("idx_transactions_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, user_id={self.user_id}, type='{self.type}', amount={self.amount})>"


class Tournament(Base):
    """Model for tournaments."""

    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    game: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    entry_fee: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    prize_pool: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    max_players: Mapped[int] = mapped_column(Integer, nullable=False)
    current_players: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=func.now(), onupdate=func.now()
    )

    participants: Mapped[List["TournamentParticipant"]] = relationship(
        "TournamentParticipant", back_populates="tournament", cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("max_players >= 1", name="chk_tournaments_max_players"),
        CheckConstraint(
            "current_players >= 0 AND current_players <= max_players",
            name="chk_tournaments_current_players",
        ),
        Index("idx_tournaments_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Tournament(id={self.id}, title='{self.title}', players={self.current_players}/{self.max_players})>"


class TournamentParticipant(Base):
    """Join table marking a user's registration in a tournament."""

    __tablename__ = "tournament_participants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="participants")

    __table_args__ = (
        # At most one registration per user per tournament
        UniqueConstraint("tournament_id", "user_id", name="uq_tournament_participants_pair"),
        Index("idx_tournament_participants_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<TournamentParticipant(tournament_id={self.tournament_id}, user_id={self.user_id})>"


class GameSession(Base):
    """Model for per-user game sessions."""

    __tablename__ = "game_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    tournament_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("tournaments.id", ondelete="SET NULL"), nullable=True
    )
    game: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=func.now(), onupdate=func.now()
    )
    ended_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_game_sessions_user_created", "user_id", "created_at"),
        Index("idx_game_sessions_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<GameSession(id={self.id}, user_id={self.user_id}, status='{self.status}')>"
