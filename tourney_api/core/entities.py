"""Core entities for the Tourney API service."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .enums import TransactionType, TransactionStatus, GameSessionStatus
from .money import ZERO


@dataclass
class User:
    """Account identity. The password hash never leaves the service layer."""

    username: str
    email: str
    password_hash: str = field(repr=False)
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None


@dataclass
class Profile:
    """Per-user view with role flags and a snapshot of the wallet balance."""

    user_id: int
    username: str
    email: str
    wallet_balance: Decimal = ZERO
    is_admin: bool = False
    is_owner: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None


@dataclass
class Wallet:
    """Per-user balances, the single source of truth for funds."""

    user_id: int
    balance: Decimal = ZERO
    bonus_balance: Decimal = ZERO
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None


@dataclass
class Transaction:
    """Immutable ledger entry."""

    user_id: int
    type: TransactionType
    amount: Decimal
    status: TransactionStatus
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None


@dataclass
class Tournament:
    """A tournament that users can register for."""

    title: str
    game: str
    entry_fee: Decimal
    prize_pool: Decimal
    max_players: int
    current_players: int = 0
    description: Optional[str] = None
    banner_url: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None

    @property
    def is_full(self) -> bool:
        """Check if every slot is taken."""
        return self.current_players >= self.max_players

    @property
    def open_slots(self) -> int:
        return max(self.max_players - self.current_players, 0)


@dataclass
class TournamentParticipant:
    """Registration of a user in a tournament."""

    tournament_id: int
    user_id: int
    joined_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None


@dataclass
class GameSession:
    """A single play session of a user, optionally inside a tournament."""

    user_id: int
    game: str
    status: GameSessionStatus = GameSessionStatus.ACTIVE
    tournament_id: Optional[int] = None
    score: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = None
    id: Optional[int] = None

    def is_active(self) -> bool:
        """Check if the session is still running."""
        return self.status == GameSessionStatus.ACTIVE
