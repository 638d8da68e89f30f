"""Core enums for the Tourney API service."""

from enum import Enum


class TransactionType(Enum):
    """Kind of ledger entry."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    WIN = "win"
    LOSS = "loss"
    BONUS = "bonus"


class TransactionStatus(Enum):
    """Settlement status of a ledger entry.

    Withdrawals stay PENDING until an external settlement process pays
    them out; every other entry is COMPLETED when written.
    """

    PENDING = "pending"
    COMPLETED = "completed"


class GameSessionStatus(Enum):
    """Lifecycle status of a game session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"

    @property
    def is_finished(self) -> bool:
        """Check if the session has ended."""
        return self != GameSessionStatus.ACTIVE


class JoinOutcome(Enum):
    """Result of attempting to register a participant."""

    JOINED = "joined"
    ALREADY_JOINED = "already_joined"
    FULL = "full"
