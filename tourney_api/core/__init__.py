"""Core layer for the Tourney API service.

This module provides the domain entities, enums and error taxonomy shared
by the database adapter, the application services and the HTTP layer.
"""

from .entities import (
    User,
    Profile,
    Wallet,
    Transaction,
    Tournament,
    TournamentParticipant,
    GameSession,
)
from .enums import TransactionType, TransactionStatus, GameSessionStatus, JoinOutcome
from .errors import (
    TourneyAPIError,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ConflictError,
    InsufficientFundsError,
    TournamentFullError,
)

__all__ = [
    "User",
    "Profile",
    "Wallet",
    "Transaction",
    "Tournament",
    "TournamentParticipant",
    "GameSession",
    "TransactionType",
    "TransactionStatus",
    "GameSessionStatus",
    "JoinOutcome",
    "TourneyAPIError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ConflictError",
    "InsufficientFundsError",
    "TournamentFullError",
]
