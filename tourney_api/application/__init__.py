"""Application services for the Tourney API."""

from .auth_service import AuthService, AccountSummary
from .profile_service import ProfileService
from .wallet_service import WalletService
from .tournament_service import TournamentService
from .admin_service import AdminService
from .game_session_service import GameSessionService

__all__ = [
    "AuthService",
    "AccountSummary",
    "ProfileService",
    "WalletService",
    "TournamentService",
    "AdminService",
    "GameSessionService",
]
