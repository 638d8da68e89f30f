"""aiohttp application factory."""

from aiohttp import web

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.application import (
    AuthService,
    ProfileService,
    WalletService,
    TournamentService,
    AdminService,
    GameSessionService,
)
from .handlers import TourneyAPIHandlers
from .middleware import error_middleware, metrics_middleware


def create_handlers(db_manager: DatabaseManager) -> TourneyAPIHandlers:
    """Wire every application service to one database manager."""
    return TourneyAPIHandlers(
        auth=AuthService(db_manager),
        profiles=ProfileService(db_manager),
        wallets=WalletService(db_manager),
        tournaments=TournamentService(db_manager),
        admin=AdminService(db_manager),
        game_sessions=GameSessionService(db_manager),
    )


def create_app(db_manager: DatabaseManager) -> web.Application:
    """Create the web application serving the JSON API."""
    app = web.Application(middlewares=[metrics_middleware, error_middleware])
    create_handlers(db_manager).setup_routes(app)
    return app
