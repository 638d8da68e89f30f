"""HTTP handlers translating JSON requests into service calls."""

import json
from typing import Any, Dict, Type, TypeVar

from aiohttp import web
from pydantic import BaseModel

from tourney_api.application import (
    AuthService,
    ProfileService,
    WalletService,
    TournamentService,
    AdminService,
    GameSessionService,
)
from tourney_api.core.errors import NotFoundError, ValidationError
from .middleware import error_response
from .schemas import (
    SignupRequest,
    LoginRequest,
    TournamentCreateRequest,
    TournamentUpdateRequest,
    JoinTournamentRequest,
    DepositRequest,
    WithdrawRequest,
    BonusRequest,
    ProfileUpdateRequest,
    GameSessionCreateRequest,
    GameSessionUpdateRequest,
)
from .serializers import (
    user_to_json,
    account_summary_to_json,
    profile_to_json,
    wallet_to_json,
    transaction_to_json,
    tournament_to_json,
    participant_to_json,
    game_session_to_json,
)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def parse_body(request: web.Request, schema: Type[SchemaT]) -> SchemaT:
    """Decode the JSON body and validate it against a schema."""
    try:
        data = await request.json()
    except json.JSONDecodeError:
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return schema.model_validate(data)


def path_id(request: web.Request, name: str) -> int:
    # Routes constrain ids to digits
    return int(request.match_info[name])


class TourneyAPIHandlers:
    """Route handlers for the Tourney API."""

    def __init__(
        self,
        auth: AuthService,
        profiles: ProfileService,
        wallets: WalletService,
        tournaments: TournamentService,
        admin: AdminService,
        game_sessions: GameSessionService,
    ):
        self.auth = auth
        self.profiles = profiles
        self.wallets = wallets
        self.tournaments = tournaments
        self.admin = admin
        self.game_sessions = game_sessions

    def setup_routes(self, app: web.Application) -> None:
        """Register every API route on the application."""
        app.router.add_get("/health", self.health)

        # Authentication
        app.router.add_post("/api/auth/signup", self.signup)
        app.router.add_post("/api/auth/login", self.login)

        # Profiles
        app.router.add_get(r"/api/profile/{user_id:\d+}", self.get_profile)
        app.router.add_put(r"/api/profile/{user_id:\d+}", self.update_profile)

        # Tournaments
        app.router.add_get("/api/tournaments", self.list_tournaments)
        app.router.add_post("/api/tournaments", self.create_tournament)
        app.router.add_get(r"/api/tournaments/{id:\d+}", self.get_tournament)
        app.router.add_put(r"/api/tournaments/{id:\d+}", self.update_tournament)
        app.router.add_delete(r"/api/tournaments/{id:\d+}", self.delete_tournament)
        app.router.add_post(r"/api/tournaments/{id:\d+}/join", self.join_tournament)
        app.router.add_get(r"/api/tournaments/{id:\d+}/participants", self.list_participants)

        # Wallet
        app.router.add_get(r"/api/wallet/{user_id:\d+}", self.get_wallet)
        app.router.add_post(r"/api/wallet/{user_id:\d+}/add", self.add_money)
        app.router.add_post(r"/api/wallet/{user_id:\d+}/withdraw", self.withdraw_money)

        # Transactions
        app.router.add_get(r"/api/transactions/{user_id:\d+}", self.get_user_transactions)

        # Game sessions
        app.router.add_post("/api/game-sessions", self.create_game_session)
        app.router.add_patch(r"/api/game-sessions/{id:\d+}", self.update_game_session)
        app.router.add_get(r"/api/game-sessions/user/{user_id:\d+}", self.list_game_sessions)

        # Admin
        app.router.add_get("/api/admin/users", self.admin_list_users)
        app.router.add_post(r"/api/admin/users/{id:\d+}/make-admin", self.admin_make_admin)
        app.router.add_post(r"/api/admin/users/{id:\d+}/remove-admin", self.admin_remove_admin)
        app.router.add_post(r"/api/admin/users/{id:\d+}/bonus", self.admin_grant_bonus)
        app.router.add_get("/api/admin/transactions", self.admin_list_transactions)

    async def health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    # Authentication

    async def signup(self, request: web.Request) -> web.Response:
        body = await parse_body(request, SignupRequest)
        user = await self.auth.signup(body.username, body.email, body.password)
        return web.json_response(
            {"message": "User created successfully", "user": user_to_json(user)},
            status=201,
        )

    async def login(self, request: web.Request) -> web.Response:
        body = await parse_body(request, LoginRequest)
        summary = await self.auth.login(body.email, body.password)
        return web.json_response({"user": account_summary_to_json(summary)})

    # Profiles

    async def get_profile(self, request: web.Request) -> web.Response:
        profile = await self.profiles.get_profile(path_id(request, "user_id"))
        return web.json_response(profile_to_json(profile))

    async def update_profile(self, request: web.Request) -> web.Response:
        body = await parse_body(request, ProfileUpdateRequest)
        profile = await self.profiles.update_profile(
            path_id(request, "user_id"), username=body.username, email=body.email
        )
        return web.json_response(profile_to_json(profile))

    # Tournaments

    async def list_tournaments(self, request: web.Request) -> web.Response:
        tournaments = await self.tournaments.list_tournaments()
        return web.json_response([tournament_to_json(t) for t in tournaments])

    async def get_tournament(self, request: web.Request) -> web.Response:
        tournament = await self.tournaments.get_tournament(path_id(request, "id"))
        return web.json_response(tournament_to_json(tournament))

    async def create_tournament(self, request: web.Request) -> web.Response:
        body = await parse_body(request, TournamentCreateRequest)
        tournament = await self.tournaments.create_tournament(**body.model_dump())
        return web.json_response(tournament_to_json(tournament), status=201)

    async def update_tournament(self, request: web.Request) -> web.Response:
        body = await parse_body(request, TournamentUpdateRequest)
        updates: Dict[str, Any] = body.model_dump(exclude_unset=True)
        tournament = await self.tournaments.update_tournament(path_id(request, "id"), **updates)
        return web.json_response(tournament_to_json(tournament))

    async def delete_tournament(self, request: web.Request) -> web.Response:
        await self.tournaments.delete_tournament(path_id(request, "id"))
        return web.json_response({"message": "Tournament deleted successfully"})

    async def join_tournament(self, request: web.Request) -> web.Response:
        body = await parse_body(request, JoinTournamentRequest)
        joined = await self.tournaments.join(path_id(request, "id"), body.user_id)
        if not joined:
            return error_response("Failed to join tournament", 400)
        return web.json_response({"message": "Successfully joined tournament"})

    async def list_participants(self, request: web.Request) -> web.Response:
        participants = await self.tournaments.list_participants(path_id(request, "id"))
        return web.json_response([participant_to_json(p) for p in participants])

    # Wallet

    async def get_wallet(self, request: web.Request) -> web.Response:
        wallet = await self.wallets.get_wallet(path_id(request, "user_id"))
        return web.json_response(wallet_to_json(wallet))

    async def add_money(self, request: web.Request) -> web.Response:
        body = await parse_body(request, DepositRequest)
        wallet = await self.wallets.deposit(
            path_id(request, "user_id"),
            body.amount,
            payment_id=body.payment_id,
            payment_method=body.payment_method,
        )
        return web.json_response(wallet_to_json(wallet))

    async def withdraw_money(self, request: web.Request) -> web.Response:
        body = await parse_body(request, WithdrawRequest)
        wallet = await self.wallets.withdraw(path_id(request, "user_id"), body.amount)
        return web.json_response(wallet_to_json(wallet))

    # Transactions

    async def get_user_transactions(self, request: web.Request) -> web.Response:
        transactions = await self.wallets.get_user_transactions(path_id(request, "user_id"))
        return web.json_response([transaction_to_json(t) for t in transactions])

    # Game sessions

    async def create_game_session(self, request: web.Request) -> web.Response:
        body = await parse_body(request, GameSessionCreateRequest)
        session = await self.game_sessions.start_session(
            body.user_id, body.game, tournament_id=body.tournament_id
        )
        return web.json_response(game_session_to_json(session), status=201)

    async def update_game_session(self, request: web.Request) -> web.Response:
        body = await parse_body(request, GameSessionUpdateRequest)
        session = await self.game_sessions.update_session(
            path_id(request, "id"), status=body.status, score=body.score
        )
        return web.json_response(game_session_to_json(session))

    async def list_game_sessions(self, request: web.Request) -> web.Response:
        sessions = await self.game_sessions.list_user_sessions(path_id(request, "user_id"))
        return web.json_response([game_session_to_json(s) for s in sessions])

    # Admin

    async def admin_list_users(self, request: web.Request) -> web.Response:
        profiles = await self.admin.list_users()
        return web.json_response([profile_to_json(p) for p in profiles])

    async def admin_make_admin(self, request: web.Request) -> web.Response:
        if not await self.admin.make_admin(path_id(request, "id")):
            raise NotFoundError("User not found")
        return web.json_response({"message": "User made admin successfully"})

    async def admin_remove_admin(self, request: web.Request) -> web.Response:
        if not await self.admin.remove_admin(path_id(request, "id")):
            raise NotFoundError("User not found")
        return web.json_response({"message": "Admin privileges removed successfully"})

    async def admin_grant_bonus(self, request: web.Request) -> web.Response:
        body = await parse_body(request, BonusRequest)
        wallet = await self.wallets.grant_bonus(
            path_id(request, "id"), body.amount, description=body.description
        )
        return web.json_response(wallet_to_json(wallet))

    async def admin_list_transactions(self, request: web.Request) -> web.Response:
        transactions = await self.admin.list_transactions()
        return web.json_response([transaction_to_json(t) for t in transactions])
