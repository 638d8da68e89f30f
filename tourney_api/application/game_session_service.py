"""Game session tracking."""

from typing import Any, Dict, List, Optional

import structlog

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.core.entities import GameSession
from tourney_api.core.enums import GameSessionStatus
from tourney_api.core.errors import NotFoundError, ValidationError

logger = structlog.get_logger()


class GameSessionService:
    """Starts, updates and lists per-user game sessions."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def start_session(
        self, user_id: int, game: str, tournament_id: Optional[int] = None
    ) -> GameSession:
        """Start an active session.

        Raises:
            ValidationError: If the game name is empty
            NotFoundError: If the user or tournament does not exist
        """
        if not game or not game.strip():
            raise ValidationError("game is required")
        if await self.db_manager.get_user(user_id) is None:
            raise NotFoundError("User not found")
        if tournament_id is not None and await self.db_manager.get_tournament(tournament_id) is None:
            raise NotFoundError("Tournament not found")

        session = await self.db_manager.create_game_session(
            user_id=user_id, game=game.strip(), tournament_id=tournament_id
        )
        logger.info("Game session started", session_id=session.id, user_id=user_id)
        return session

    async def update_session(
        self,
        session_id: int,
        status: Optional[GameSessionStatus] = None,
        score: Optional[int] = None,
    ) -> GameSession:
        """Partially update a session.

        Moving a session out of ``active`` stamps ``ended_at``.

        Raises:
            ValidationError: If nothing is given to update
            NotFoundError: If the session does not exist
        """
        updates: Dict[str, Any] = {}
        if status is not None:
            updates["status"] = status
        if score is not None:
            updates["score"] = score

        if not updates:
            raise ValidationError("Nothing to update")

        session = await self.db_manager.update_game_session(session_id, updates)
        if session is None:
            raise NotFoundError("Game session not found")

        logger.info(
            "Game session updated",
            session_id=session_id,
            status=session.status.value,
            score=session.score,
        )
        return session

    async def list_user_sessions(self, user_id: int) -> List[GameSession]:
        """List a user's sessions, newest first."""
        return await self.db_manager.get_user_game_sessions(user_id)
