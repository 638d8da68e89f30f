"""Tournament service: CRUD and registration with capacity checks."""

from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.adapters.observability import MetricsProvider, get_metrics_provider
from tourney_api.core.entities import Tournament, TournamentParticipant
from tourney_api.core.enums import JoinOutcome
from tourney_api.core.errors import NotFoundError, TournamentFullError, ValidationError
from tourney_api.core.money import AmountLike, ZERO, to_decimal

logger = structlog.get_logger()


def _non_negative_amount(value: AmountLike, field_name: str) -> Decimal:
    amount = to_decimal(value)
    if amount < ZERO:
        raise ValidationError(f"{field_name} cannot be negative")
    return amount


def _required_text(value: Optional[str], field_name: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def _max_players(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("max_players must be at least 1")
    return value


class TournamentService:
    """Service for tournament management and registration."""

    def __init__(self, db_manager: DatabaseManager, metrics: Optional[MetricsProvider] = None):
        self.db_manager = db_manager
        self.metrics = metrics or get_metrics_provider()

    async def list_tournaments(self) -> List[Tournament]:
        """List all tournaments, newest first."""
        return await self.db_manager.get_tournaments()

    async def get_tournament(self, tournament_id: int) -> Tournament:
        """Get a tournament.

        Raises:
            NotFoundError: If the tournament does not exist
        """
        tournament = await self.db_manager.get_tournament(tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament not found")
        return tournament

    async def create_tournament(
        self,
        title: str,
        game: str,
        entry_fee: AmountLike,
        prize_pool: AmountLike,
        max_players: int,
        description: Optional[str] = None,
        banner_url: Optional[str] = None,
    ) -> Tournament:
        """Create a tournament with no participants."""
        tournament = await self.db_manager.create_tournament(
            title=_required_text(title, "title"),
            game=_required_text(game, "game"),
            entry_fee=_non_negative_amount(entry_fee, "entry_fee"),
            prize_pool=_non_negative_amount(prize_pool, "prize_pool"),
            max_players=_max_players(max_players),
            description=description,
            banner_url=banner_url,
        )
        logger.info(
            "Tournament created",
            tournament_id=tournament.id,
            title=tournament.title,
            max_players=tournament.max_players,
        )
        return tournament

    async def update_tournament(self, tournament_id: int, **updates: Any) -> Tournament:
        """Apply a partial update.

        Only the fields that are passed are validated and written.

        Raises:
            NotFoundError: If the tournament does not exist
            ValidationError: If a field value is invalid
            ConflictError: If max_players would drop below current_players
        """
        values: Dict[str, Any] = {}
        for key, value in updates.items():
            if key in ("title", "game"):
                values[key] = _required_text(value, key)
            elif key in ("entry_fee", "prize_pool"):
                values[key] = _non_negative_amount(value, key)
            elif key == "max_players":
                values[key] = _max_players(value)
            elif key in ("description", "banner_url"):
                values[key] = value
            else:
                raise ValidationError(f"Field '{key}' cannot be updated")

        if not values:
            return await self.get_tournament(tournament_id)

        tournament = await self.db_manager.update_tournament(tournament_id, values)
        if tournament is None:
            raise NotFoundError("Tournament not found")

        logger.info("Tournament updated", tournament_id=tournament_id, fields=sorted(values))
        return tournament

    async def delete_tournament(self, tournament_id: int) -> None:
        """Delete a tournament.

        Raises:
            NotFoundError: If nothing was deleted
        """
        if not await self.db_manager.delete_tournament(tournament_id):
            raise NotFoundError("Tournament not found")
        logger.info("Tournament deleted", tournament_id=tournament_id)

    async def join(self, tournament_id: int, user_id: int) -> bool:
        """Register a user in a tournament.

        Returns:
            True for a new registration, False if the user was already
            registered (nothing changes in that case)

        Raises:
            NotFoundError: If the tournament or the user does not exist
            TournamentFullError: If no slot is left
        """
        if await self.db_manager.get_tournament(tournament_id) is None:
            raise NotFoundError("Tournament not found")
        if await self.db_manager.get_user(user_id) is None:
            raise NotFoundError("User not found")

        outcome = await self.db_manager.add_participant(tournament_id, user_id)

        if self.metrics:
            self.metrics.record_tournament_join(outcome.value)

        if outcome == JoinOutcome.FULL:
            logger.info("Tournament full", tournament_id=tournament_id, user_id=user_id)
            raise TournamentFullError(tournament_id)

        if outcome == JoinOutcome.ALREADY_JOINED:
            logger.info("User already joined", tournament_id=tournament_id, user_id=user_id)
            return False

        logger.info("User joined tournament", tournament_id=tournament_id, user_id=user_id)
        return True

    async def list_participants(self, tournament_id: int) -> List[TournamentParticipant]:
        """List participants in join order.

        Raises:
            NotFoundError: If the tournament does not exist
        """
        await self.get_tournament(tournament_id)
        return await self.db_manager.get_participants(tournament_id)
