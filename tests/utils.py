"""Test utility functions."""

from decimal import Decimal
from typing import List

from sqlalchemy import select, func

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.adapters.database.models import (
    Profile,
    Transaction,
    TournamentParticipant,
)


async def count_transactions(db: DatabaseManager, user_id: int) -> int:
    """Count ledger entries of a user."""
    async with db.get_session() as session:
        result = await session.execute(
            select(func.count(Transaction.id)).where(Transaction.user_id == user_id)
        )
        return result.scalar_one()


async def get_transaction_types(db: DatabaseManager, user_id: int) -> List[str]:
    """Get ledger entry types of a user in insertion order."""
    async with db.get_session() as session:
        result = await session.execute(
            select(Transaction.type)
            .where(Transaction.user_id == user_id)
            .order_by(Transaction.id)
        )
        return list(result.scalars().all())


async def get_profile_wallet_balance(db: DatabaseManager, user_id: int) -> Decimal:
    """Read the wallet balance snapshot stored on the profile row."""
    async with db.get_session() as session:
        result = await session.execute(
            select(Profile.wallet_balance).where(Profile.user_id == user_id)
        )
        return result.scalar_one()


async def count_participant_rows(db: DatabaseManager, tournament_id: int) -> int:
    """Count participant rows of a tournament."""
    async with db.get_session() as session:
        result = await session.execute(
            select(func.count(TournamentParticipant.id)).where(
                TournamentParticipant.tournament_id == tournament_id
            )
        )
        return result.scalar_one()
