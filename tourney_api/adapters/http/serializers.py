"""JSON representations of core entities.

Money goes out as two-decimal strings and timestamps as ISO 8601.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from tourney_api.application.auth_service import AccountSummary
from tourney_api.core.entities import (
    User,
    Profile,
    Wallet,
    Transaction,
    Tournament,
    TournamentParticipant,
    GameSession,
)
from tourney_api.core.money import format_amount


def _timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def user_to_json(user: User) -> Dict[str, Any]:
    return {"id": user.id, "username": user.username, "email": user.email}


def account_summary_to_json(summary: AccountSummary) -> Dict[str, Any]:
    return {
        "id": summary.id,
        "username": summary.username,
        "email": summary.email,
        "wallet_balance": format_amount(summary.wallet_balance),
        "is_admin": summary.is_admin,
        "is_owner": summary.is_owner,
    }


def profile_to_json(profile: Profile) -> Dict[str, Any]:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "username": profile.username,
        "email": profile.email,
        "wallet_balance": format_amount(profile.wallet_balance),
        "is_admin": profile.is_admin,
        "is_owner": profile.is_owner,
        "created_at": _timestamp(profile.created_at),
    }


def wallet_to_json(wallet: Wallet) -> Dict[str, Any]:
    return {
        "id": wallet.id,
        "user_id": wallet.user_id,
        "balance": format_amount(wallet.balance),
        "bonus_balance": format_amount(wallet.bonus_balance),
        "created_at": _timestamp(wallet.created_at),
        "updated_at": _timestamp(wallet.updated_at),
    }


def transaction_to_json(transaction: Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "user_id": transaction.user_id,
        "type": transaction.type.value,
        "amount": format_amount(transaction.amount),
        "status": transaction.status.value,
        "payment_id": transaction.payment_id,
        "payment_method": transaction.payment_method,
        "description": transaction.description,
        "created_at": _timestamp(transaction.created_at),
    }


def tournament_to_json(tournament: Tournament) -> Dict[str, Any]:
    return {
        "id": tournament.id,
        "title": tournament.title,
        "game": tournament.game,
        "description": tournament.description,
        "banner_url": tournament.banner_url,
        "entry_fee": format_amount(tournament.entry_fee),
        "prize_pool": format_amount(tournament.prize_pool),
        "max_players": tournament.max_players,
        "current_players": tournament.current_players,
        "created_at": _timestamp(tournament.created_at),
        "updated_at": _timestamp(tournament.updated_at),
    }


def participant_to_json(participant: TournamentParticipant) -> Dict[str, Any]:
    return {
        "id": participant.id,
        "tournament_id": participant.tournament_id,
        "user_id": participant.user_id,
        "joined_at": _timestamp(participant.joined_at),
    }


def game_session_to_json(session: GameSession) -> Dict[str, Any]:
    return {
        "id": session.id,
        "user_id": session.user_id,
        "tournament_id": session.tournament_id,
        "game": session.game,
        "status": session.status.value,
        "score": session.score,
        "created_at": _timestamp(session.created_at),
        "updated_at": _timestamp(session.updated_at),
        "ended_at": _timestamp(session.ended_at),
    }
