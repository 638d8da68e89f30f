"""Request body schemas for the HTTP API."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tourney_api.core.enums import GameSessionStatus

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class SignupRequest(RequestModel):
    username: str = Field(min_length=3, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6)


class LoginRequest(RequestModel):
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)


class TournamentCreateRequest(RequestModel):
    title: str = Field(min_length=1, max_length=200)
    game: str = Field(min_length=1, max_length=100)
    entry_fee: Decimal = Field(ge=0)
    prize_pool: Decimal = Field(ge=0)
    max_players: int = Field(ge=1)
    description: Optional[str] = None
    banner_url: Optional[str] = None


class TournamentUpdateRequest(RequestModel):
    """Partial update; only fields present in the body are applied."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    game: Optional[str] = Field(default=None, min_length=1, max_length=100)
    entry_fee: Optional[Decimal] = Field(default=None, ge=0)
    prize_pool: Optional[Decimal] = Field(default=None, ge=0)
    max_players: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None
    banner_url: Optional[str] = None


class JoinTournamentRequest(RequestModel):
    user_id: int = Field(alias="userId")


class DepositRequest(RequestModel):
    amount: Decimal
    payment_id: Optional[str] = None
    payment_method: Optional[str] = None


class WithdrawRequest(RequestModel):
    amount: Decimal


class BonusRequest(RequestModel):
    amount: Decimal
    description: Optional[str] = None


class ProfileUpdateRequest(RequestModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)


class GameSessionCreateRequest(RequestModel):
    user_id: int = Field(alias="userId")
    game: str = Field(min_length=1, max_length=100)
    tournament_id: Optional[int] = Field(default=None, alias="tournamentId")


class GameSessionUpdateRequest(RequestModel):
    status: Optional[GameSessionStatus] = None
    score: Optional[int] = None
