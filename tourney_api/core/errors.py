"""Error taxonomy for the Tourney API service.

Each error carries the message that is safe to return to API clients.
"""


class TourneyAPIError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TourneyAPIError):
    """Malformed or missing input."""

    pass


class NotFoundError(TourneyAPIError):
    """Requested entity does not exist."""

    pass


class UnauthorizedError(TourneyAPIError):
    """Credentials were rejected."""

    pass


class ConflictError(TourneyAPIError):
    """Operation conflicts with existing state."""

    pass


class InsufficientFundsError(ConflictError):
    """Wallet balance is lower than the requested debit."""

    def __init__(self, user_id: int, requested: str, available: str):
        super().__init__("Insufficient balance")
        self.user_id = user_id
        self.requested = requested
        self.available = available


class TournamentFullError(ConflictError):
    """Tournament has no free slots left."""

    def __init__(self, tournament_id: int):
        super().__init__("Tournament is full")
        self.tournament_id = tournament_id
