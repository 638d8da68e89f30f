"""Account signup and login."""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from passlib.hash import pbkdf2_sha256

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.core.entities import User
from tourney_api.core.errors import ConflictError, NotFoundError, UnauthorizedError
from tourney_api.core.money import ZERO

logger = structlog.get_logger()


@dataclass
class AccountSummary:
    """What a client learns about the account after logging in."""

    id: int
    username: str
    email: str
    wallet_balance: Decimal
    is_admin: bool
    is_owner: bool


class AuthService:
    """Creates accounts and checks credentials."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    @staticmethod
    def hash_password(password: str) -> str:
        return pbkdf2_sha256.hash(password)

    @staticmethod
    def verify_password(password: str, password_hash: str) -> bool:
        try:
            return pbkdf2_sha256.verify(password, password_hash)
        except ValueError:
            # Stored value is not a pbkdf2_sha256 hash
            return False

    async def signup(self, username: str, email: str, password: str) -> User:
        """Create a user with its profile and an empty wallet.

        Raises:
            ConflictError: If the email or the username is already taken
        """
        if await self.db_manager.get_user_by_email(email) is not None:
            raise ConflictError("User already exists")
        if await self.db_manager.get_user_by_username(username) is not None:
            raise ConflictError("Username already taken")

        user, _profile, _wallet = await self.db_manager.create_account(
            username=username,
            email=email,
            password_hash=self.hash_password(password),
        )
        logger.info("User signed up", user_id=user.id, username=username)
        return user

    async def login(self, email: str, password: str) -> AccountSummary:
        """Check credentials and summarize the account.

        Raises:
            UnauthorizedError: If the email is unknown or the password is wrong
            NotFoundError: If the user has no profile
        """
        user = await self.db_manager.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            logger.info("Login rejected", email=email)
            raise UnauthorizedError("Invalid credentials")

        profile = await self.db_manager.get_profile(user.id)
        if profile is None:
            raise NotFoundError("Profile not found")

        wallet = await self.db_manager.get_wallet(user.id)

        logger.info("User logged in", user_id=user.id)
        return AccountSummary(
            id=user.id,
            username=user.username,
            email=user.email,
            wallet_balance=wallet.balance if wallet else ZERO,
            is_admin=profile.is_admin,
            is_owner=profile.is_owner,
        )
