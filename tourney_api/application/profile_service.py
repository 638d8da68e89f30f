"""Profile lookups and identity updates."""

from typing import Optional

import structlog

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.core.entities import Profile
from tourney_api.core.errors import NotFoundError, ValidationError

logger = structlog.get_logger()


class ProfileService:
    """Reads profiles and keeps user and profile identity fields in step."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def get_profile(self, user_id: int) -> Profile:
        profile = await self.db_manager.get_profile(user_id)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    async def get_profile_by_username(self, username: str) -> Profile:
        profile = await self.db_manager.get_profile_by_username(username)
        if profile is None:
            raise NotFoundError("Profile not found")
        return profile

    async def update_profile(
        self,
        user_id: int,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Profile:
        """Change username and/or email on both the user and the profile.

        Raises:
            ValidationError: If neither field is given
            ConflictError: If the new username or email is taken
            NotFoundError: If the user does not exist
        """
        if username is None and email is None:
            raise ValidationError("Nothing to update")

        profile = await self.db_manager.update_account(user_id, username=username, email=email)
        if profile is None:
            raise NotFoundError("User not found")

        logger.info("Profile updated", user_id=user_id, username=profile.username)
        return profile
