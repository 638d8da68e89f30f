"""Admin operations: role flags, user listing and the global ledger."""

from typing import List

import structlog

from tourney_api.adapters.database.manager import DatabaseManager
from tourney_api.core.entities import Profile, Transaction

logger = structlog.get_logger()


class AdminService:
    """Service behind the admin endpoints."""

    def __init__(self, db_manager: DatabaseManager):
        self.db_manager = db_manager

    async def list_users(self) -> List[Profile]:
        """List every profile, newest first."""
        return await self.db_manager.get_all_profiles()

    async def make_admin(self, user_id: int) -> bool:
        """Grant the admin flag. Returns whether the user has a profile."""
        updated = await self.db_manager.set_admin_flag(user_id, True)
        logger.info("Admin flag set", user_id=user_id, matched=updated)
        return updated

    async def remove_admin(self, user_id: int) -> bool:
        """Clear the admin flag. Returns whether the user has a profile."""
        updated = await self.db_manager.set_admin_flag(user_id, False)
        logger.info("Admin flag cleared", user_id=user_id, matched=updated)
        return updated

    async def list_transactions(self) -> List[Transaction]:
        """The whole ledger, newest first."""
        return await self.db_manager.get_all_transactions()
