import logging
from typing import Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.models import User, UserRole, DiscordRole

logger = logging.getLogger(__name__)


async def get_user_by_discord_id(db: AsyncSession, discord_id: str) -> Optional[User]:
    return await db.scalar(select(User).where(User.discord_id == discord_id))


async def get_or_create_discord_user(
    db: AsyncSession,
    discord_id: str,
    username: str,
    display_name: Optional[str] = None,
) -> User:
    """Resolve a Discord account to an internal user, creating it on first sight.

    Changes are flushed, not committed; the caller owns the transaction.
    """
    user = await get_user_by_discord_id(db, discord_id)
    if user is None:
        user = User(
            discord_id=discord_id,
            discord_username=username,
            discord_display_name=display_name,
            fullname=display_name or username,
            username=username,
            email=f"{discord_id}@discord.placeholder",
            role=UserRole.user,
            discord_role=DiscordRole.customer,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # another request created the same Discord user first
            await db.rollback()
            user = await get_user_by_discord_id(db, discord_id)
            if user is None:
                raise
        else:
            logger.info("Created user %s for Discord id %s", user.id, discord_id)
        return user

    if display_name and user.discord_display_name != display_name:
        user.discord_username = username
        user.discord_display_name = display_name
        user.fullname = display_name
        await db.flush()
        logger.info("Updated Discord display name for user %s: %s", user.id, display_name)
    return user
