import logging
import time
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.database import get_db
from storefront.models.user import User, UserRole
from storefront.core.security import decode_token, api_key_configured, api_key_matches
from storefront.core.exceptions import UnauthorizedError, ServerConfigurationError, RateLimitExceededError
from storefront.core.redis import get_redis
from storefront.config import settings

logger = logging.getLogger(__name__)

bearer = HTTPBearer()

RATE_LIMIT_WINDOW_SECONDS = 60

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer),
    db: AsyncSession = Depends(get_db),
) -> User:
    user_id = decode_token(credentials.credentials)
    if not user_id:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token")
    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")
    return user

async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.admin:
        raise HTTPException(status.HTTP_403_FORBIDDEN, "Admin only")
    return user

async def require_discord_bot(request: Request) -> None:
    """Only the Discord bot may call the /discord routes.

    The key comes from ``X-API-Key`` or ``Authorization: Bearer <key>``.
    """
    expected = settings.DISCORD_BOT_API_KEY
    if not api_key_configured(expected):
        logger.error("Discord bot API key is missing or shorter than 32 characters")
        raise ServerConfigurationError("Discord bot authentication is not properly configured")

    provided = request.headers.get("x-api-key") or request.headers.get("authorization")
    if not provided:
        logger.warning("Discord request rejected, missing API key: %s %s", request.method, request.url.path)
        raise UnauthorizedError("API key is required for Discord endpoints")
    if provided.startswith("Bearer "):
        provided = provided[len("Bearer "):]

    if not api_key_matches(provided, expected):
        logger.warning("Discord request rejected, invalid API key %s...: %s %s",
                       provided[:8], request.method, request.url.path)
        raise UnauthorizedError("Invalid API key")

async def discord_rate_limit(request: Request) -> None:
    """Fixed one-minute window per client address, counted in Redis."""
    window = int(time.time()) // RATE_LIMIT_WINDOW_SECONDS
    client = request.client.host if request.client else "unknown"
    key = f"ratelimit:discord:{client}:{window}"

    redis = await get_redis()
    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, RATE_LIMIT_WINDOW_SECONDS)
    if count > settings.DISCORD_RATE_LIMIT_PER_MINUTE:
        retry_after = RATE_LIMIT_WINDOW_SECONDS - int(time.time()) % RATE_LIMIT_WINDOW_SECONDS
        logger.warning("Discord rate limit exceeded for %s (%d requests)", client, count)
        raise RateLimitExceededError(retry_after)
