import hmac
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from storefront.config import settings

MIN_API_KEY_LENGTH = 32

def create_access_token(user_id: int) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return jwt.encode({"sub": str(user_id), "exp": expire}, settings.SECRET_KEY, settings.ALGORITHM)

def decode_token(token: str) -> Optional[int]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return int(payload["sub"])
    except (JWTError, KeyError, ValueError):
        return None

def api_key_configured(key: Optional[str]) -> bool:
    return bool(key) and len(key) >= MIN_API_KEY_LENGTH

def api_key_matches(provided: str, expected: str) -> bool:
    """Constant-time comparison."""
    return hmac.compare_digest(provided.encode(), expected.encode())
