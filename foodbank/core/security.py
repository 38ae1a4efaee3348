# foodbank/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt, JWTError

from foodbank.core.config import settings
from foodbank.schemas import User

def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_ttl_min))
    payload: Dict[str, Any] = {"sub": str(user.id), "role": user.role, "name": user.name, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)

def decode_token(token: str) -> Optional[int]:
    """User id carried by the token, or None if it is invalid/expired."""
    try:
        data = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
        return int(data.get("sub"))
    except (JWTError, TypeError, ValueError):
        return None
