# foodbank/deps.py
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import OAuth2PasswordBearer

from foodbank.core.security import decode_token
from foodbank.repos.users import UserRegistry
from foodbank.schemas import User
from foodbank.services.location import Geocoder
from foodbank.services.matching import DonationEngine

# auto_error=False: a missing token is the engine's call (AuthError), not a 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)

def get_engine(request: Request) -> DonationEngine:
    return request.app.state.engine

def get_users(request: Request) -> UserRegistry:
    return request.app.state.users

def get_geocoder(request: Request) -> Geocoder:
    return request.app.state.geocoder

def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    users: UserRegistry = Depends(get_users),
) -> Optional[User]:
    if not token:
        return None
    uid = decode_token(token)
    user = users.get(uid) if uid is not None else None
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user
