# foodbank/api/auth.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from foodbank.core.security import create_access_token
from foodbank.deps import get_current_user, get_users
from foodbank.repos.users import UserRegistry
from foodbank.schemas import LoginIn, RegisterIn, TokenOut, User

router = APIRouter(prefix="/api/auth", tags=["auth"])

def _token(user: User) -> TokenOut:
    return TokenOut(access_token=create_access_token(user), user=user)

@router.post("/register", response_model=TokenOut)
def register(body: RegisterIn, users: UserRegistry = Depends(get_users)):
    user = users.register(body.name, body.email, body.password, body.role)
    return _token(user)

# ---------- Login (JSON) ----------
@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, users: UserRegistry = Depends(get_users)):
    return _token(users.authenticate(body.email, body.password))

# ---------- Login (Form) — OAuth2 password flow, used by Swagger's Authorize ----------
@router.post("/token", response_model=TokenOut)
def login_form(form: OAuth2PasswordRequestForm = Depends(), users: UserRegistry = Depends(get_users)):
    return _token(users.authenticate(form.username, form.password))

@router.get("/me", response_model=User)
def me(user: Optional[User] = Depends(get_current_user)):
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
