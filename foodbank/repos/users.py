# foodbank/repos/users.py
import logging
from typing import Optional, Dict, get_args

from passlib.hash import pbkdf2_sha256 as hasher

from foodbank.core.errors import AuthError, ValidationError
from foodbank.schemas import Role, User

logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"name": "Alice Donor", "email": "alice@donor", "password": "pass", "role": "donor"},
    {"name": "Bob Recipient", "email": "bob@rec", "password": "pass", "role": "recipient"},
]

class UserRegistry:
    """Demo credential store. Not a security boundary."""

    def __init__(self):
        self.users: Dict[int, dict] = {}
        self.users_by_email: Dict[str, int] = {}

    def register(self, name: str, email: str, password: str, role: str) -> User:
        email = (email or "").strip().lower()
        if not email or not password or not (name or "").strip():
            raise ValidationError("Name, email and password are required")
        if role not in get_args(Role):
            raise ValidationError(f"Unknown role: {role}")
        if email in self.users_by_email:
            raise ValidationError("Email exists")
        uid = max(self.users, default=0) + 1
        user = User(id=uid, name=name.strip(), email=email, role=role)
        self.users[uid] = {"user": user, "password_hash": hasher.hash(password)}
        self.users_by_email[email] = uid
        logger.info("registered user %s (%s)", uid, role)
        return user

    def authenticate(self, email: str, password: str) -> User:
        uid = self.users_by_email.get((email or "").strip().lower())
        doc = self.users.get(uid) if uid else None
        try:
            ok = doc is not None and hasher.verify(password or "", doc["password_hash"])
        except ValueError:
            ok = False
        if not ok:
            raise AuthError("Invalid credentials")
        return doc["user"]

    def get(self, user_id: int) -> Optional[User]:
        doc = self.users.get(user_id)
        return doc["user"] if doc else None

    def seed_demo(self) -> None:
        if self.users:
            return
        for u in DEMO_USERS:
            self.register(**u)
