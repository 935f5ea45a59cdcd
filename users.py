import logging
import random
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

from config import (ADMIN_PASSWORD, ADMIN_USERNAME, AVATAR_COLORS, DEFAULT_USER_PASSWORD,
                    DEFAULT_USERNAME, USERS_KEY)
from exceptions import AuthError, CorruptStoreError, DuplicateError, UserNotFoundError, ValidationError
from security import SecurityManager
from storage import Persistence
from utils import new_id, require_text, timestamp

logger = logging.getLogger(__name__)


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(slots=True)
class User:
    user_id: str
    username: str
    password_hash: str = ""
    role: Role = Role.USER
    avatar_color: str = ""
    created_at: float = field(default_factory=timestamp)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["role"] = self.role.value
        return data

    def public_dict(self) -> dict[str, Any]:
        """Record without the credential hash."""
        data = self.to_dict()
        del data["password_hash"]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(
            user_id=data["user_id"],
            username=data["username"],
            password_hash=data.get("password_hash", ""),
            role=Role(data.get("role", Role.USER.value)),
            avatar_color=data.get("avatar_color", ""),
            created_at=data.get("created_at", 0.0),
        )

    def __str__(self) -> str:
        admin_marker = " [ADMIN]" if self.is_admin else ""
        return f"User {self.user_id}: {self.username}{admin_marker}"


class UserManager:
    """Registered accounts, stored as one collection under the users key."""

    def __init__(self, persistence: Persistence, security: SecurityManager) -> None:
        self.persistence = persistence
        self.security = security

    def _seed(self) -> list[dict[str, Any]]:
        now = timestamp()
        return [
            User("u1", ADMIN_USERNAME, self.security.hash_password(ADMIN_PASSWORD), Role.ADMIN,
                 AVATAR_COLORS[0], now).to_dict(),
            User("u2", DEFAULT_USERNAME, self.security.hash_password(DEFAULT_USER_PASSWORD), Role.USER,
                 AVATAR_COLORS[5], now).to_dict(),
        ]

    def load_users(self) -> list[User]:
        records = self.persistence.load(USERS_KEY, None)
        if records is None:
            records = self.persistence.load_or_seed(USERS_KEY, self._seed())
        try:
            return [User.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptStoreError(USERS_KEY, f"bad user record ({e})") from e

    def save_users(self, users: list[User]) -> None:
        self.persistence.save(USERS_KEY, [u.to_dict() for u in users])

    def list_users(self) -> list[User]:
        return self.load_users()

    def get_user(self, user_id: str) -> User:
        for user in self.load_users():
            if user.user_id == user_id:
                return user
        raise UserNotFoundError(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup."""
        for user in self.load_users():
            if user.username == username:
                return user
        return None

    def register(self, username: str, password: str) -> User:
        require_text(username, "Username")
        if not password:
            raise ValidationError("Password cannot be empty")
        users = self.load_users()
        if any(u.username == username for u in users):
            raise DuplicateError(f"Username '{username}' already exists")

        user = User(
            user_id=new_id({u.user_id for u in users}),
            username=username,
            password_hash=self.security.hash_password(password),
            role=Role.USER,
            avatar_color=random.choice(AVATAR_COLORS),
        )
        users.append(user)
        self.save_users(users)
        logger.info("Registered user %s (%s)", user.username, user.user_id)
        return user

    def login(self, username: str, password: str) -> User:
        user = self.get_user_by_username(username)
        if user is None or not self.security.verify_password(password, user.password_hash):
            logger.warning("Rejected login for %s", username)
            raise AuthError("Invalid username or password")
        return user
