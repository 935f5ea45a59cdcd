import logging
from typing import TYPE_CHECKING, Optional

from config import CURRENT_USER_KEY
from exceptions import CorruptStoreError
from storage import Persistence
from users import User

if TYPE_CHECKING:
    from posts import Post

logger = logging.getLogger(__name__)


def can_modify(user: Optional[User], post: "Post") -> bool:
    """Admins may modify anything, everyone else only their own posts."""
    if user is None:
        return False
    return user.is_admin or user.username == post.author


class Session:
    """Holds the signed-in user for a single-device client.

    The record is persisted under the current-user key without the
    credential hash and has no expiry. Callers own the instance and pass it
    where it is needed.
    """

    def __init__(self, persistence: Persistence) -> None:
        self.persistence = persistence

    def current_user(self) -> Optional[User]:
        record = self.persistence.load(CURRENT_USER_KEY, None)
        if record is None:
            return None
        try:
            return User.from_dict(record)
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptStoreError(CURRENT_USER_KEY, f"bad session record ({e})") from e

    def set_current_user(self, user: Optional[User]) -> None:
        if user is None:
            self.persistence.remove(CURRENT_USER_KEY)
            return
        self.persistence.save(CURRENT_USER_KEY, user.public_dict())
        logger.info("Session started for %s", user.username)

    def logout(self) -> None:
        self.set_current_user(None)
