from fastapi import HTTPException, status


class ForumError(Exception):
    """Base class for every failure the forum core reports to its callers."""


class NotFoundError(ForumError):
    pass


class PostNotFoundError(NotFoundError):
    def __init__(self, post_id: str):
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class DuplicateError(ForumError):
    pass


class AuthError(ForumError):
    pass


class ForbiddenError(ForumError):
    pass


class ValidationError(ForumError):
    pass


class CorruptStoreError(ForumError):
    """Persisted data under a key could not be decoded into forum records."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Stored data for '{key}' is corrupt: {reason}")
        self.key = key


class ExternalServiceError(ForumError):
    """The language model service failed. Never escapes the AI adapter."""


class Exceptions:
    UNAUTHORIZED = HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid credentials")
    FORBIDDEN = HTTPException(status.HTTP_403_FORBIDDEN, "Insufficient permissions")
    NOT_FOUND = HTTPException(status.HTTP_404_NOT_FOUND, "Resource not found")
    ADMIN_REQUIRED = HTTPException(status.HTTP_403_FORBIDDEN, "Admin privileges required")
