from pydantic import BaseModel, field_validator
from typing import Optional, Dict, Any, List
from config import (USERNAME_MIN_LENGTH, USERNAME_MAX_LENGTH, PASSWORD_MIN_LENGTH, CATEGORIES,
                    POST_TITLE_MIN_LENGTH, POST_TITLE_MAX_LENGTH, POST_CONTENT_MIN_LENGTH,
                    POST_CONTENT_MAX_LENGTH, COMMENT_CONTENT_MAX_LENGTH)


def _check_title(v: str) -> str:
    v = v.strip()
    if len(v) < POST_TITLE_MIN_LENGTH or len(v) > POST_TITLE_MAX_LENGTH:
        raise ValueError(f'Title must be {POST_TITLE_MIN_LENGTH}-{POST_TITLE_MAX_LENGTH} characters')
    return v


def _check_content(v: str) -> str:
    if not v.strip():
        raise ValueError('Content must not be blank')
    if len(v) < POST_CONTENT_MIN_LENGTH or len(v) > POST_CONTENT_MAX_LENGTH:
        raise ValueError(f'Content must be {POST_CONTENT_MIN_LENGTH}-{POST_CONTENT_MAX_LENGTH} characters')
    return v


def _check_category(v: str) -> str:
    if v not in CATEGORIES:
        raise ValueError(f'Category must be one of: {", ".join(CATEGORIES)}')
    return v


class UserRegister(BaseModel):
    username: str
    password: str

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        v = v.strip()
        if len(v) < USERNAME_MIN_LENGTH or len(v) > USERNAME_MAX_LENGTH:
            raise ValueError(f'Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters')
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < PASSWORD_MIN_LENGTH:
            raise ValueError(f'Password must be at least {PASSWORD_MIN_LENGTH} characters')
        return v


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    user_id: str
    username: str
    role: str
    avatar_color: str
    created_at: float


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse


class PostCreate(BaseModel):
    title: str
    content: str
    category: str

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return _check_title(v)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return _check_content(v)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return _check_category(v)


class PostEdit(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return v if v is None else _check_title(v)

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        return v if v is None else _check_content(v)

    @field_validator('category')
    @classmethod
    def validate_category(cls, v):
        return v if v is None else _check_category(v)


class CommentCreate(BaseModel):
    content: str

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if not v.strip():
            raise ValueError('Comment must not be blank')
        if len(v) > COMMENT_CONTENT_MAX_LENGTH:
            raise ValueError(f'Comment must be at most {COMMENT_CONTENT_MAX_LENGTH} characters')
        return v


class AIReplyRequest(BaseModel):
    publish: bool = False


class CommentResponse(BaseModel):
    comment_id: str
    post_id: str
    author: str
    content: str
    created_at: float
    ai_generated: bool


class PostListItem(BaseModel):
    post_id: str
    title: str
    author: str
    category: str
    created_at: float
    last_activity_at: float
    views: int
    comment_count: int


class PostResponse(BaseModel):
    post_id: str
    title: str
    content: str
    author: str
    category: str
    created_at: float
    last_activity_at: float
    views: int
    comments: List[CommentResponse]


class SearchResultResponse(BaseModel):
    type: str
    id: str
    title: str
    snippet: str
    weight: int
    author: Optional[str] = None
    category: Optional[str] = None


class AIResponse(BaseModel):
    status: str
    text: str
    reason: Optional[str] = None
    comment: Optional[CommentResponse] = None


class UserProfileResponse(BaseModel):
    user: UserResponse
    posts: List[PostListItem]
    post_count: int
    total_views: int


class CategoryCount(BaseModel):
    name: str
    count: int


class ForumStats(BaseModel):
    total_posts: int
    total_users: int
    total_comments: int
    today_posts: int
    popular_categories: List[CategoryCount]


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: Optional[Dict[str, Any]] = None
