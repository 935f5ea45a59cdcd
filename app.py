#!/usr/bin/env python3
import logging
from typing import List

from fastapi import FastAPI, HTTPException, Depends, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ai_assist import AIAssist
from config import (ALLOWED_HOSTS, ALLOWED_ORIGINS, CATEGORIES, GZIP_MIN_SIZE, HTTP_INTERNAL_SERVER_ERROR,
                    HTTP_REQUEST_ENTITY_TOO_LARGE, HTTP_UNPROCESSABLE_ENTITY, MAX_REQUEST_SIZE_MB, SECRET_KEY)
from exceptions import (AuthError, CorruptStoreError, DuplicateError, Exceptions, ForbiddenError,
                        ForumError, NotFoundError, UserNotFoundError, ValidationError)
from forum import Forum
from models import (AIReplyRequest, AIResponse, CommentCreate, CommentResponse, ErrorResponse, ForumStats,
                    PostCreate, PostEdit, PostListItem, PostResponse, SearchResultResponse, TokenResponse,
                    UserLogin, UserProfileResponse, UserRegister, UserResponse)
from posts import Comment, Post
from security import SecurityManager
from users import User
from utils import timestamp

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and int(content_length) > MAX_REQUEST_SIZE_MB * 1024 * 1024:
            return JSONResponse(
                status_code=HTTP_REQUEST_ENTITY_TOO_LARGE,
                content={"message": "Request entity too large"}
            )

        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith("/api/"):
            response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return response


app = FastAPI(title="ZhiYun Forum API", description="Discussion forum with AI-assisted replies", version="1.0.0")

security = HTTPBearer()
security_manager = SecurityManager(secret_key=SECRET_KEY)
forum = Forum(security=security_manager)
ai_assist = AIAssist()

app.add_middleware(GZipMiddleware, minimum_size=GZIP_MIN_SIZE)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"]
)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=ALLOWED_HOSTS)


def user_response(user: User) -> UserResponse:
    return UserResponse(**user.public_dict())


def comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        comment_id=comment.comment_id,
        post_id=comment.post_id,
        author=comment.author,
        content=comment.content,
        created_at=comment.created_at,
        ai_generated=comment.ai_generated,
    )


def post_response(post: Post) -> PostResponse:
    data = post.to_dict()
    data["comments"] = [comment_response(c) for c in post.comments]
    return PostResponse(**data)


def post_list_item(post: Post) -> PostListItem:
    return PostListItem(
        post_id=post.post_id,
        title=post.title,
        author=post.author,
        category=post.category,
        created_at=post.created_at,
        last_activity_at=post.last_activity_at,
        views=post.views,
        comment_count=len(post.comments),
    )


def token_response(user: User) -> TokenResponse:
    access_token = security_manager.create_access_token(user.user_id)
    return TokenResponse(
        access_token=access_token,
        expires_in=security_manager.access_token_expire_minutes * 60,
        user=user_response(user),
    )


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> User:
    user_id = security_manager.verify_token(credentials.credentials)
    try:
        return forum.get_user(user_id)
    except UserNotFoundError:
        raise Exceptions.UNAUTHORIZED


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise Exceptions.ADMIN_REQUIRED
    return current_user


@app.post("/api/auth/register", response_model=TokenResponse)
async def register(user_data: UserRegister):
    user = forum.register(user_data.username, user_data.password)
    return token_response(user)

@app.post("/api/auth/login", response_model=TokenResponse)
async def login(login_data: UserLogin):
    user = forum.authenticate(login_data.username, login_data.password)
    return token_response(user)

@app.get("/api/auth/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return user_response(current_user)

@app.get("/api/categories", response_model=List[str])
async def get_categories():
    return CATEGORIES

@app.get("/api/posts", response_model=List[PostListItem])
async def list_posts():
    return [post_list_item(p) for p in forum.list_posts()]

@app.post("/api/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(post_data: PostCreate, current_user: User = Depends(get_current_user)):
    post = forum.create_post(current_user, post_data.title, post_data.content, post_data.category)
    return post_response(post)

@app.get("/api/posts/{post_id}", response_model=PostResponse)
async def get_post(post_id: str):
    return post_response(forum.view_post(post_id))

@app.patch("/api/posts/{post_id}", response_model=PostResponse)
async def edit_post(post_id: str, post_data: PostEdit, current_user: User = Depends(get_current_user)):
    fields = post_data.model_dump(exclude_none=True)
    if not fields:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "No valid fields to update")
    return post_response(forum.edit_post(post_id, current_user, **fields))

@app.delete("/api/posts/{post_id}")
async def delete_post(post_id: str, current_user: User = Depends(get_current_user)):
    deleted = forum.delete_post(post_id, current_user)
    message = "Post deleted successfully" if deleted else "Post not found, nothing deleted"
    return {"deleted": deleted, "message": message}

@app.post("/api/posts/{post_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(post_id: str, comment_data: CommentCreate, current_user: User = Depends(get_current_user)):
    return comment_response(forum.add_comment(post_id, current_user, comment_data.content))

@app.post("/api/posts/{post_id}/ai-reply", response_model=AIResponse)
async def ai_reply(post_id: str, options: AIReplyRequest = AIReplyRequest(),
                   current_user: User = Depends(get_current_user)):
    post = forum.get_post(post_id)
    result = await ai_assist.generate_reply(post.title, post.content)
    comment = None
    if options.publish and result.ok:
        comment = comment_response(forum.add_comment(post_id, current_user, result.text, ai_generated=True))
    return AIResponse(status=result.status.value, text=result.text, reason=result.reason, comment=comment)

@app.post("/api/posts/{post_id}/summary", response_model=AIResponse)
async def summarize(post_id: str):
    post = forum.get_post(post_id)
    comment_texts = [f"{c.author}: {c.content}" for c in post.comments]
    result = await ai_assist.summarize_thread(post.content, comment_texts)
    return AIResponse(status=result.status.value, text=result.text, reason=result.reason)

@app.get("/api/search", response_model=List[SearchResultResponse])
async def search_forum(q: str = ""):
    return [SearchResultResponse(**r.to_dict()) for r in forum.search(q)]

@app.get("/api/users/{user_id}", response_model=UserProfileResponse)
async def get_user_profile(user_id: str):
    profile = forum.user_profile(user_id)
    return UserProfileResponse(
        user=user_response(profile["user"]),
        posts=[post_list_item(p) for p in profile["posts"]],
        post_count=profile["post_count"],
        total_views=profile["total_views"],
    )

@app.get("/api/admin/users", response_model=List[UserResponse])
async def get_all_users(current_user: User = Depends(require_admin)):
    return [user_response(u) for u in forum.list_users()]

@app.get("/api/admin/posts", response_model=List[PostListItem])
async def get_all_posts(current_user: User = Depends(require_admin)):
    return [post_list_item(p) for p in forum.list_posts()]

@app.get("/api/admin/stats", response_model=ForumStats)
async def get_admin_stats(current_user: User = Depends(require_admin)):
    return ForumStats(**forum.stats())

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": timestamp(),
        "ai_available": ai_assist.available,
    }


ERROR_STATUS = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateError, status.HTTP_400_BAD_REQUEST),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ValidationError, HTTP_UNPROCESSABLE_ENTITY),
    (CorruptStoreError, HTTP_INTERNAL_SERVER_ERROR),
]


@app.exception_handler(ForumError)
async def forum_exception_handler(request: Request, exc: ForumError):
    status_code = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), HTTP_INTERNAL_SERVER_ERROR)
    if status_code >= HTTP_INTERNAL_SERVER_ERROR:
        logger.error("Request to %s failed: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=exc.__class__.__name__, message=str(exc)).model_dump()
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.__class__.__name__, message=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=HTTP_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error="InternalServerError", message="An unexpected error occurred").model_dump()
    )
