import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from config import CATEGORIES, POSTS_KEY
from exceptions import CorruptStoreError, ForbiddenError, PostNotFoundError, ValidationError
from session import can_modify
from storage import Persistence
from users import User
from utils import new_id, require_text, timestamp

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Comment:
    comment_id: str
    post_id: str
    author: str
    content: str
    created_at: float = field(default_factory=timestamp)
    ai_generated: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Comment":
        return cls(
            comment_id=data["comment_id"],
            post_id=data["post_id"],
            author=data["author"],
            content=data["content"],
            created_at=data["created_at"],
            ai_generated=data.get("ai_generated", False),
        )

    def __str__(self) -> str:
        ai_marker = " [AI]" if self.ai_generated else ""
        return f"Comment {self.comment_id} by {self.author}: {self.content[:50]}{ai_marker}"


@dataclass(slots=True)
class Post:
    post_id: str
    title: str
    content: str
    author: str
    category: str
    created_at: float = field(default_factory=timestamp)
    last_activity_at: float = 0.0
    views: int = 0
    comments: list[Comment] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.last_activity_at < self.created_at:
            self.last_activity_at = self.created_at

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Post":
        return cls(
            post_id=data["post_id"],
            title=data["title"],
            content=data["content"],
            author=data["author"],
            category=data["category"],
            created_at=data["created_at"],
            last_activity_at=data.get("last_activity_at", data["created_at"]),
            views=data.get("views", 0),
            comments=[Comment.from_dict(c) for c in data.get("comments", [])],
        )

    def __str__(self) -> str:
        return f"Post {self.post_id}: {self.title} [{self.category}] by {self.author}"


def _seed_posts() -> list[dict[str, Any]]:
    now = timestamp()
    welcome = Post(
        post_id="1",
        title="Welcome to ZhiYun Forum - Community Guidelines",
        content="Welcome everyone! Please be friendly and respectful. This forum is for sharing "
                "the latest tech news and programming knowledge.",
        author="admin",
        category="Announcements",
        created_at=now - 86400 * 2,
        views=1205,
        comments=[Comment("c1", "1", "user", "Got it, thanks admin!", now - 86000)],
    )
    welcome.last_activity_at = now - 86000
    react = Post(
        post_id="2",
        title="Thoughts on React 19",
        content="What do you think of the new React 19 features? Will Server Components change "
                "the way we build front ends?",
        author="tech_enthusiast",
        category="Other",
        created_at=now - 3600,
        views=342,
    )
    return [welcome.to_dict(), react.to_dict()]


def validate_category(category: str) -> str:
    if category not in CATEGORIES:
        raise ValidationError(f"Unknown category '{category}'")
    return category


class PostManager:
    """Posts with their embedded comments, stored as one collection."""

    def __init__(self, persistence: Persistence) -> None:
        self.persistence = persistence

    def load_posts(self) -> list[Post]:
        """Posts in storage order."""
        records = self.persistence.load_or_seed(POSTS_KEY, _seed_posts())
        try:
            return [Post.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise CorruptStoreError(POSTS_KEY, f"bad post record ({e})") from e

    def save_posts(self, posts: list[Post]) -> None:
        self.persistence.save(POSTS_KEY, [p.to_dict() for p in posts])

    def list_posts(self) -> list[Post]:
        """All posts, most recent activity first."""
        return sorted(self.load_posts(), key=lambda p: p.last_activity_at, reverse=True)

    def get_post(self, post_id: str) -> Post:
        for post in self.load_posts():
            if post.post_id == post_id:
                return post
        raise PostNotFoundError(post_id)

    def posts_by_author(self, author: str) -> list[Post]:
        return [p for p in self.list_posts() if p.author == author]

    def create_post(self, title: str, content: str, category: str, author: str) -> Post:
        require_text(title, "Title")
        require_text(content, "Content")
        validate_category(category)
        posts = self.load_posts()
        now = timestamp()
        post = Post(
            post_id=new_id({p.post_id for p in posts}, now=now),
            title=title,
            content=content,
            author=author,
            category=category,
            created_at=now,
            last_activity_at=now,
        )
        self.save_posts([post] + posts)
        logger.info("Post %s created by %s", post.post_id, author)
        return post

    def edit_post(self, post_id: str, actor: User, title: Optional[str] = None,
                  content: Optional[str] = None, category: Optional[str] = None) -> Post:
        """Overwrite the given fields. Earlier content is not kept."""
        posts = self.load_posts()
        post = next((p for p in posts if p.post_id == post_id), None)
        if post is None:
            raise PostNotFoundError(post_id)
        if not can_modify(actor, post):
            raise ForbiddenError(f"{actor.username} may not edit post {post_id}")

        if title is not None:
            post.title = require_text(title, "Title")
        if content is not None:
            post.content = require_text(content, "Content")
        if category is not None:
            post.category = validate_category(category)
        post.last_activity_at = max(post.last_activity_at, timestamp())

        self.save_posts(posts)
        logger.info("Post %s edited by %s", post_id, actor.username)
        return post

    def delete_post(self, post_id: str, actor: User) -> bool:
        """Remove a post. Returns False when there was nothing to delete."""
        posts = self.load_posts()
        post = next((p for p in posts if p.post_id == post_id), None)
        if post is None:
            return False
        if not can_modify(actor, post):
            raise ForbiddenError(f"{actor.username} may not delete post {post_id}")

        self.save_posts([p for p in posts if p.post_id != post_id])
        logger.info("Post %s deleted by %s", post_id, actor.username)
        return True

    def add_comment(self, post_id: str, content: str, author: str, ai_generated: bool = False) -> Comment:
        require_text(content, "Comment")
        posts = self.load_posts()
        post = next((p for p in posts if p.post_id == post_id), None)
        if post is None:
            raise PostNotFoundError(post_id)

        now = timestamp()
        comment = Comment(
            comment_id=new_id({c.comment_id for c in post.comments}, prefix="c", now=now),
            post_id=post_id,
            author=author,
            content=content,
            created_at=now,
            ai_generated=ai_generated,
        )
        post.comments.append(comment)
        post.last_activity_at = max(post.last_activity_at, comment.created_at)

        self.save_posts(posts)
        logger.info("Comment %s added to post %s by %s", comment.comment_id, post_id, author)
        return comment

    def record_view(self, post_id: str) -> Post:
        posts = self.load_posts()
        post = next((p for p in posts if p.post_id == post_id), None)
        if post is None:
            raise PostNotFoundError(post_id)
        post.views += 1
        self.save_posts(posts)
        return post
