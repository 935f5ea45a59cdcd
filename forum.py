from collections import Counter
from typing import Any, Optional

from config import SECRET_KEY
from posts import Comment, Post, PostManager
from search import SearchResult, search
from security import SecurityManager
from session import Session
from storage import KeyValueStore, Persistence, make_store
from users import User, UserManager
from utils import start_of_day, timestamp


class Forum:
    """Main Forum class that orchestrates all components."""

    def __init__(self, backend: Optional[KeyValueStore] = None,
                 security: Optional[SecurityManager] = None):
        self.persistence = Persistence(backend if backend is not None else make_store())
        self.security = security or SecurityManager(SECRET_KEY)
        self.user_manager = UserManager(self.persistence, self.security)
        self.post_manager = PostManager(self.persistence)
        self.session = Session(self.persistence)

    # Identity
    def register(self, username: str, password: str) -> User:
        return self.user_manager.register(username, password)

    def authenticate(self, username: str, password: str) -> User:
        """Check credentials without touching the stored session."""
        return self.user_manager.login(username, password)

    def login(self, username: str, password: str) -> User:
        user = self.user_manager.login(username, password)
        self.session.set_current_user(user)
        return user

    def logout(self) -> None:
        self.session.logout()

    def current_user(self) -> Optional[User]:
        return self.session.current_user()

    def get_user(self, user_id: str) -> User:
        return self.user_manager.get_user(user_id)

    def list_users(self) -> list[User]:
        return self.user_manager.list_users()

    # Content
    def create_post(self, author: User, title: str, content: str, category: str) -> Post:
        return self.post_manager.create_post(title, content, category, author.username)

    def edit_post(self, post_id: str, actor: User, **fields: Any) -> Post:
        return self.post_manager.edit_post(post_id, actor, **fields)

    def delete_post(self, post_id: str, actor: User) -> bool:
        return self.post_manager.delete_post(post_id, actor)

    def add_comment(self, post_id: str, author: User, content: str, ai_generated: bool = False) -> Comment:
        return self.post_manager.add_comment(post_id, content, author.username, ai_generated)

    def get_post(self, post_id: str) -> Post:
        return self.post_manager.get_post(post_id)

    def view_post(self, post_id: str) -> Post:
        """Fetch a post for display, counting the view."""
        return self.post_manager.record_view(post_id)

    def list_posts(self) -> list[Post]:
        return self.post_manager.list_posts()

    def search(self, query: str) -> list[SearchResult]:
        return search(query, self.post_manager.list_posts(), self.user_manager.list_users())

    # Profiles and moderation
    def user_profile(self, user_id: str) -> dict[str, Any]:
        user = self.user_manager.get_user(user_id)
        posts = self.post_manager.posts_by_author(user.username)
        return {
            "user": user,
            "posts": posts,
            "post_count": len(posts),
            "total_views": sum(p.views for p in posts),
        }

    def stats(self) -> dict[str, Any]:
        posts = self.post_manager.load_posts()
        today = start_of_day(timestamp())
        categories = Counter(p.category for p in posts)
        return {
            "total_posts": len(posts),
            "total_users": len(self.user_manager.list_users()),
            "total_comments": sum(len(p.comments) for p in posts),
            "today_posts": sum(1 for p in posts if p.created_at >= today),
            "popular_categories": [{"name": name, "count": count}
                                   for name, count in categories.most_common()],
        }
