"""Substring search over posts and users with additive relevance weights.

A post scores the sum of the weights of every field containing the query
(case-insensitive). A user whose name contains the query scores a flat
weight. Results are sorted by weight, highest first, with a stable sort:
equal weights keep scan order, which is posts by most recent activity
followed by users in registration order.
"""
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Optional

from config import (SEARCH_SNIPPET_LENGTH, SEARCH_WEIGHT_AUTHOR, SEARCH_WEIGHT_CATEGORY,
                    SEARCH_WEIGHT_CONTENT, SEARCH_WEIGHT_TITLE, SEARCH_WEIGHT_USER)
from posts import Post
from users import User


@dataclass(slots=True)
class SearchResult:
    type: str  # post, user
    id: str
    title: str
    snippet: str
    weight: int
    author: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def score_post(post: Post, needle: str) -> int:
    weight = 0
    if needle in post.title.lower():
        weight += SEARCH_WEIGHT_TITLE
    if needle in post.content.lower():
        weight += SEARCH_WEIGHT_CONTENT
    if needle in post.author.lower():
        weight += SEARCH_WEIGHT_AUTHOR
    if needle in post.category.lower():
        weight += SEARCH_WEIGHT_CATEGORY
    return weight


def search(query: str, posts: Iterable[Post], users: Iterable[User]) -> list[SearchResult]:
    if not query or not query.strip():
        return []
    needle = query.lower()

    results: list[SearchResult] = []
    for post in posts:
        weight = score_post(post, needle)
        if weight:
            results.append(SearchResult(
                type="post",
                id=post.post_id,
                title=post.title,
                snippet=post.content[:SEARCH_SNIPPET_LENGTH] + "...",
                weight=weight,
                author=post.author,
                category=post.category,
            ))

    for user in users:
        if needle in user.username.lower():
            results.append(SearchResult(
                type="user",
                id=user.user_id,
                title=user.username,
                snippet=f"User - {user.role.value}",
                weight=SEARCH_WEIGHT_USER,
            ))

    # list.sort is stable
    results.sort(key=lambda r: r.weight, reverse=True)
    return results
