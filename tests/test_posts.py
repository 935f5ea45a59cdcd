# tests/test_posts.py
from collections.abc import Callable

import pytest

import posts as posts_module
from config import POSTS_KEY
from exceptions import CorruptStoreError, ForbiddenError, NotFoundError, PostNotFoundError, ValidationError
from posts import PostManager
from storage import MemoryStore, Persistence
from users import Role, User

ADMIN = User("u1", "admin", role=Role.ADMIN)
ALICE = User("u3", "alice")
BOB = User("u4", "bob")


@pytest.fixture()
def manager(persistence: Persistence) -> PostManager:
    return PostManager(persistence)


@pytest.fixture()
def clock(monkeypatch: pytest.MonkeyPatch) -> Callable[[float], None]:
    """Pin the time seen by the post manager."""
    def _set(value: float) -> None:
        monkeypatch.setattr(posts_module, "timestamp", lambda: value)
    return _set


def test_seed_posts_on_first_use(manager: PostManager) -> None:
    posts = manager.list_posts()
    assert {p.post_id for p in posts} == {"1", "2"}
    welcome = manager.get_post("1")
    assert welcome.comments[0].comment_id == "c1"
    assert welcome.last_activity_at >= welcome.created_at


def test_create_post(manager: PostManager, clock) -> None:
    clock(1_800_000_000.0)
    post = manager.create_post("T", "B", "AI", "alice")
    assert post.created_at == post.last_activity_at == 1_800_000_000.0
    assert post.views == 0
    assert post.comments == []
    assert post.post_id == "1800000000000"
    # prepended in storage
    assert manager.load_posts()[0].post_id == post.post_id


def test_create_post_ids_do_not_collide(manager: PostManager, clock) -> None:
    clock(1_800_000_000.0)
    first = manager.create_post("One", "B", "AI", "alice")
    second = manager.create_post("Two", "B", "AI", "alice")
    assert first.post_id != second.post_id


def test_create_post_rejects_unknown_category(manager: PostManager) -> None:
    with pytest.raises(ValidationError):
        manager.create_post("T", "B", "Gardening", "alice")


@pytest.mark.parametrize("title, content", [("", "B"), ("   ", "B"), ("T", ""), ("T", " \n\t")])
def test_create_post_rejects_blank_fields(manager: PostManager, title: str, content: str) -> None:
    with pytest.raises(ValidationError):
        manager.create_post(title, content, "AI", "alice")
    assert {p.post_id for p in manager.list_posts()} == {"1", "2"}


def test_edit_post_rejects_blank_fields(manager: PostManager) -> None:
    post = manager.create_post("T", "B", "AI", "alice")
    with pytest.raises(ValidationError):
        manager.edit_post(post.post_id, ALICE, title="  ")
    with pytest.raises(ValidationError):
        manager.edit_post(post.post_id, ALICE, content="")
    stored = manager.get_post(post.post_id)
    assert (stored.title, stored.content) == ("T", "B")


def test_add_comment_rejects_blank_content(manager: PostManager) -> None:
    with pytest.raises(ValidationError):
        manager.add_comment("1", "", "bob")
    with pytest.raises(ValidationError):
        manager.add_comment("1", "   ", "bob")
    assert len(manager.get_post("1").comments) == 1


def test_add_comment_advances_last_activity(manager: PostManager, clock) -> None:
    clock(1_800_000_000.0)
    post = manager.create_post("T", "B", "AI", "alice")
    clock(1_800_000_050.0)
    comment = manager.add_comment(post.post_id, "Nice", "bob")

    stored = manager.get_post(post.post_id)
    assert stored.last_activity_at > post.last_activity_at
    assert stored.last_activity_at >= comment.created_at
    assert stored.comments == [comment]
    assert comment.post_id == post.post_id
    assert comment.ai_generated is False


def test_add_comment_with_same_clock_keeps_invariant(manager: PostManager, clock) -> None:
    clock(1_800_000_000.0)
    post = manager.create_post("T", "B", "AI", "alice")
    first = manager.add_comment(post.post_id, "one", "bob")
    second = manager.add_comment(post.post_id, "two", "bob", ai_generated=True)
    stored = manager.get_post(post.post_id)
    assert stored.last_activity_at == 1_800_000_000.0
    assert first.comment_id != second.comment_id
    assert [c.ai_generated for c in stored.comments] == [False, True]


def test_add_comment_to_missing_post(manager: PostManager) -> None:
    with pytest.raises(PostNotFoundError):
        manager.add_comment("nope", "hello", "bob")
    with pytest.raises(NotFoundError):
        manager.add_comment("nope", "hello", "bob")


def test_listing_orders_by_last_activity(manager: PostManager, clock) -> None:
    clock(1_800_000_000.0)
    older = manager.create_post("Older", "B", "AI", "alice")
    clock(1_800_000_100.0)
    newer = manager.create_post("Newer", "B", "AI", "alice")
    assert [p.post_id for p in manager.list_posts()][:2] == [newer.post_id, older.post_id]

    clock(1_800_000_200.0)
    manager.add_comment(older.post_id, "bump", "bob")
    listed = manager.list_posts()
    assert [p.post_id for p in listed][:2] == [older.post_id, newer.post_id]
    stamps = [p.last_activity_at for p in listed]
    assert stamps == sorted(stamps, reverse=True)


def test_edit_post_by_author(manager: PostManager, clock) -> None:
    clock(1_800_000_000.0)
    post = manager.create_post("T", "B", "AI", "alice")
    clock(1_800_000_500.0)
    edited = manager.edit_post(post.post_id, ALICE, title="New title", category="Linux")
    assert edited.title == "New title"
    assert edited.content == "B"
    assert edited.category == "Linux"
    assert edited.last_activity_at == 1_800_000_500.0
    assert manager.get_post(post.post_id).title == "New title"


def test_edit_post_permissions(manager: PostManager) -> None:
    post = manager.create_post("T", "B", "AI", "alice")
    with pytest.raises(ForbiddenError):
        manager.edit_post(post.post_id, BOB, title="hijack")
    assert manager.edit_post(post.post_id, ADMIN, content="moderated").content == "moderated"
    with pytest.raises(PostNotFoundError):
        manager.edit_post("missing", ADMIN, title="x")
    with pytest.raises(ValidationError):
        manager.edit_post(post.post_id, ALICE, category="Gardening")


def test_delete_missing_post_is_noop(manager: PostManager, store: MemoryStore) -> None:
    manager.load_posts()
    before = store.get(POSTS_KEY)
    assert manager.delete_post("missing", BOB) is False
    assert store.get(POSTS_KEY) == before


def test_delete_post_permissions(manager: PostManager) -> None:
    mine = manager.create_post("Mine", "B", "AI", "alice")
    with pytest.raises(ForbiddenError):
        manager.delete_post(mine.post_id, BOB)
    assert manager.delete_post(mine.post_id, ALICE) is True
    with pytest.raises(PostNotFoundError):
        manager.get_post(mine.post_id)

    other = manager.create_post("Other", "B", "AI", "bob")
    assert manager.delete_post(other.post_id, ADMIN) is True


def test_deleting_every_post_does_not_reseed(manager: PostManager) -> None:
    for post in manager.list_posts():
        manager.delete_post(post.post_id, ADMIN)
    assert manager.list_posts() == []


def test_posts_by_author(manager: PostManager) -> None:
    manager.create_post("A1", "B", "AI", "alice")
    manager.create_post("B1", "B", "AI", "bob")
    assert [p.title for p in manager.posts_by_author("alice")] == ["A1"]


def test_record_view(manager: PostManager) -> None:
    before = manager.get_post("2").views
    assert manager.record_view("2").views == before + 1
    assert manager.get_post("2").views == before + 1
    with pytest.raises(PostNotFoundError):
        manager.record_view("missing")


def test_corrupt_post_records(manager: PostManager, store: MemoryStore) -> None:
    store.set(POSTS_KEY, '[{"post_id": "1"}]')
    with pytest.raises(CorruptStoreError):
        manager.list_posts()
