"""User and content store queries."""

import pytest
from sqlalchemy.dialects import mysql
from sqlalchemy.schema import CreateTable

from app import create_app
from errors import Conflict
from models import db, Content, User
from stores import ContentStore, UserStore


def test_create_user_starts_with_empty_edges(session):
    user = UserStore(session).create("alice", "alice@example.com", "pw")

    assert user.user_id is not None
    assert user.following == []
    assert user.followers == []


@pytest.mark.parametrize("username,email", [
    ("alice", "other@example.com"),
    ("someone", "alice@example.com"),
])
def test_duplicate_username_or_email_conflicts(session, username, email):
    store = UserStore(session)
    store.create("alice", "alice@example.com", "pw")

    with pytest.raises(Conflict) as excinfo:
        store.create(username, email, "pw")

    assert excinfo.value.status_code == 409
    assert session.query(User).count() == 1


def test_credentials_are_compared_verbatim_by_default(session):
    store = UserStore(session)
    user = store.create("alice", "alice@example.com", "pw")

    assert user.password == "pw"
    assert store.authenticate("alice", "pw") == user
    assert store.authenticate("alice", "PW") is None
    assert store.authenticate("nobody", "pw") is None


def test_credentials_hashed_when_enabled(tmp_path):
    app = create_app("testing", {
        "UPLOAD_FOLDER": str(tmp_path),
        "HASH_PASSWORDS": True,
        "BCRYPT_LOG_ROUNDS": 4,
    })
    with app.app_context():
        store = UserStore(db.session)
        user = store.create("alice", "alice@example.com", "pw")

        assert user.password != "pw"
        assert store.authenticate("alice", "pw") == user
        assert store.authenticate("alice", "wrong") is None


def test_user_search_is_case_insensitive_substring(session):
    store = UserStore(session)
    for name in ("Tom", "atomic", "jerry"):
        store.create(name, f"{name}@example.com", "pw")

    assert [u.username for u in store.search("tom")] == ["Tom", "atomic"]
    assert store.search("zzz") == []


def test_search_matches_wildcards_literally(session):
    store = UserStore(session)
    store.create("under_score", "u@example.com", "pw")
    store.create("underscore", "v@example.com", "pw")

    assert [u.username for u in store.search("r_s")] == ["under_score"]
    assert store.search("%") == []


def test_content_copies_author_username(session):
    author = UserStore(session).create("alice", "alice@example.com", "pw")

    content = ContentStore(session).create(
        author, title="Demo", text="New track", image_path="/uploads/1-a.png", artist_name="Tool")

    assert content.content_id is not None
    assert content.user_id == author.user_id
    assert content.username == "alice"
    assert content.timestamp is not None
    assert content.to_dict()["artist_name"] == "Tool"


def test_content_search_covers_title_and_text(session):
    author = UserStore(session).create("alice", "alice@example.com", "pw")
    store = ContentStore(session)
    store.create(author, title="Live in Berlin", text="great show")
    store.create(author, title="Demo", text="recorded in BERLIN")
    store.create(author, title="Other", text="nothing here")

    assert sorted(c.title for c in store.search("berlin")) == ["Demo", "Live in Berlin"]
    assert store.search("paris") == []


def test_by_author_lists_only_that_author(session):
    users = UserStore(session)
    alice = users.create("alice", "alice@example.com", "pw")
    bob = users.create("bob", "bob@example.com", "pw")
    store = ContentStore(session)
    store.create(alice, title="A1", text="x")
    store.create(bob, title="B1", text="x")
    store.create(alice, title="A2", text="x")

    assert [c.title for c in store.by_author(alice.user_id)] == ["A2", "A1"]


def test_username_columns_use_binary_collation_on_mysql():
    for table in (User.__table__, Content.__table__):
        ddl = str(CreateTable(table).compile(dialect=mysql.dialect()))
        assert "username VARCHAR(50) COLLATE utf8mb4_bin" in ddl
