"""Tests for planner.stores.user_store.SqlAlchemyUserStore over in-memory SQLite."""

import unittest
from datetime import UTC, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from planner.models import Base, User
from planner.stores.user_store import DuplicateUserError, SqlAlchemyUserStore


def _sqlite_session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)()


class TestUserStore(unittest.TestCase):
    """Lookups, partial updates and unique-constraint mapping."""

    def setUp(self) -> None:
        self.db = _sqlite_session()
        self.store = SqlAlchemyUserStore(self.db)
        self.user = self.store.create(
            username="dave", email="dave@x.com", password_hash="hash"
        )

    def tearDown(self) -> None:
        self.db.close()

    def test_create_applies_defaults(self) -> None:
        self.assertEqual(len(self.user.id), 36)
        self.assertEqual(self.user.role, "user")
        self.assertTrue(self.user.is_active)
        self.assertIsNone(self.user.refresh_token_hash)
        self.assertIsNotNone(self.user.created_at)

    def test_lookups(self) -> None:
        self.assertEqual(self.store.find_by_username("dave").id, self.user.id)
        self.assertEqual(self.store.find_by_email("dave@x.com").id, self.user.id)
        self.assertEqual(self.store.find_by_id(self.user.id).username, "dave")
        self.assertIsNone(self.store.find_by_username("Dave"))
        self.assertIsNone(self.store.find_by_id("missing"))

    def test_duplicate_username_and_email(self) -> None:
        with self.assertRaises(DuplicateUserError) as ctx:
            self.store.create(username="dave", email="other@x.com", password_hash="h")
        self.assertEqual(ctx.exception.field, "username")
        with self.assertRaises(DuplicateUserError) as ctx:
            self.store.create(username="dave2", email="dave@x.com", password_hash="h")
        self.assertEqual(ctx.exception.field, "email")
        self.assertEqual(len(self.store.list_users()), 1)

    def test_update_writes_refresh_pair(self) -> None:
        expires = datetime(2030, 1, 1, tzinfo=UTC)
        self.store.update(self.user.id, refresh_token_hash="h", refresh_token_expires_at=expires)
        user = self.store.find_by_id(self.user.id)
        self.assertEqual(user.refresh_token_hash, "h")
        self.assertEqual(user.refresh_token_expires_at.replace(tzinfo=UTC), expires)

    def test_update_rejects_unknown_fields(self) -> None:
        with self.assertRaises(ValueError):
            self.store.update(self.user.id, password_hash="new")
        with self.assertRaises(ValueError):
            self.store.update(self.user.id, username="eve")

    def test_delete_and_list(self) -> None:
        self.store.create(username="erin", email="erin@x.com", password_hash="h")
        self.assertEqual([u.username for u in self.store.list_users()], ["dave", "erin"])
        self.store.delete(self.user.id)
        self.assertIsNone(self.store.find_by_id(self.user.id))
        self.assertEqual([u.username for u in self.store.list_users()], ["erin"])

    def test_full_name(self) -> None:
        self.assertEqual(self.user.full_name, "dave")
        user = User(username="frank", first_name="  Frank ", last_name=" Doe")
        self.assertEqual(user.full_name, "Frank Doe")
        self.assertEqual(User(username="gina", first_name="  ", last_name="").full_name, "gina")


if __name__ == "__main__":
    unittest.main()
