"""Tests for userhub.crud.user against an in-memory SQLite database."""

import unittest
from unittest.mock import patch

from sqlalchemy.exc import IntegrityError

from support import DEFAULT_PASSWORD, DatabaseTestCase
from userhub.core.errors import ConflictError, NotFoundError
from userhub.core.security import verify_password
from userhub.crud import user as user_store
from userhub.models import Role, User
from userhub.schemas.user import UserUpdate


class TestCreateUser(DatabaseTestCase):
    def test_stores_hash_not_plaintext(self) -> None:
        user = self.add_user("jane@x.com")
        self.assertNotEqual(user.password, DEFAULT_PASSWORD)
        self.assertTrue(verify_password(DEFAULT_PASSWORD, user.password))

    def test_defaults(self) -> None:
        user = self.add_user("jane@x.com")
        self.assertEqual(user.role, Role.USER)
        self.assertIsNotNone(user.id)
        self.assertIsNotNone(user.created_at)
        self.assertIsNotNone(user.updated_at)

    def test_duplicate_email_conflicts(self) -> None:
        self.add_user("jane@x.com")
        with self.assertRaises(ConflictError):
            self.add_user("jane@x.com", username="other")
        self.assertEqual(self.db.query(User).count(), 1)

    def test_unique_index_decides_when_precheck_misses(self) -> None:
        """Two creates that both pass the pre-check: exactly one row survives."""
        self.add_user("jane@x.com")
        with patch.object(user_store, "get_user_by_email", return_value=None):
            with self.assertRaises(ConflictError) as ctx:
                self.add_user("jane@x.com", username="racer")
        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)
        self.assertEqual(self.db.query(User).count(), 1)
        self.assertEqual(self.db.query(User).one().username, "jane")


class TestReadUsers(DatabaseTestCase):
    def test_get_by_email_and_id(self) -> None:
        user = self.add_user("jane@x.com")
        self.assertEqual(user_store.get_user_by_email(self.db, "jane@x.com").id, user.id)
        self.assertEqual(user_store.get_user_by_id(self.db, user.id).email, "jane@x.com")
        self.assertIsNone(user_store.get_user_by_email(self.db, "nobody@x.com"))
        self.assertIsNone(user_store.get_user_by_id(self.db, 999))

    def test_ids_outside_integer_column_are_absent(self) -> None:
        for user_id in (0, -1, user_store.MAX_USER_ID + 1, 10**20):
            self.assertIsNone(user_store.get_user_by_id(self.db, user_id))
        with self.assertRaises(NotFoundError):
            user_store.get_user_or_404(self.db, 10**20)

    def test_get_or_404(self) -> None:
        with self.assertRaises(NotFoundError):
            user_store.get_user_or_404(self.db, 999)

    def test_list_ordered_by_id(self) -> None:
        a = self.add_user("a@x.com")
        b = self.add_user("b@x.com")
        self.assertEqual([u.id for u in user_store.list_users(self.db)], [a.id, b.id])


class TestUpdateUser(DatabaseTestCase):
    def test_partial_update_leaves_other_fields(self) -> None:
        user = self.add_user("jane@x.com")
        old_hash = user.password
        updated = user_store.update_user(self.db, user.id, UserUpdate(username="janet"))
        self.assertEqual(updated.username, "janet")
        self.assertEqual(updated.email, "jane@x.com")
        self.assertEqual(updated.password, old_hash)
        self.assertEqual(updated.role, Role.USER)

    def test_password_rehashed(self) -> None:
        user = self.add_user("jane@x.com")
        updated = user_store.update_user(
            self.db, user.id, UserUpdate(password="NewSecret456")
        )
        self.assertNotEqual(updated.password, "NewSecret456")
        self.assertTrue(verify_password("NewSecret456", updated.password))
        self.assertFalse(verify_password(DEFAULT_PASSWORD, updated.password))

    def test_role_change(self) -> None:
        user = self.add_user("jane@x.com")
        updated = user_store.update_user(self.db, user.id, UserUpdate(role=Role.ADMIN))
        self.assertEqual(updated.role, Role.ADMIN)

    def test_email_taken_by_other_user_conflicts(self) -> None:
        self.add_user("jane@x.com")
        bob = self.add_user("bob@x.com")
        with self.assertRaises(ConflictError):
            user_store.update_user(self.db, bob.id, UserUpdate(email="jane@x.com"))
        self.db.expire_all()
        self.assertEqual(user_store.get_user_by_id(self.db, bob.id).email, "bob@x.com")

    def test_same_email_is_not_a_conflict(self) -> None:
        user = self.add_user("jane@x.com")
        updated = user_store.update_user(self.db, user.id, UserUpdate(email="jane@x.com"))
        self.assertEqual(updated.email, "jane@x.com")

    def test_unknown_id(self) -> None:
        with self.assertRaises(NotFoundError):
            user_store.update_user(self.db, 999, UserUpdate(username="ghost"))


class TestDeleteUser(DatabaseTestCase):
    def test_delete_then_delete_again(self) -> None:
        user = self.add_user("jane@x.com")
        user_store.delete_user(self.db, user.id)
        self.assertIsNone(user_store.get_user_by_id(self.db, user.id))
        with self.assertRaises(NotFoundError):
            user_store.delete_user(self.db, user.id)


if __name__ == "__main__":
    unittest.main()
