import threading
import unittest
from unittest.mock import MagicMock

from newsletter_hub.db import InMemoryDocumentStore
from newsletter_hub.entity_store import EntityStore
from newsletter_hub.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StorageError,
)


class EntityStoreTests(unittest.TestCase):
    def setUp(self):
        self.documents = InMemoryDocumentStore()
        self.store = EntityStore(self.documents)
        self.alice = self._user("alice@example.com")
        self.bob = self._user("bob@example.com")
        self.alice_source = self.store.create_source(
            user_id=self.alice.id, name="AI Weekly", email_address="ai@weekly.co"
        )
        self.bob_source = self.store.create_source(
            user_id=self.bob.id, name="Finance", email_address="fin@news.io"
        )

    def _user(self, email):
        return self.store.add_user(
            email=email, name=email.split("@")[0], avatar_url="", password_hash="s:h"
        )

    def test_duplicate_email_conflicts(self):
        with self.assertRaises(ConflictError):
            self._user("alice@example.com")
        self.assertEqual(len(self.documents.document["users"]), 2)

    def test_find_user_by_email(self):
        self.assertEqual(self.store.find_user_by_email("bob@example.com").id, self.bob.id)
        self.assertIsNone(self.store.find_user_by_email("carol@example.com"))

    def test_sources_are_scoped_to_owner(self):
        self.assertEqual(
            [s.id for s in self.store.list_sources(self.alice.id)], [self.alice_source.id]
        )

    def test_create_feed_with_foreign_source_is_rejected(self):
        with self.assertRaises(AuthorizationError):
            self.store.create_feed(
                user=self.alice,
                name="Mixed",
                keywords="ai",
                source_ids=[self.alice_source.id, self.bob_source.id],
            )
        with self.assertRaises(AuthorizationError):
            self.store.create_feed(
                user=self.alice, name="Ghost", keywords="ai", source_ids=["nope"]
            )
        self.assertEqual(self.documents.document["feeds"], [])

    def test_update_feed_keeps_empty_fields(self):
        feed = self.store.create_feed(
            user=self.alice, name="AI", keywords="ai", source_ids=[self.alice_source.id]
        )
        updated = self.store.update_feed(
            feed.id, user=self.alice, name="", keywords="ml, ai", source_ids=[]
        )
        self.assertEqual(updated.name, "AI")
        self.assertEqual(updated.keywords, "ml, ai")
        self.assertEqual(updated.source_ids, [self.alice_source.id])
        self.assertEqual(self.store.get_feed(feed.id), updated)

    def test_update_feed_validates_new_sources(self):
        feed = self.store.create_feed(
            user=self.alice, name="AI", keywords="ai", source_ids=[self.alice_source.id]
        )
        with self.assertRaises(AuthorizationError):
            self.store.update_feed(feed.id, user=self.alice, source_ids=[self.bob_source.id])
        self.assertEqual(self.store.get_feed(feed.id).source_ids, [self.alice_source.id])

    def test_other_users_feed_is_not_found(self):
        feed = self.store.create_feed(
            user=self.alice, name="AI", keywords="ai", source_ids=[self.alice_source.id]
        )
        with self.assertRaises(NotFoundError):
            self.store.update_feed(feed.id, user=self.bob, name="Mine now")
        with self.assertRaises(NotFoundError):
            self.store.delete_feed(feed.id, user=self.bob)
        self.assertEqual(self.store.get_feed(feed.id).name, "AI")

    def test_delete_feed(self):
        feed = self.store.create_feed(
            user=self.alice, name="AI", keywords="ai", source_ids=[self.alice_source.id]
        )
        self.store.delete_feed(feed.id, user=self.alice)
        self.assertEqual(self.store.list_feeds(self.alice.id), [])
        with self.assertRaises(NotFoundError):
            self.store.delete_feed(feed.id, user=self.alice)

    def test_failed_transaction_is_not_saved(self):
        saves = self.documents.save_count
        with self.assertRaises(RuntimeError):
            with self.store.transaction() as doc:
                doc["users"].clear()
                raise RuntimeError("boom")
        self.assertEqual(self.documents.save_count, saves)
        self.assertEqual(len(self.documents.document["users"]), 2)

    def test_io_errors_become_storage_errors(self):
        documents = MagicMock()
        documents.load.side_effect = OSError("disk gone")
        with self.assertRaises(StorageError):
            EntityStore(documents).list_feeds("u1")

    def test_concurrent_writes_are_not_lost(self):
        def add_sources(n):
            for i in range(n):
                self.store.create_source(
                    user_id=self.alice.id, name=f"s{i}", email_address="x@y.z"
                )

        threads = [threading.Thread(target=add_sources, args=(25,)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(self.store.list_sources(self.alice.id)), 101)


if __name__ == "__main__":
    unittest.main()
