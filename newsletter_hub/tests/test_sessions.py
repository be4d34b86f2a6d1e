import unittest

from newsletter_hub.db import InMemoryDocumentStore
from newsletter_hub.entity_store import EntityStore
from newsletter_hub.sessions import SESSION_TTL_SECONDS, SessionStore


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class SessionStoreTests(unittest.TestCase):
    def setUp(self):
        self.documents = InMemoryDocumentStore()
        self.store = EntityStore(self.documents)
        self.clock = FakeClock()
        self.sessions = SessionStore(self.store, clock=self.clock)
        self.user = self.store.add_user(
            email="a@example.com", name="A", avatar_url="", password_hash="x:y"
        )

    def test_create_persists_session(self):
        token = self.sessions.create(self.user.id)
        stored = self.documents.document["sessions"][token]
        self.assertEqual(stored["userId"], self.user.id)
        self.assertEqual(stored["createdAt"], int(self.clock.now * 1000))

    def test_resolve_until_ttl_then_never(self):
        token = self.sessions.create(self.user.id)
        self.clock.now += SESSION_TTL_SECONDS - 1
        self.assertEqual(self.sessions.resolve(token).id, self.user.id)

        self.clock.now += 2
        self.assertIsNone(self.sessions.resolve(token))
        self.assertNotIn(token, self.documents.document["sessions"])

        # Even if the clock moved back, the session is gone for good.
        self.clock.now -= SESSION_TTL_SECONDS
        self.assertIsNone(self.sessions.resolve(token))

    def test_ttl_is_not_sliding(self):
        token = self.sessions.create(self.user.id)
        for _ in range(6):
            self.clock.now += 24 * 60 * 60
            self.assertIsNotNone(self.sessions.resolve(token))
        self.clock.now += 24 * 60 * 60 + 1
        self.assertIsNone(self.sessions.resolve(token))

    def test_unknown_and_empty_tokens(self):
        self.assertIsNone(self.sessions.resolve("missing"))
        self.assertIsNone(self.sessions.resolve(""))

    def test_orphaned_session_resolves_to_none_but_is_kept(self):
        token = self.sessions.create("no-such-user")
        self.assertIsNone(self.sessions.resolve(token))
        self.assertIn(token, self.documents.document["sessions"])

    def test_destroy_is_idempotent(self):
        token = self.sessions.create(self.user.id)
        self.sessions.destroy(token)
        self.assertIsNone(self.sessions.resolve(token))
        saves = self.documents.save_count
        self.sessions.destroy(token)
        self.assertEqual(self.documents.save_count, saves)


if __name__ == "__main__":
    unittest.main()
