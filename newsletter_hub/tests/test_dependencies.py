import threading
import time
import unittest
from unittest.mock import patch

from newsletter_hub import dependencies
from newsletter_hub.db import InMemoryDocumentStore


class EntityStoreSingletonTests(unittest.TestCase):
    def setUp(self):
        self._saved = dependencies._entity_store
        dependencies._entity_store = None

    def tearDown(self):
        dependencies._entity_store = self._saved

    def test_concurrent_first_access_builds_one_store(self):
        def slow_build():
            time.sleep(0.05)
            return InMemoryDocumentStore()

        barrier = threading.Barrier(4)
        stores = []

        def first_request():
            barrier.wait()
            stores.append(dependencies.get_entity_store())

        with patch.object(dependencies, "_build_document_store", side_effect=slow_build) as build:
            threads = [threading.Thread(target=first_request) for _ in range(4)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        self.assertEqual(build.call_count, 1)
        self.assertEqual(len({id(s) for s in stores}), 1)
        self.assertIs(dependencies.get_entity_store(), stores[0])


if __name__ == "__main__":
    unittest.main()
