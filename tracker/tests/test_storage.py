import io
import json
import os
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from tracker.storage import (
    SINGLE_TENANT_FILENAME,
    FileDocumentStore,
    InMemoryDocumentStore,
    ObjectStorageDocumentStore,
)


class InMemoryDocumentStoreTests(unittest.TestCase):
    def test_missing_key_is_none(self):
        self.assertIsNone(InMemoryDocumentStore().load("user1"))

    def test_loaded_copy_is_detached(self):
        store = InMemoryDocumentStore()
        doc = {"dayTasks": {"d1": True}}
        store.save("user1", doc)
        doc["dayTasks"]["d2"] = True
        loaded = store.load("user1")
        loaded["dayTasks"]["d3"] = True
        self.assertEqual(store.load("user1"), {"dayTasks": {"d1": True}})

    def test_reset(self):
        store = InMemoryDocumentStore()
        store.save("user1", {"a": 1})
        store.reset()
        self.assertIsNone(store.load("user1"))


class FileDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = FileDocumentStore(data_dir=self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_is_none(self):
        self.assertIsNone(self.store.load("user1"))

    def test_save_and_load(self):
        self.store.save("user1", {"currentDay": 2, "todos": ["a", "b"]})
        self.assertEqual(
            self.store.load("user1"), {"currentDay": 2, "todos": ["a", "b"]}
        )
        self.assertEqual(
            sorted(os.listdir(self.tmp.name)), ["progress-data-user1.json"]
        )

    def test_default_tenant_uses_legacy_filename(self):
        self.store.save("default", {"currentDay": 1})
        path = os.path.join(self.tmp.name, SINGLE_TENANT_FILENAME)
        with open(path, encoding="utf-8") as f:
            text = f.read()
        self.assertIn('\n  "currentDay": 1', text)

    def test_overwrite_replaces_document(self):
        self.store.save("user2", {"mocks": [{"score": 1}]})
        self.store.save("user2", {"mocks": []})
        self.assertEqual(self.store.load("user2"), {"mocks": []})

    def test_corrupt_file_raises(self):
        with open(self.store.path_for("user1"), "w", encoding="utf-8") as f:
            f.write("{not json")
        with self.assertRaises(ValueError):
            self.store.load("user1")


class ObjectStorageDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("tracker.storage.boto3.client")
        self.mock_client_factory = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = MagicMock()
        self.mock_client_factory.return_value = self.client
        self.store = ObjectStorageDocumentStore(bucket="progress-bucket", prefix="p/")

    def test_save_puts_json_object(self):
        self.store.save("user1", {"currentDay": 3})
        kwargs = self.client.put_object.call_args.kwargs
        self.assertEqual(kwargs["Bucket"], "progress-bucket")
        self.assertEqual(kwargs["Key"], "p/user1.json")
        self.assertEqual(kwargs["ContentType"], "application/json")
        self.assertEqual(json.loads(kwargs["Body"]), {"currentDay": 3})

    def test_load_reads_body(self):
        self.client.get_object.return_value = {
            "Body": io.BytesIO(b'{"currentDay": 4}')
        }
        self.assertEqual(self.store.load("user2"), {"currentDay": 4})
        self.client.get_object.assert_called_once_with(
            Bucket="progress-bucket", Key="p/user2.json"
        )

    def test_missing_object_is_none(self):
        self.client.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        self.assertIsNone(self.store.load("user1"))

    def test_other_errors_propagate(self):
        self.client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "nope"}}, "GetObject"
        )
        with self.assertRaises(ClientError):
            self.store.load("user1")


if __name__ == "__main__":
    unittest.main()
