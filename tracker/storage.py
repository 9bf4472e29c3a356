"""
Document storage abstraction: in-memory, local JSON files and S3-compatible
object storage. The SQL-table backend lives in `tracker.db`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol
import json
import os
import tempfile

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

SINGLE_TENANT_FILENAME = "progress-data.json"


class DocumentStore(Protocol):
    """Load/save of one progress document per tenant key."""

    def load(self, key: str) -> Optional[dict]:
        """Return the stored document, or None when the tenant has none yet."""
        ...

    def save(self, key: str, doc: dict) -> None:
        ...


@dataclass
class InMemoryDocumentStore:
    """Test double for document storage."""

    documents: dict = field(default_factory=dict)

    def load(self, key: str) -> Optional[dict]:
        stored = self.documents.get(key)
        if stored is None:
            return None
        return json.loads(stored)

    def save(self, key: str, doc: dict) -> None:
        # Keep serialized text so callers never hold a reference into the store.
        self.documents[key] = json.dumps(doc, default=str)

    def reset(self) -> None:
        self.documents.clear()


@dataclass
class FileDocumentStore:
    """
    One pretty-printed JSON file per tenant under `data_dir`.

    The implicit single tenant (`default_key`) keeps the historical
    `progress-data.json` name.
    """

    data_dir: str = "."
    default_key: str = "default"

    def path_for(self, key: str) -> Path:
        if key == self.default_key:
            return Path(self.data_dir) / SINGLE_TENANT_FILENAME
        return Path(self.data_dir) / f"progress-data-{key}.json"

    def load(self, key: str) -> Optional[dict]:
        path = self.path_for(key)
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, key: str, doc: dict) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(doc, f, indent=2, default=str)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


@dataclass
class ObjectStorageDocumentStore:
    """
    S3-compatible object storage (AWS S3, Tencent COS, MinIO).
    """

    bucket: str
    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    prefix: str = "progress"

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def object_key(self, key: str) -> str:
        return f"{self.prefix.rstrip('/')}/{key}.json"

    def load(self, key: str) -> Optional[dict]:
        try:
            response = self._client.get_object(
                Bucket=self.bucket, Key=self.object_key(key)
            )
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise
        return json.loads(response["Body"].read())

    def save(self, key: str, doc: dict) -> None:
        body = json.dumps(doc, indent=2, default=str).encode("utf-8")
        self._client.put_object(
            Bucket=self.bucket,
            Key=self.object_key(key),
            Body=body,
            ContentType="application/json",
        )
