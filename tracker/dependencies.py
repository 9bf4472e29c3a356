"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from tracker.config import Settings, get_settings
from tracker.db import SqlCredentialStore, SqlDocumentStore
from tracker.storage import (
    DocumentStore,
    FileDocumentStore,
    InMemoryDocumentStore,
    ObjectStorageDocumentStore,
)
from tracker.tenants import (
    CredentialStore,
    InMemoryCredentialStore,
    TenantResolver,
    parse_account,
)

logger = logging.getLogger(__name__)

_document_store: DocumentStore | None = None
_credential_store: CredentialStore | None = None
_tenant_resolver: TenantResolver | None = None


def build_document_store(settings: Settings) -> DocumentStore:
    backend = settings.storage_backend
    if backend == "file":
        return FileDocumentStore(
            data_dir=settings.data_dir, default_key=settings.default_tenant
        )
    if backend == "sql":
        if settings.database_url:
            return SqlDocumentStore(settings.database_url)
        logger.warning("TRACKER_DATABASE_URL not set; using in-memory storage")
    elif backend == "s3":
        if settings.s3_bucket:
            return ObjectStorageDocumentStore(
                bucket=settings.s3_bucket,
                region=settings.s3_region or "",
                endpoint=settings.s3_endpoint or "",
                access_key_id=settings.aws_access_key_id or "",
                secret_access_key=settings.aws_secret_access_key or "",
                prefix=settings.s3_prefix,
            )
        logger.warning("TRACKER_S3_BUCKET not set; using in-memory storage")
    return InMemoryDocumentStore()


def build_credential_store(settings: Settings) -> CredentialStore:
    if settings.storage_backend == "sql" and settings.database_url:
        store = SqlCredentialStore(settings.database_url)
        for record in settings.users:
            store.add_user(*parse_account(record))
        return store
    return InMemoryCredentialStore.from_records(settings.users)


def get_document_store() -> DocumentStore:
    """
    Return a singleton store so in-memory state persists across requests.
    """
    global _document_store
    if _document_store:
        return _document_store
    _document_store = build_document_store(get_settings())
    return _document_store


def get_credential_store() -> CredentialStore:
    global _credential_store
    if _credential_store:
        return _credential_store
    _credential_store = build_credential_store(get_settings())
    return _credential_store


def get_tenant_resolver() -> TenantResolver:
    global _tenant_resolver
    if _tenant_resolver:
        return _tenant_resolver
    settings = get_settings()
    _tenant_resolver = TenantResolver(
        settings.tenants,
        get_credential_store(),
        default_tenant=settings.default_tenant if settings.single_tenant else None,
    )
    return _tenant_resolver
