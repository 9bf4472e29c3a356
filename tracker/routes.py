"""
HTTP routes for the progress tracker API.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from tracker.dependencies import get_document_store, get_tenant_resolver
from tracker.errors import StorageUnavailable
from tracker.progress import (
    apply_patch,
    compute_stats,
    load_or_default,
    reset_document,
    save_document,
)
from tracker.schemas import (
    HealthResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PatchFieldRequest,
    ProgressResponse,
    StatsResponse,
)
from tracker.storage import DocumentStore
from tracker.tenants import TenantResolver

logger = logging.getLogger(__name__)

router = APIRouter()

EXPORT_FILENAME_PREFIX = "afcat-progress"


def get_tenant_key(
    userType: Optional[str] = Query(None),
    resolver: TenantResolver = Depends(get_tenant_resolver),
) -> str:
    return resolver.resolve_storage_key(userType)


def export_filename(key: str, resolver: TenantResolver) -> str:
    if resolver.is_default(key):
        return f"{EXPORT_FILENAME_PREFIX}-backup.json"
    return f"{EXPORT_FILENAME_PREFIX}-{key}-backup.json"


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse()


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    resolver: TenantResolver = Depends(get_tenant_resolver),
):
    identity = resolver.authenticate(payload.username, payload.password)
    return {"success": True, "user": identity.as_dict()}


@router.get("/progress", response_model=ProgressResponse)
def get_progress(
    key: str = Depends(get_tenant_key),
    store: DocumentStore = Depends(get_document_store),
):
    return ProgressResponse(data=load_or_default(store, key))


@router.post("/progress", response_model=MessageResponse)
def save_progress(
    payload: Any = Body(...),
    key: str = Depends(get_tenant_key),
    store: DocumentStore = Depends(get_document_store),
):
    """Replace the whole document. `lastUpdated` is always set server-side."""
    save_document(store, key, payload)
    return MessageResponse(message="Progress saved!")


@router.put("/progress/{field}", response_model=MessageResponse)
def update_progress_field(
    field: str,
    payload: PatchFieldRequest,
    key: str = Depends(get_tenant_key),
    store: DocumentStore = Depends(get_document_store),
):
    doc = load_or_default(store, key)
    save_document(store, key, apply_patch(doc, field, payload.value))
    return MessageResponse(message=f"{field} updated!")


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    key: str = Depends(get_tenant_key),
    store: DocumentStore = Depends(get_document_store),
):
    try:
        doc = load_or_default(store, key)
    except StorageUnavailable as exc:
        raise StorageUnavailable("Failed to load stats") from exc
    return {"success": True, "stats": compute_stats(doc).as_dict()}


@router.delete("/progress", response_model=MessageResponse)
def reset_progress(
    key: str = Depends(get_tenant_key),
    store: DocumentStore = Depends(get_document_store),
):
    try:
        reset_document(store, key)
    except StorageUnavailable as exc:
        raise StorageUnavailable("Failed to reset") from exc
    logger.info("Progress reset for %s", key)
    return MessageResponse(message="All data reset!")


@router.get("/export")
def export_progress(
    key: str = Depends(get_tenant_key),
    store: DocumentStore = Depends(get_document_store),
    resolver: TenantResolver = Depends(get_tenant_resolver),
):
    try:
        doc = load_or_default(store, key)
    except StorageUnavailable as exc:
        raise StorageUnavailable("Failed to export") from exc
    filename = export_filename(key, resolver)
    return Response(
        content=json.dumps(doc, indent=2),
        media_type="application/json",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
