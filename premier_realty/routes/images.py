"""
Image Routes
Admin uploads to the public images bucket
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from ..auth import get_current_admin
from ..models import AdminUser
from ..schemas import MessageResponse, StoredImageResponse, UploadedImageResponse
from ..utils import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/images", tags=["Images"])


def _check_folder(folder: str) -> str:
    if folder not in storage.IMAGE_FOLDERS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid folder. Allowed: {', '.join(storage.IMAGE_FOLDERS)}",
        )
    return folder


def _storage_http_error(e: storage.StorageError) -> HTTPException:
    if "not configured" in str(e):
        return HTTPException(status_code=503, detail="Image storage is not configured")
    return HTTPException(status_code=502, detail=str(e))


@router.post("", response_model=UploadedImageResponse, status_code=201)
async def upload_image(
    file: UploadFile = File(...),
    folder: str = Form("uploads"),
    admin: AdminUser = Depends(get_current_admin),
):
    _check_folder(folder)

    if file.content_type not in storage.ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Allowed: PNG, JPG, WEBP, GIF, AVIF, SVG",
        )

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="File is empty")
    if len(contents) > storage.MAX_IMAGE_SIZE:
        raise HTTPException(status_code=400, detail="File too large. Maximum size is 10MB")

    try:
        return storage.upload_image(contents, file.content_type, folder)
    except storage.StorageError as e:
        raise _storage_http_error(e) from e


@router.get("", response_model=list[StoredImageResponse])
async def list_images(
    folder: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    admin: AdminUser = Depends(get_current_admin),
):
    if folder:
        _check_folder(folder)
    try:
        return storage.list_images(folder, limit=limit)
    except storage.StorageError as e:
        raise _storage_http_error(e) from e


@router.delete("", response_model=MessageResponse)
async def delete_image(
    key: str = Query(..., description="Object key as returned by upload"),
    admin: AdminUser = Depends(get_current_admin),
):
    if ".." in key or key.split("/", 1)[0] not in storage.IMAGE_FOLDERS:
        raise HTTPException(status_code=400, detail="Invalid image key")
    try:
        storage.delete_image(key)
    except storage.StorageError as e:
        raise _storage_http_error(e) from e
    return {"message": "Image deleted"}
