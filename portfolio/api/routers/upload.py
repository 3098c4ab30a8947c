# This file defines media upload endpoints under the versioned API path.
# It exists so editors can attach images and documents to portfolio entities in one request.
# Files are validated for type and size before anything is written to disk.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, UploadFile

from portfolio.api.dependencies import get_file_storage
from portfolio.api.response_envelope import build_object_envelope
from portfolio.api.security import Caller, require_permission
from portfolio.api.services.storage_service import LocalFileStorage, StoredFile
from portfolio.common.errors import ValidationError

router = APIRouter(prefix="/upload", tags=["upload"])
StorageDep = Annotated[LocalFileStorage, Depends(get_file_storage)]
UploaderDep = Annotated[Caller, Depends(require_permission("upload", "create"))]

MAX_MULTIPLE_FILES = 10
MAX_PROJECT_MEDIA = 5


def _store(storage: LocalFileStorage, upload: UploadFile, *, images_only: bool = False) -> StoredFile:
    return storage.save(
        upload.file.read(),
        filename=upload.filename,
        content_type=upload.content_type,
        images_only=images_only,
    )


def _check_count(files: list[UploadFile], limit: int) -> None:
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > limit:
        raise ValidationError(f"Too many files. Maximum is {limit} per request")


@router.post("/single")
def upload_single(
    storage: StorageDep,
    caller: UploaderDep,
    file: UploadFile = File(...),
    entity_type: str | None = Form(default=None, alias="entityType"),
    entity_id: str | None = Form(default=None, alias="entityId"),
    image_type: str = Form(default="gallery", alias="imageType"),
) -> dict[str, object]:
    stored = _store(storage, file)
    association = None
    if entity_type and entity_id:
        association = storage.associate(entity_type, entity_id, stored.url, image_type=image_type)
    message = "File uploaded successfully"
    if association is not None:
        message = f"File uploaded and associated with {entity_type} successfully"
    return build_object_envelope({**stored.as_payload(), "entityUpdate": association}, message=message)


@router.post("/multiple")
def upload_multiple(
    storage: StorageDep,
    caller: UploaderDep,
    files: list[UploadFile] = File(...),
    entity_type: str | None = Form(default=None, alias="entityType"),
    entity_id: str | None = Form(default=None, alias="entityId"),
) -> dict[str, object]:
    _check_count(files, MAX_MULTIPLE_FILES)
    stored = [_store(storage, upload) for upload in files]
    association = None
    if entity_type and entity_id:
        association = storage.associate_many(entity_type, entity_id, [item.url for item in stored])
    return build_object_envelope(
        {"files": [item.as_payload() for item in stored], "entityUpdate": association},
        message=f"{len(stored)} files uploaded successfully",
    )


@router.post("/profile-image")
def upload_profile_image(
    storage: StorageDep,
    caller: UploaderDep,
    profile_image: UploadFile = File(..., alias="profileImage"),
) -> dict[str, object]:
    stored = _store(storage, profile_image, images_only=True)
    return build_object_envelope(
        {"profileImageUrl": stored.url, "publicId": stored.public_id},
        message="Profile image uploaded successfully",
    )


@router.post("/project-media")
def upload_project_media(
    storage: StorageDep,
    caller: UploaderDep,
    media: list[UploadFile] = File(...),
) -> dict[str, object]:
    _check_count(media, MAX_PROJECT_MEDIA)
    stored = [_store(storage, upload) for upload in media]
    return build_object_envelope(
        [
            {
                "url": item.url,
                "publicId": item.public_id,
                "type": "image" if item.resource_type == "image" else "video",
                "originalName": item.original_name,
            }
            for item in stored
        ],
        message=f"{len(stored)} media files uploaded successfully",
    )


@router.delete("/{public_id}")
def delete_upload(
    public_id: str,
    storage: StorageDep,
    caller: Annotated[Caller, Depends(require_permission("upload", "delete"))],
) -> dict[str, object]:
    storage.delete(public_id)
    return build_object_envelope({"ok": True}, message="File deleted successfully")
