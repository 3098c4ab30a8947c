# This file implements local media storage for uploads and their entity associations.
# It exists so MIME and size checks, file naming, and URL building are shared by every upload route.
# Files are written under the configured upload directory and served from the configured base URL.

from __future__ import annotations

import logging
import mimetypes
import re
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from portfolio.api.api_config import ApiConfig
from portfolio.api.db_access import DocumentStore
from portfolio.catalog.query_builder import validate_document_id
from portfolio.common.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_TYPES = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/svg+xml",
        "image/webp",
        "video/mp4",
        "video/avi",
        "video/mov",
        "video/wmv",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)
INVALID_TYPE = "Invalid file type. Only images, videos, and documents are allowed."
# allowed types the mimetypes registry does not map to an extension
EXTENSIONS = {"image/jpg": ".jpg", "video/avi": ".avi", "video/mov": ".mov", "video/wmv": ".wmv"}

_PUBLIC_ID_RE = re.compile(r"^[0-9a-f]{32}$")

# entity type -> (collection, single-file field by image type, gallery field)
SINGLE_TARGETS: dict[str, tuple[str, dict[str, str], str | None]] = {
    "project": ("projects", {"thumbnail": "thumbnail"}, "images"),
    "team-member": ("team_members", {}, "profileImage"),
    "service": ("services", {"icon": "icon"}, "images"),
    "client": ("clients", {}, "logo"),
    "blog": ("blogs", {"thumbnail": "thumbnail"}, "images"),
}
GALLERY_FIELDS = {"images"}
MULTIPLE_TARGETS = {"project": "projects", "service": "services", "blog": "blogs"}


@dataclass(frozen=True)
class StoredFile:
    url: str
    public_id: str
    original_name: str | None
    size: int
    format: str
    resource_type: str

    def as_payload(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "publicId": self.public_id,
            "originalName": self.original_name,
            "size": self.size,
            "format": self.format,
            "resourceType": self.resource_type,
        }


def _resource_type(content_type: str) -> str:
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("video/"):
        return "video"
    return "raw"


def file_extension(content_type: str) -> str:
    """Stored suffix comes from the validated type, never the client filename."""

    return EXTENSIONS.get(content_type) or mimetypes.guess_extension(content_type) or ""


def _add_to_set(values: Any, urls: Sequence[str]) -> list[str]:
    current = [value for value in values or [] if isinstance(value, str)]
    for url in urls:
        if url not in current:
            current.append(url)
    return current


class LocalFileStorage:
    def __init__(self, *, config: ApiConfig, store: DocumentStore) -> None:
        self.config = config
        self.store = store
        self.root = Path(config.upload_path)

    def validate(self, content_type: str | None, size: int, *, images_only: bool = False) -> str:
        kind = (content_type or "").lower()
        if kind not in ALLOWED_TYPES:
            raise ValidationError(INVALID_TYPE)
        if images_only and not kind.startswith("image/"):
            raise ValidationError("Only image files are allowed for profile images")
        if size > self.config.max_file_size:
            raise ValidationError(
                f"File too large. Maximum size is {self.config.max_file_size} bytes",
                details={"maxFileSize": self.config.max_file_size, "size": size},
            )
        return kind

    def save(
        self,
        data: bytes,
        *,
        filename: str | None,
        content_type: str | None,
        images_only: bool = False,
    ) -> StoredFile:
        kind = self.validate(content_type, len(data), images_only=images_only)
        suffix = file_extension(kind)
        public_id = uuid.uuid4().hex
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / f"{public_id}{suffix}").write_bytes(data)
        logger.info("Stored upload %s (%s, %s bytes)", public_id, kind, len(data))
        return StoredFile(
            url=f"{self.config.upload_base_url.rstrip('/')}/{public_id}{suffix}",
            public_id=public_id,
            original_name=filename,
            size=len(data),
            format=suffix.lstrip(".") or kind.split("/")[-1],
            resource_type=_resource_type(kind),
        )

    def delete(self, public_id: str) -> None:
        if not _PUBLIC_ID_RE.match(public_id):
            raise ValidationError(f"Invalid publicId: {public_id}")
        matches = [path for path in self.root.glob(f"{public_id}*") if path.stem == public_id]
        if not matches:
            raise NotFoundError("File not found or already deleted")
        for path in matches:
            path.unlink()
        logger.info("Deleted upload %s", public_id)

    # Entity association

    def _update_entity(self, entity_type: str, collection: str, entity_id: str, field: str, urls: Sequence[str]) -> None:
        def _apply(body: dict[str, Any]) -> dict[str, Any]:
            if field in GALLERY_FIELDS:
                body[field] = _add_to_set(body.get(field), urls)
            else:
                body[field] = urls[-1]
            return body

        if self.store.modify(collection, validate_document_id(entity_id), _apply) is None:
            raise NotFoundError(f"{entity_type} with ID {entity_id} not found")

    def associate(self, entity_type: str, entity_id: str, url: str, *, image_type: str = "gallery") -> dict[str, Any]:
        key = entity_type.lower()
        if key not in SINGLE_TARGETS:
            raise ValidationError(f"Unsupported entity type: {entity_type}")
        collection, by_image_type, default_field = SINGLE_TARGETS[key]
        field = by_image_type.get(image_type, default_field)
        self._update_entity(entity_type, collection, entity_id, field, [url])
        return {"type": entity_type, "id": entity_id, "imageType": image_type, "field": field, "updated": True}

    def associate_many(self, entity_type: str, entity_id: str, urls: Sequence[str]) -> dict[str, Any]:
        key = entity_type.lower()
        if key not in MULTIPLE_TARGETS:
            raise ValidationError(f"Multiple upload not supported for entity type: {entity_type}")
        self._update_entity(entity_type, MULTIPLE_TARGETS[key], entity_id, "images", urls)
        return {"type": entity_type, "id": entity_id, "field": "images", "updated": True}
