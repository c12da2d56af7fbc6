"""Pydantic schemas for image uploads.

- UploadRecord: one persisted upload (name, email, image URL, timestamps)
- UploadResponse: body returned after a successful upload

JSON keys are camelCase (``imageUrl``, ``createdAt``, ``updatedAt``); Python
attributes stay snake_case.
"""
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UploadRecord(BaseModel):
    """Metadata for one accepted image.

    ``email`` is unique across records, but only because the upload endpoint
    looks it up before inserting. The table itself has no constraint.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), description="Record ID")
    name: str = Field(..., min_length=1, description="Uploader name")
    email: str = Field(..., min_length=1, description="Uploader email")
    image_url: str = Field(..., min_length=1, alias="imageUrl", description="Public URL of the stored image")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class UploadResponse(BaseModel):
    """Response after a successful upload."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = "File uploaded and saved!"
    name: str
    email: str
    image_url: str = Field(..., alias="imageUrl")
