"""Per-application upload context.

Built once in the application lifespan and kept on ``app.state.uploads``.
Handlers receive it through ``Depends(get_upload_context)``; tests can swap
it with ``app.dependency_overrides``.
"""
from dataclasses import dataclass

from fastapi import Request

from ..config import AppSettings
from .service import UploadRecordStore
from .storage import ImageStorage


@dataclass
class UploadContext:
    settings: AppSettings
    storage: ImageStorage
    store: UploadRecordStore

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "UploadContext":
        """Open the record store and prepare image storage.

        Raises RecordStoreError if the database cannot be opened.
        """
        storage = ImageStorage(
            upload_dir=settings.storage.upload_dir,
            max_file_size_bytes=settings.storage.max_file_size_bytes,
        )
        store = UploadRecordStore(settings.database.url)
        return cls(settings=settings, storage=storage, store=store)

    def close(self) -> None:
        self.store.close()


def get_upload_context(request: Request) -> UploadContext:
    return request.app.state.uploads
