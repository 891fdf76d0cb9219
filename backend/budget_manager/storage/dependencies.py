from typing import Annotated

from fastapi import Depends

from budget_manager.config import settings
from budget_manager.storage.local_store import LocalObjectStore
from budget_manager.storage.store import AbstractObjectStore


def get_object_store() -> AbstractObjectStore:
    return LocalObjectStore(
        root_dir=settings.STATIC_DIR,
        bucket=settings.IMAGE_BUCKET,
        public_base_url=settings.BACKEND_PUBLIC_URL,
    )

ObjectStoreDep = Annotated[AbstractObjectStore, Depends(get_object_store)]
