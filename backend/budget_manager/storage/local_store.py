import logging
import os
import uuid
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from budget_manager.storage.exceptions import ObjectStoreException
from budget_manager.storage.store import AbstractObjectStore

logger = logging.getLogger(__name__)


def _write_file(directory: str, path: str, content: bytes) -> None:
    os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)


class LocalObjectStore(AbstractObjectStore):
    """
    Stockage sur le disque local, servi par le montage /static de l'application.

    Les fichiers sont écrits dans <root_dir>/<bucket>/<aléatoire>.<ext> et l'URL
    retournée est <public_base_url>/static/<bucket>/<nom>.
    """

    def __init__(self, root_dir: str, bucket: str, public_base_url: str):
        self.root_dir = root_dir
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    async def upload(self, filename: str, content: bytes, content_type: Optional[str] = None) -> str:
        _, ext = os.path.splitext(filename)
        object_name = f"{uuid.uuid4().hex}{ext.lower()}"
        bucket_dir = os.path.join(self.root_dir, self.bucket)
        path = os.path.join(bucket_dir, object_name)
        try:
            await run_in_threadpool(_write_file, bucket_dir, path, content)
        except OSError as e:
            logger.error(f"[ObjectStore] Échec écriture {path}: {e}", exc_info=True)
            raise ObjectStoreException(f"impossible d'enregistrer '{filename}'", original_exception=e)

        logger.info(f"[ObjectStore] {filename} enregistré sous {path} ({len(content)} bytes, {content_type or 'type inconnu'}).")
        return f"{self.public_base_url}/static/{self.bucket}/{object_name}"
