"""
Servicios de procesamiento de imágenes

Post-procesado común a todos los proveedores una vez generada la imagen.

Características:
- Descarga de la imagen (URL) o decodificación (base64 en línea)
- Conversión a data-URI para la vista previa del cliente
- Subida de los bytes originales al Storage con un nombre único
- Guardado de los metadatos en la tabla de imágenes

Un fallo en la descarga o en la subida hace fallar la petición. Un fallo al
insertar los metadatos solo se registra: la imagen se devuelve igualmente.
"""

import logging
from typing import List, Optional, Tuple

import requests

from imagegen.config import Settings
from imagegen.errors import ImageGenError, PostProcessingError
from imagegen.providers.base import GenerationParams, PersistenceOutcome, ProviderImage, ProviderOutput
from imagegen.storage.supabase import ImageRepository, SupabaseStorage
from imagegen.utils import (decode_b64_image, normalize_content_type, sniff_content_type,
                            to_data_uri, unique_image_path)

logger = logging.getLogger(__name__)


def fetch_image_bytes(session: requests.Session, image: ProviderImage, timeout=None) -> Tuple[bytes, str]:
    """Return raw bytes and content type for a provider image."""
    if image.b64_data:
        try:
            img_bytes = decode_b64_image(image.b64_data)
        except ValueError as e:
            raise PostProcessingError(f"Failed to process images: {e}") from e
        return img_bytes, sniff_content_type(img_bytes)

    if not image.url:
        raise PostProcessingError("Failed to process images: No valid image URL returned from API")

    try:
        resp = session.get(image.url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise PostProcessingError(f"Failed to fetch image from URL: {e}") from e
    if resp.status_code != 200:
        raise PostProcessingError(f"Failed to fetch image from URL: {resp.status_code} {resp.reason}")
    return resp.content, normalize_content_type(resp.headers.get("content-type"))


class ImagePipeline:
    def __init__(
        self,
        session: requests.Session,
        storage: SupabaseStorage,
        images_repo: ImageRepository,
        settings: Settings,
    ):
        self.session = session
        self.storage = storage
        self.images_repo = images_repo
        self.prefix = settings.STORAGE_PREFIX
        self.cleanup_orphans = settings.CLEANUP_ORPHANED_UPLOADS
        self.timeout = settings.HTTP_TIMEOUT

    def _extra_previews(self, images: List[ProviderImage]) -> List[str]:
        previews = []
        for image in images:
            try:
                img_bytes, content_type = fetch_image_bytes(self.session, image, self.timeout)
            except PostProcessingError as e:
                logger.warning("Skipping extra image: %s", e.message)
                continue
            previews.append(to_data_uri(img_bytes, content_type))
        return previews

    def build_row(self, provider: str, params: GenerationParams, output: ProviderOutput, path: str) -> dict:
        return {
            "prompt_text": params.prompt,
            "negative_prompt": output.negative_prompt,
            "image_url": path,
            "provider": provider,
            "model": output.model,
            "width": params.width,
            "height": params.height,
            "seed": output.seed,
            "steps": output.steps,
            "guidance_scale": output.guidance_scale,
            "style": params.style,
            "status": "completed",
        }

    def persist(self, row: dict, path: str) -> PersistenceOutcome:
        try:
            record = self.images_repo.insert(row)
        except ImageGenError as e:
            logger.error("Supabase DB insert error (%s): %s", row["provider"], e.message)
            outcome = PersistenceOutcome(stored=False, storage_path=path, error=e.message, orphaned_path=path)
            if self.cleanup_orphans:
                self._remove_orphan(outcome)
            else:
                logger.warning("Storage object %s is not referenced by any image row", path)
            return outcome

        record_id = record.get("id") if record else None
        logger.info("Saved image metadata to Supabase DB, ID: %s", record_id)
        return PersistenceOutcome(stored=True, storage_path=path, record_id=record_id)

    def _remove_orphan(self, outcome: PersistenceOutcome) -> None:
        try:
            self.storage.remove([outcome.orphaned_path])
        except ImageGenError as e:
            logger.error("Could not remove orphaned upload %s: %s", outcome.orphaned_path, e.message)
            return
        logger.info("Removed orphaned upload %s", outcome.orphaned_path)
        outcome.orphaned_path = None

    def process(
        self, provider: str, params: GenerationParams, output: ProviderOutput
    ) -> Tuple[List[str], Optional[PersistenceOutcome]]:
        first, extra = output.images[0], output.images[1:]
        img_bytes, content_type = fetch_image_bytes(self.session, first, self.timeout)
        previews = [to_data_uri(img_bytes, content_type)]
        previews.extend(self._extra_previews(extra))

        path = unique_image_path(self.prefix, provider, output.model, content_type)
        logger.info("Uploading to Supabase Storage: %s/%s", self.storage.bucket, path)
        try:
            path = self.storage.upload(path, img_bytes, content_type)
        except ImageGenError as e:
            raise PostProcessingError(f"Failed to process images: {e.message}") from e

        row = self.build_row(provider, params, output, path)
        return previews, self.persist(row, path)
