"""
Servicios de generación de imágenes

Capa intermedia entre el endpoint y los adaptadores de proveedores.

Responsabilidades:
- Normalizar la petición antes de cualquier llamada de red
- Elegir el adaptador según la clave de proveedor
- Devolver un GenerationResult uniforme
"""

import logging
from typing import Mapping

import requests

from imagegen.config import Settings
from imagegen.providers.base import GenerationResult
from imagegen.providers.registry import build_provider
from imagegen.schemas import GenerateRequest
from imagegen.services.images import ImagePipeline
from imagegen.services.params import normalize_request

logger = logging.getLogger(__name__)


def generate_images(
    req: GenerateRequest,
    headers: Mapping[str, str],
    session: requests.Session,
    pipeline_factory,
    settings: Settings,
) -> GenerationResult:
    """Run one generation end to end.

    ``pipeline_factory`` is only called once the request is valid, so storage
    credentials are not needed to reject bad input.
    """
    params = normalize_request(req, headers, settings)
    logger.info("Generating with %s (model %s)", params.route.display_name, params.route.model)

    pipeline: ImagePipeline = pipeline_factory()
    provider = build_provider(params, session, pipeline, settings)
    return provider.generate(params)
