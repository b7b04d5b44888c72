"""
Normalización de los parámetros de generación

Convierte la petición del cliente en un GenerationParams listo para el
adaptador. Todas las comprobaciones se hacen antes de cualquier llamada de red.

Responsabilidades:
- Validar los campos obligatorios
- Elegir la clave de API (cabecera del usuario o variable de entorno)
- Aplicar la tabla de capacidades (dimensiones, steps, guidance, nº de imágenes)
- Añadir al prompt el sufijo del estilo elegido
"""

import logging
from typing import Mapping

from imagegen.capabilities import apply_style, check_dimensions, get_capabilities
from imagegen.config import Settings
from imagegen.errors import InvalidRequestError, MissingCredentialError
from imagegen.providers.base import GenerationParams, ProviderFamily, ProviderRoute
from imagegen.providers.registry import resolve_route
from imagegen.providers.together import FREE_MODEL
from imagegen.schemas import GenerateRequest

logger = logging.getLogger(__name__)

OPENAI_KEY_HEADER = "x-openai-api-key"
TOGETHER_KEY_HEADER = "x-togetherai-api-key"


def select_api_key(route: ProviderRoute, headers: Mapping[str, str], settings: Settings) -> str:
    """Pick the credential for a route or raise MissingCredentialError."""
    if route.family is ProviderFamily.REPLICATE:
        # Replicate solo usa la clave del servidor
        if not settings.REPLICATE_API_TOKEN:
            raise MissingCredentialError(
                "Replicate API key not configured on the server. "
                "Please set REPLICATE_API_TOKEN environment variable.",
                user_must_supply=False,
            )
        return settings.REPLICATE_API_TOKEN

    if route.family is ProviderFamily.OPENAI:
        key = headers.get(OPENAI_KEY_HEADER) or settings.OPENAI_API_KEY
        if not key:
            raise MissingCredentialError(
                "OpenAI API key not provided. Please add your OpenAI API key in Settings.",
                user_must_supply=True,
            )
        return key

    user_key = headers.get(TOGETHER_KEY_HEADER)
    if route.model == FREE_MODEL:
        key = settings.TOGETHER_API_KEY or user_key
        if not key:
            raise MissingCredentialError(
                "Please provide a TogetherAI API key in Settings. "
                "You can get a free API key at together.ai",
                user_must_supply=True,
            )
        return key

    if not user_key:
        raise MissingCredentialError(
            "TogetherAI API key not provided. Please add your TogetherAI API key in Settings.",
            user_must_supply=True,
        )
    return user_key


def normalize_request(req: GenerateRequest, headers: Mapping[str, str], settings: Settings) -> GenerationParams:
    if not (req.prompt and req.prompt.strip()) or not req.provider or not req.width or not req.height:
        raise InvalidRequestError("Missing required generation parameters.")

    route = resolve_route(req.provider, settings)
    api_key = select_api_key(route, headers, settings)

    caps = get_capabilities(req.provider)
    check_dimensions(req.provider, req.width, req.height)

    steps = req.steps
    if steps is not None:
        steps = caps.supported_steps.clamp(steps) if caps.supported_steps else None
        if steps != req.steps:
            logger.info("Steps adjusted from %s to %s for %s", req.steps, steps, req.provider)

    num_outputs = min(req.num_outputs or 1, caps.max_image_count)

    prompt = apply_style(req.prompt, req.style)
    if prompt != req.prompt:
        logger.info("Applied style '%s'", req.style)

    return GenerationParams(
        prompt=prompt,
        width=req.width,
        height=req.height,
        provider_id=req.provider,
        route=route,
        api_key=api_key,
        num_outputs=num_outputs,
        negative_prompt=req.negative_prompt if caps.supports_negative_prompt else None,
        style=req.style,
        seed=req.seed,
        steps=steps,
        guidance_scale=req.guidance_scale if caps.supports_guidance_scale else None,
    )
