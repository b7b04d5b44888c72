"""
Selección del adaptador a partir de la clave de proveedor

La clave que envía el cliente se traduce a una ruta (familia + modelo) y la
familia se busca en una tabla de adaptadores.
"""

import requests

from imagegen.capabilities import REPLICATE_PREFIX
from imagegen.config import Settings
from imagegen.errors import InvalidRequestError
from imagegen.providers.base import GenerationParams, ImageProvider, ProviderFamily, ProviderRoute
from imagegen.providers.openai import OpenAIProvider
from imagegen.providers.replicate import ReplicateProvider
from imagegen.providers.together import FREE_MODEL, PAID_MODELS, TogetherAIProvider

PROVIDER_CLASSES = {
    ProviderFamily.OPENAI: OpenAIProvider,
    ProviderFamily.TOGETHER: TogetherAIProvider,
    ProviderFamily.REPLICATE: ReplicateProvider,
}


def resolve_route(provider_id: str, settings: Settings) -> ProviderRoute:
    if provider_id == "openai":
        return ProviderRoute(ProviderFamily.OPENAI, settings.OPENAI_IMAGE_MODEL, "OpenAI")
    if provider_id == "togetherai":
        return ProviderRoute(ProviderFamily.TOGETHER, FREE_MODEL, "Together AI")
    if provider_id in PAID_MODELS:
        return ProviderRoute(ProviderFamily.TOGETHER, provider_id, "Together AI")
    if "/" in provider_id:
        model = provider_id[len(REPLICATE_PREFIX):] if provider_id.startswith(REPLICATE_PREFIX) else provider_id
        if "/" not in model:
            raise InvalidRequestError(f"Invalid Replicate model id '{provider_id}'.")
        return ProviderRoute(ProviderFamily.REPLICATE, model, "Replicate")
    raise InvalidRequestError(f"Provider '{provider_id}' not supported yet.")


def build_provider(params: GenerationParams, session: requests.Session, pipeline, settings: Settings) -> ImageProvider:
    cls = PROVIDER_CLASSES[params.route.family]
    kwargs = {}
    if cls is OpenAIProvider:
        kwargs["quality"] = settings.OPENAI_IMAGE_QUALITY
    return cls(params.api_key, session, pipeline, timeout=settings.HTTP_TIMEOUT, **kwargs)
