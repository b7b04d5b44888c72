"""
Tipos comunes y clase base de los adaptadores de proveedores

Cada adaptador traduce los parámetros normalizados al formato de su API,
realiza la llamada y devuelve las referencias a las imágenes generadas.
El post-procesado (descarga, subida al storage y guardado de metadatos)
es común a todos y lo realiza el pipeline inyectado.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

import requests

from imagegen.errors import ImageGenError, UnexpectedResponseError, UpstreamProviderError

if TYPE_CHECKING:
    from imagegen.services.images import ImagePipeline

logger = logging.getLogger(__name__)


class ProviderFamily(str, Enum):
    OPENAI = "openai"
    TOGETHER = "together"
    REPLICATE = "replicate"


@dataclass(frozen=True)
class ProviderRoute:
    family: ProviderFamily
    model: str
    display_name: str


@dataclass(frozen=True)
class GenerationParams:
    """Normalized request, already validated against the capability table."""

    prompt: str
    width: int
    height: int
    provider_id: str
    route: ProviderRoute
    api_key: str
    num_outputs: int = 1
    negative_prompt: Optional[str] = None
    style: Optional[str] = None
    seed: Optional[int] = None
    steps: Optional[int] = None
    guidance_scale: Optional[float] = None


@dataclass(frozen=True)
class ProviderImage:
    url: Optional[str] = None
    b64_data: Optional[str] = None


@dataclass
class ProviderOutput:
    """Images returned by a provider plus the parameters actually sent."""

    images: List[ProviderImage]
    model: str
    steps: Optional[int] = None
    guidance_scale: Optional[float] = None
    seed: Optional[int] = None
    negative_prompt: Optional[str] = None


@dataclass
class PersistenceOutcome:
    """Result of the best-effort metadata insert.

    A failed insert does not fail the generation; ``orphaned_path`` points to
    the uploaded blob that no row references.
    """

    stored: bool
    storage_path: Optional[str] = None
    record_id: Optional[int] = None
    error: Optional[str] = None
    orphaned_path: Optional[str] = None


@dataclass
class GenerationResult:
    success: bool
    images: List[str] = field(default_factory=list)
    error: Optional[str] = None
    status_code: int = 200
    provider: Optional[str] = None
    persistence: Optional[PersistenceOutcome] = None

    @classmethod
    def failure(cls, error: ImageGenError, provider: str = None) -> "GenerationResult":
        return cls(
            success=False,
            error=error.message,
            status_code=error.status_code,
            provider=provider,
        )


class ImageProvider:
    """Base adapter. Subclasses implement ``create_images``."""

    display_name: str = ""

    def __init__(self, api_key: str, session: requests.Session, pipeline: "ImagePipeline", timeout: float = None):
        self.api_key = api_key
        self.session = session
        self.pipeline = pipeline
        self.timeout = timeout

    def create_images(self, params: GenerationParams) -> ProviderOutput:
        raise NotImplementedError

    def generate(self, params: GenerationParams) -> GenerationResult:
        try:
            output = self.create_images(params)
            images, persistence = self.pipeline.process(self.display_name, params, output)
        except ImageGenError as e:
            logger.error("%s generation failed: %s", self.display_name, e.message)
            return GenerationResult.failure(e, provider=self.display_name)

        return GenerationResult(
            success=True,
            images=images,
            provider=self.display_name,
            persistence=persistence,
        )

    def _post_json(self, url: str, payload: dict, headers: dict) -> dict:
        try:
            resp = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise UpstreamProviderError(self.display_name, str(e)) from e

        if not 200 <= resp.status_code < 300:
            raise UpstreamProviderError(self.display_name, upstream_error_text(resp))
        try:
            return resp.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                self.display_name, f"Invalid JSON response: {resp.text[:200]}"
            ) from e


def upstream_error_text(resp) -> str:
    """Extract the most useful error message from a provider response."""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("detail"):
            return str(body["detail"])
        if body.get("message"):
            return str(body["message"])
    return f"{resp.status_code} - {resp.text}"


def images_from_data(provider: str, data) -> List[ProviderImage]:
    """Parse the ``data`` array shared by the OpenAI and Together AI APIs."""
    if not isinstance(data, list) or not data:
        raise UnexpectedResponseError(provider, "No valid images returned from API.")

    images = []
    for item in data:
        if not isinstance(item, dict):
            continue
        if item.get("url"):
            images.append(ProviderImage(url=item["url"]))
        elif item.get("b64_json"):
            images.append(ProviderImage(b64_data=item["b64_json"]))
    if not images:
        raise UnexpectedResponseError(provider, "No valid images returned from API.")
    return images
