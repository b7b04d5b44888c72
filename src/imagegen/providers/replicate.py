"""
Adaptador para Replicate

Cada familia de modelos usa nombres de parámetros distintos. La familia se
elige por prefijo del identificador del modelo; los modelos desconocidos usan
la variante GENERIC con los nombres más habituales.

La predicción se lanza en modo síncrono (cabecera ``Prefer: wait``), sin
bucle de sondeo: la respuesta debe traer ya la lista de URLs de salida.
"""

import logging
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from imagegen.errors import UnexpectedResponseError, UpstreamProviderError
from imagegen.providers.base import GenerationParams, ImageProvider, ProviderImage, ProviderOutput

logger = logging.getLogger(__name__)

REPLICATE_API_URL = "https://api.replicate.com/v1"
WAIT_SECONDS = 60

ASPECT_RATIOS = (
    ("16:9", 16 / 9),
    ("9:16", 9 / 16),
    ("3:2", 3 / 2),
    ("2:3", 2 / 3),
)
ASPECT_RATIO_TOLERANCE = 0.1
DEFAULT_ASPECT_RATIO = "1:1"


class ReplicateFamily(str, Enum):
    SDXL_LIGHTNING = "bytedance/sdxl-lightning-4step"
    KANDINSKY = "ai-forever/kandinsky-2.2"
    SDXL = "stability-ai/sdxl"
    STABLE_DIFFUSION = "stability-ai/stable-diffusion"
    IMAGEN = "google/imagen-3"
    GENERIC = ""


def family_for(model_id: str) -> ReplicateFamily:
    for family in ReplicateFamily:
        if family is not ReplicateFamily.GENERIC and model_id.startswith(family.value):
            return family
    return ReplicateFamily.GENERIC


def nearest_aspect_ratio(width: int, height: int) -> str:
    ratio = width / height
    label, value = min(ASPECT_RATIOS, key=lambda item: abs(ratio - item[1]))
    if abs(ratio - value) < ASPECT_RATIO_TOLERANCE:
        return label
    return DEFAULT_ASPECT_RATIO


def _size(params: GenerationParams, data: dict) -> None:
    data["width"] = params.width
    data["height"] = params.height


def _sampling(params: GenerationParams, data: dict) -> None:
    if params.steps is not None:
        data["num_inference_steps"] = params.steps
    if params.guidance_scale is not None:
        data["guidance_scale"] = params.guidance_scale


def _map_sdxl_lightning(params: GenerationParams, data: dict) -> None:
    _size(params, data)
    data["num_inference_steps"] = 4
    if params.guidance_scale is not None:
        data["guidance_scale"] = params.guidance_scale


def _map_standard(params: GenerationParams, data: dict) -> None:
    _size(params, data)
    _sampling(params, data)


def _map_sdxl(params: GenerationParams, data: dict) -> None:
    _map_standard(params, data)
    data["refine"] = "no_refiner"
    data["apply_watermark"] = False


def _map_imagen(params: GenerationParams, data: dict) -> None:
    # Imagen no admite width/height, steps ni guidance
    data["aspect_ratio"] = nearest_aspect_ratio(params.width, params.height)


def _map_generic(params: GenerationParams, data: dict) -> None:
    logger.warning(
        "Unknown Replicate model ID: %s. Using default parameter names.",
        params.route.model,
    )
    _map_standard(params, data)


FAMILY_MAPPERS: Dict[ReplicateFamily, Callable[[GenerationParams, dict], None]] = {
    ReplicateFamily.SDXL_LIGHTNING: _map_sdxl_lightning,
    ReplicateFamily.KANDINSKY: _map_standard,
    ReplicateFamily.SDXL: _map_sdxl,
    ReplicateFamily.STABLE_DIFFUSION: _map_standard,
    ReplicateFamily.IMAGEN: _map_imagen,
    ReplicateFamily.GENERIC: _map_generic,
}


def build_input(params: GenerationParams) -> dict:
    data = {"prompt": params.prompt}
    if params.negative_prompt:
        data["negative_prompt"] = params.negative_prompt
    if params.seed is not None:
        data["seed"] = params.seed
    if params.num_outputs is not None:
        data["num_outputs"] = params.num_outputs

    FAMILY_MAPPERS[family_for(params.route.model)](params, data)
    return data


def split_model_id(model_id: str) -> Tuple[str, Optional[str]]:
    """``owner/name:version`` -> (``owner/name``, ``version``)."""
    if ":" in model_id:
        name, version = model_id.split(":", 1)
        return name, version or None
    return model_id, None


class ReplicateProvider(ImageProvider):
    display_name = "Replicate"

    def prediction_request(self, model_id: str, data: dict) -> Tuple[str, dict]:
        name, version = split_model_id(model_id)
        if version:
            return f"{REPLICATE_API_URL}/predictions", {"version": version, "input": data}
        return f"{REPLICATE_API_URL}/models/{name}/predictions", {"input": data}

    def run(self, model_id: str, data: dict):
        url, body = self.prediction_request(model_id, data)
        prediction = self._post_json(
            url,
            body,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Prefer": f"wait={WAIT_SECONDS}",
            },
        )

        status = prediction.get("status")
        if status in ("failed", "canceled"):
            raise UpstreamProviderError(
                self.display_name, str(prediction.get("error") or f"Prediction {status}")
            )
        return prediction.get("output")

    def create_images(self, params: GenerationParams) -> ProviderOutput:
        model_id = params.route.model
        data = build_input(params)
        logger.info(
            "Replicate API input: %s",
            {"model": model_id, "input": {**data, "prompt": "[PROMPT REDACTED]"}},
        )

        output = self.run(model_id, data)
        logger.info("Replicate run finished. Output: %s", output)

        if not (isinstance(output, list) and output and all(isinstance(o, str) for o in output)):
            raise UnexpectedResponseError(
                self.display_name,
                "Received unexpected output format or no images from Replicate API.",
            )

        return ProviderOutput(
            images=[ProviderImage(url=url) for url in output],
            model=model_id,
            steps=data.get("num_inference_steps"),
            guidance_scale=data.get("guidance_scale"),
            seed=data.get("seed"),
            negative_prompt=data.get("negative_prompt"),
        )
