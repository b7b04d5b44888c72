"""Adaptador para la API de imágenes de Together AI."""

import logging

from imagegen.providers.base import GenerationParams, ImageProvider, ProviderOutput, images_from_data

logger = logging.getLogger(__name__)

TOGETHER_IMAGES_URL = "https://api.together.xyz/v1/images/generations"

FREE_MODEL = "black-forest-labs/FLUX.1-schnell-Free"
PAID_MODELS = ("black-forest-labs/FLUX.1.1-pro",)

FAST_STEP_RANGE = (1, 4)
FAST_DEFAULT_STEPS = 4
DEFAULT_STEPS = 25


def is_fast_model(model: str) -> bool:
    """Distilled models (FLUX schnell) only work with a handful of steps."""
    return "schnell" in model.lower()


def resolve_steps(model: str, requested) -> int:
    if is_fast_model(model):
        low, high = FAST_STEP_RANGE
        if requested is not None and low <= requested <= high:
            return requested
        return FAST_DEFAULT_STEPS
    return requested if requested is not None else DEFAULT_STEPS


class TogetherAIProvider(ImageProvider):
    display_name = "Together AI"

    def build_payload(self, params: GenerationParams) -> dict:
        model = params.route.model
        payload = {
            "model": model,
            "prompt": params.prompt,
            "n": params.num_outputs,
            "width": params.width,
            "height": params.height,
            "steps": resolve_steps(model, params.steps),
        }
        if params.negative_prompt:
            payload["negative_prompt"] = params.negative_prompt
        if params.seed is not None:
            payload["seed"] = params.seed
        if params.guidance_scale is not None and not is_fast_model(model):
            payload["guidance_scale"] = params.guidance_scale
        return payload

    def create_images(self, params: GenerationParams) -> ProviderOutput:
        payload = self.build_payload(params)
        logger.info(
            "Calling Together AI model %s with steps=%s (requested: %s)",
            payload["model"], payload["steps"], params.steps,
        )

        data = self._post_json(
            TOGETHER_IMAGES_URL,
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        images = images_from_data(self.display_name, data.get("data"))
        return ProviderOutput(
            images=images,
            model=payload["model"],
            steps=payload["steps"],
            guidance_scale=payload.get("guidance_scale"),
            seed=payload.get("seed"),
            negative_prompt=payload.get("negative_prompt"),
        )
