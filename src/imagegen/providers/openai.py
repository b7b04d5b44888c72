"""Adaptador para la API de imágenes de OpenAI."""

import logging

from imagegen.capabilities import check_dimensions
from imagegen.providers.base import GenerationParams, ImageProvider, ProviderOutput, images_from_data

logger = logging.getLogger(__name__)

OPENAI_IMAGES_URL = "https://api.openai.com/v1/images/generations"


class OpenAIProvider(ImageProvider):
    display_name = "OpenAI"

    def __init__(self, *args, quality: str = "medium", **kwargs):
        super().__init__(*args, **kwargs)
        self.quality = quality

    def build_payload(self, params: GenerationParams) -> dict:
        # negative prompt, steps, guidance y seed no existen en esta API
        return {
            "model": params.route.model,
            "prompt": params.prompt,
            "n": params.num_outputs or 1,
            "size": f"{params.width}x{params.height}",
            "quality": self.quality,
        }

    def create_images(self, params: GenerationParams) -> ProviderOutput:
        check_dimensions(params.provider_id, params.width, params.height)

        payload = self.build_payload(params)
        logger.info("OpenAI API params: %s", {**payload, "prompt": "[PROMPT REDACTED]"})

        data = self._post_json(
            OPENAI_IMAGES_URL,
            payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        images = images_from_data(self.display_name, data.get("data"))
        logger.info("OpenAI returned %d image(s)", len(images))
        return ProviderOutput(images=images, model=params.route.model)
