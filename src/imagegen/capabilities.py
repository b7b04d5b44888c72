"""
Tabla de capacidades de los proveedores

Describe qué parámetros admite cada proveedor/modelo y en qué rangos. La misma
tabla la usan los adaptadores para validar y la interfaz para limitar los
controles del formulario, por lo que nunca deben divergir.

Contenido:
- Capacidades por clave de proveedor (inmutables, cargadas al importar)
- Validación de dimensiones
- Estilos disponibles y el sufijo que añaden al prompt
"""

from dataclasses import asdict, dataclass, replace
from types import MappingProxyType
from typing import Optional, Tuple

from imagegen.errors import InvalidDimensionsError

REPLICATE_PREFIX = "replicate/"

SDXL_LIGHTNING_VERSION = (
    "bytedance/sdxl-lightning-4step:"
    "6f7a773af6fc3e8de9d5a3c00be77c17308914bf67772726aff83496ba1e3bbe"
)
SDXL_VERSION = (
    "stability-ai/sdxl:"
    "7762fd07cf82c948538e41f63f77d685e02b063e37e496e96eefd46c929f9bdc"
)

# Tamaños que se ofrecen cuando un modelo no declara los suyos
GENERIC_DIMENSIONS = ("1024x1024", "1024x1792", "1792x1024")


@dataclass(frozen=True)
class StepRange:
    min: int
    max: int
    default: int

    def clamp(self, steps: int) -> int:
        return max(self.min, min(self.max, steps))

    def contains(self, steps: int) -> bool:
        return self.min <= steps <= self.max


@dataclass(frozen=True)
class ModelCapabilities:
    name: str
    supports_negative_prompt: bool
    supports_guidance_scale: bool
    supported_steps: Optional[StepRange]
    supported_dimensions: Optional[Tuple[str, ...]]
    max_image_count: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["supported_dimensions"] = (
            list(self.supported_dimensions) if self.supported_dimensions else None
        )
        return data


DEFAULT_CAPABILITIES = ModelCapabilities(
    name="Generic model",
    supports_negative_prompt=True,
    supports_guidance_scale=True,
    supported_steps=StepRange(10, 50, 25),
    supported_dimensions=None,
    max_image_count=4,
)

_OPENAI = ModelCapabilities(
    name="OpenAI (GPT Image)",
    supports_negative_prompt=False,
    supports_guidance_scale=False,
    supported_steps=None,
    supported_dimensions=("1024x1024", "1792x1024", "1024x1792"),
    max_image_count=1,
)

_FLUX_SCHNELL = ModelCapabilities(
    name="Together AI (Flux Schnell - Free)",
    supports_negative_prompt=True,
    supports_guidance_scale=False,
    supported_steps=StepRange(1, 4, 4),
    supported_dimensions=("1024x1024", "1024x1792", "1792x1024"),
    max_image_count=1,
)

_SDXL = ModelCapabilities(
    name="Replicate (SDXL)",
    supports_negative_prompt=True,
    supports_guidance_scale=True,
    supported_steps=StepRange(1, 50, 20),
    supported_dimensions=(
        "1024x1024", "1152x896", "896x1152", "1216x832", "832x1216",
        "1344x768", "768x1344", "1536x640", "640x1536",
    ),
    max_image_count=4,
)

_SDXL_LIGHTNING = replace(
    _SDXL,
    name="Replicate (SDXL Lightning)",
    supported_steps=StepRange(1, 8, 4),
    supports_guidance_scale=False,
)

CAPABILITIES = MappingProxyType({
    "togetherai": _FLUX_SCHNELL,
    "openai": _OPENAI,
    REPLICATE_PREFIX + SDXL_VERSION: _SDXL,
    REPLICATE_PREFIX + SDXL_LIGHTNING_VERSION: _SDXL_LIGHTNING,
})


def get_capabilities(provider_id: str) -> ModelCapabilities:
    """Return the capability entry for a provider key, or the default one."""
    if provider_id in CAPABILITIES:
        return CAPABILITIES[provider_id]
    prefixed = REPLICATE_PREFIX + provider_id
    if prefixed in CAPABILITIES:
        return CAPABILITIES[prefixed]
    return DEFAULT_CAPABILITIES


def list_capabilities() -> dict:
    return {key: caps.to_dict() for key, caps in CAPABILITIES.items()}


def _human_join(items) -> str:
    items = list(items)
    if len(items) <= 1:
        return "".join(items)
    return f"{', '.join(items[:-1])}, or {items[-1]}"


def check_dimensions(provider_id: str, width: int, height: int) -> None:
    caps = get_capabilities(provider_id)
    # Sin lista propia se aplica el conjunto genérico que ve la UI
    allowed = caps.supported_dimensions or GENERIC_DIMENSIONS
    size = f"{width}x{height}"
    if size not in allowed:
        raise InvalidDimensionsError(
            f"Invalid dimensions {size} for {caps.name}. "
            f"Use {_human_join(allowed)}."
        )


# --- Estilos ---

STYLE_KEYWORDS = MappingProxyType({
    "cinematic": ", cinematic style",
    "photographic": ", photographic style",
    "anime": ", anime style",
    "digital-art": ", digital art style",
    "digitalArt": ", digital art style",
    "cyberpunk": ", cyberpunk style",
    "sketch": ", sketch style",
    "cartoon": ", cartoon style",
    "3d-cartoon": ", Pixar-like 3D cartoon style",
    "3dCartoon": ", Pixar-like 3D cartoon style",
    "ghibli-esque": ", in the style of Studio Ghibli",
    "ghibliEsque": ", in the style of Studio Ghibli",
})

AVAILABLE_STYLES = (
    {"id": "cinematic", "name": "Cinematic"},
    {"id": "photographic", "name": "Photographic"},
    {"id": "anime", "name": "Anime"},
    {"id": "digital-art", "name": "Digital Art"},
    {"id": "cyberpunk", "name": "Cyberpunk"},
    {"id": "sketch", "name": "Sketch"},
    {"id": "cartoon", "name": "Cartoon"},
    {"id": "3d-cartoon", "name": "3D Cartoon"},
    {"id": "ghibli-esque", "name": "Ghibli-esque"},
)


def apply_style(prompt: str, style: Optional[str]) -> str:
    suffix = STYLE_KEYWORDS.get(style) if style else None
    return prompt + suffix if suffix else prompt
