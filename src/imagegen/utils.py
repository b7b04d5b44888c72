import base64
import binascii
import re
import uuid
from io import BytesIO

from PIL import Image, UnidentifiedImageError

DEFAULT_CONTENT_TYPE = "image/png"


def is_http_url(data):
    """
    Check if the provided data is a valid URL
    """
    return data.startswith(("http://", "https://"))


def remove_b64_header(data):
    """
    Remove the base64 header from a data URL.
    """
    if data.startswith("data:image/"):
        img_b64 = data.split(",", 1)[-1]
        img_b64 = "".join(img_b64.split())
        padding = len(img_b64) % 4
        if padding:
            img_b64 += "=" * (4 - padding)
        return img_b64
    return data


def decode_b64_image(data: str) -> bytes:
    try:
        return base64.b64decode(remove_b64_header(data), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 image data: {e}") from e


def to_data_uri(img_bytes: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(img_bytes).decode('ascii')}"


def normalize_content_type(header_value) -> str:
    """Strip parameters (``; charset=...``) and fall back to PNG."""
    if not header_value:
        return DEFAULT_CONTENT_TYPE
    content_type = header_value.split(";", 1)[0].strip().lower()
    return content_type or DEFAULT_CONTENT_TYPE


def sniff_content_type(img_bytes: bytes) -> str:
    """Detect the MIME type of raw image bytes with Pillow."""
    try:
        with Image.open(BytesIO(img_bytes)) as img:
            return Image.MIME.get(img.format, DEFAULT_CONTENT_TYPE)
    except (UnidentifiedImageError, OSError):
        return DEFAULT_CONTENT_TYPE


def extension_for(content_type: str) -> str:
    subtype = content_type.split("/", 1)[-1] if "/" in content_type else ""
    if subtype == "jpeg":
        return "jpg"
    subtype = subtype.split("+", 1)[0]
    return subtype or "png"


def slugify(value: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", value)


def unique_image_path(prefix: str, provider: str, model: str, content_type: str) -> str:
    name = f"{slugify(provider).lower()}-{slugify(model)}-{uuid.uuid4()}.{extension_for(content_type)}"
    return f"{prefix.strip('/')}/{name}" if prefix.strip("/") else name
