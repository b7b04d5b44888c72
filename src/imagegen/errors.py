"""
Errores de la aplicación

Todas las excepciones derivan de HTTPException para que los servicios puedan
lanzarlas directamente y FastAPI las convierta en una respuesta con el código
adecuado. El cuerpo de la respuesta siempre es {"error": "<mensaje>"}.

Taxonomía:
- Errores del cliente (400): campos ausentes o inválidos, dimensiones no soportadas
- Errores de credenciales: 400 si el usuario debe aportar la clave, 500 si falta en el servidor
- Errores del proveedor (500): respuesta no 2xx o con formato inesperado
- Errores de post-procesado (500): descarga de la imagen o subida al storage
"""

from fastapi import HTTPException


class ImageGenError(HTTPException):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(status_code=status_code or self.status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(ImageGenError):
    status_code = 400


class InvalidDimensionsError(InvalidRequestError):
    pass


class NotFoundError(ImageGenError):
    status_code = 404


class MissingCredentialError(ImageGenError):
    """Missing API key.

    ``user_must_supply`` separates keys the user adds in Settings (400) from
    keys the server operator forgot to configure (500).
    """

    def __init__(self, message: str, user_must_supply: bool):
        super().__init__(message, status_code=400 if user_must_supply else 500)
        self.user_must_supply = user_must_supply


class UpstreamProviderError(ImageGenError):
    def __init__(self, provider: str, upstream_message: str):
        super().__init__(f"Failed to generate image via {provider}: {upstream_message}")
        self.provider = provider
        self.upstream_message = upstream_message


class UnexpectedResponseError(UpstreamProviderError):
    pass


class PostProcessingError(ImageGenError):
    pass


class StorageError(ImageGenError):
    pass


class DatabaseError(ImageGenError):
    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.code = code


class ConfigurationError(ImageGenError):
    pass
