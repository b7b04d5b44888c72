"""Este módulo contiene las variables de configuración de la aplicación."""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Claves por defecto de cada proveedor
    OPENAI_API_KEY: str = ""
    TOGETHER_API_KEY: str = ""
    REPLICATE_API_TOKEN: str = ""

    OPENAI_IMAGE_MODEL: str = "gpt-image-1"
    OPENAI_IMAGE_QUALITY: str = "medium"

    # Supabase (storage + PostgREST)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    STORAGE_BUCKET: str = "images"
    STORAGE_PREFIX: str = "public"
    CLEANUP_ORPHANED_UPLOADS: bool = False

    HTTP_TIMEOUT: Optional[float] = Field(default=None, gt=0)

    API_PREFIX: str = "/api"
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
