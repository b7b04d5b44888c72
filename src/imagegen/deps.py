"""
Dependencias inyectables de la aplicación

Los clientes HTTP, el Storage y los repositorios se crean por petición a
partir de la configuración; no hay instancias globales con credenciales.
En los tests se sustituyen con app.dependency_overrides.

Gestiona:
- Sesión HTTP (requests) de cada petición
- Clientes de Supabase (Storage y tablas)
- Fábrica del pipeline de post-procesado
"""

from typing import Callable, Iterator

import requests
from fastapi import Depends

from imagegen.config import Settings, get_settings
from imagegen.services.images import ImagePipeline
from imagegen.storage.supabase import ImageRepository, PromptRepository, SupabaseStorage


def get_http_session() -> Iterator[requests.Session]:
    session = requests.Session()
    try:
        yield session
    finally:
        session.close()


def get_storage(
    session: requests.Session = Depends(get_http_session),
    settings: Settings = Depends(get_settings),
) -> SupabaseStorage:
    return SupabaseStorage(session, settings)


def get_image_repository(
    session: requests.Session = Depends(get_http_session),
    settings: Settings = Depends(get_settings),
) -> ImageRepository:
    return ImageRepository(session, settings)


def get_prompt_repository(
    session: requests.Session = Depends(get_http_session),
    settings: Settings = Depends(get_settings),
) -> PromptRepository:
    return PromptRepository(session, settings)


def get_pipeline_factory(
    session: requests.Session = Depends(get_http_session),
    settings: Settings = Depends(get_settings),
) -> Callable[[], ImagePipeline]:
    def factory() -> ImagePipeline:
        return ImagePipeline(
            session,
            SupabaseStorage(session, settings),
            ImageRepository(session, settings),
            settings,
        )

    return factory
