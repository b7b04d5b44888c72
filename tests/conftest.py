import pytest
from fastapi.testclient import TestClient

from _helpers import FakeImageRepository, FakePromptRepository, FakeSession, FakeStorage
from imagegen.config import Settings, get_settings
from imagegen.deps import (get_http_session, get_image_repository, get_pipeline_factory,
                           get_prompt_repository, get_storage)
from imagegen.main import create_app
from imagegen.services.images import ImagePipeline


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        OPENAI_API_KEY="sk-server",
        TOGETHER_API_KEY="together-server",
        REPLICATE_API_TOKEN="r8-server",
        SUPABASE_URL="https://project.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="service-role",
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def images_repo():
    return FakeImageRepository()


@pytest.fixture
def prompts_repo():
    return FakePromptRepository()


@pytest.fixture
def pipeline(session, storage, images_repo, settings):
    return ImagePipeline(session, storage, images_repo, settings)


@pytest.fixture
def client(settings, session, storage, images_repo, prompts_repo):
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_session] = lambda: session
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_image_repository] = lambda: images_repo
    app.dependency_overrides[get_prompt_repository] = lambda: prompts_repo
    app.dependency_overrides[get_pipeline_factory] = lambda: (
        lambda: ImagePipeline(session, storage, images_repo, settings)
    )
    return TestClient(app)
