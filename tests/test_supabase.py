import pytest
import requests

from _helpers import FakeResponse
from imagegen.errors import ConfigurationError, DatabaseError, NotFoundError, StorageError
from imagegen.storage.supabase import ImageRepository, PromptRepository, SupabaseStorage

BASE = "https://project.supabase.co"


def test_missing_configuration(session, settings):
    settings.SUPABASE_SERVICE_ROLE_KEY = ""
    with pytest.raises(ConfigurationError) as exc:
        SupabaseStorage(session, settings)
    assert exc.value.status_code == 500
    assert "SUPABASE_SERVICE_ROLE_KEY" in exc.value.message


def test_storage_upload(session, settings):
    url = f"{BASE}/storage/v1/object/images/public/x.png"
    session.add("POST", url, FakeResponse(200, {"Key": "images/public/x.png"}))
    storage = SupabaseStorage(session, settings)

    assert storage.upload("public/x.png", b"bytes", "image/png") == "public/x.png"

    call = session.calls[0]
    assert call.kwargs["data"] == b"bytes"
    assert call.kwargs["headers"]["x-upsert"] == "true"
    assert call.kwargs["headers"]["Content-Type"] == "image/png"
    assert call.kwargs["headers"]["Authorization"] == "Bearer service-role"


def test_storage_upload_failure(session, settings):
    url = f"{BASE}/storage/v1/object/images/public/x.png"
    session.add("POST", url, FakeResponse(400, {"message": "Bucket not found"}))
    storage = SupabaseStorage(session, settings)

    with pytest.raises(StorageError):
        storage.upload("public/x.png", b"bytes", "image/png")


def test_public_url(session, settings):
    storage = SupabaseStorage(session, settings)
    assert storage.public_url("public/x.png") == f"{BASE}/storage/v1/object/public/images/public/x.png"


def test_image_insert_returns_row(session, settings):
    session.add("POST", f"{BASE}/rest/v1/images", FakeResponse(201, [{"id": 7, "image_url": "public/x.png"}]))
    repo = ImageRepository(session, settings)

    assert repo.insert({"image_url": "public/x.png"})["id"] == 7
    assert session.calls[0].kwargs["headers"]["Prefer"] == "return=representation"


def test_image_list_filters(session, settings):
    session.add("GET", f"{BASE}/rest/v1/images", FakeResponse(200, []))
    repo = ImageRepository(session, settings)

    assert repo.list(provider="OpenAI", search="fox", limit=10) == []

    params = session.calls[0].kwargs["params"]
    assert params["provider"] == "eq.OpenAI"
    assert params["prompt_text"] == "ilike.*fox*"
    assert params["order"] == "created_at.desc"
    assert params["limit"] == "10"


def test_permission_error_is_translated(session, settings):
    session.add(
        "POST", f"{BASE}/rest/v1/prompts",
        FakeResponse(403, {"code": "42501", "message": "new row violates row-level security policy"}),
    )
    repo = PromptRepository(session, settings)

    with pytest.raises(DatabaseError) as exc:
        repo.create({"prompt_text": "a cat"})
    assert exc.value.code == "42501"
    assert exc.value.message.startswith("Database Permission Error")


def test_delete_missing_prompt(session, settings):
    session.add("DELETE", f"{BASE}/rest/v1/prompts", FakeResponse(200, []))
    repo = PromptRepository(session, settings)

    with pytest.raises(NotFoundError):
        repo.delete("5d2c3c8e-6a53-4b8e-9d1e-0f4a2b7c9e11")


def test_image_insert_non_json_reply(session, settings):
    session.add("POST", f"{BASE}/rest/v1/images", FakeResponse(201, content=b"<html>proxy</html>"))
    repo = ImageRepository(session, settings)

    with pytest.raises(DatabaseError) as exc:
        repo.insert({"image_url": "public/x.png"})
    assert "'images'" in exc.value.message


def test_storage_download(session, settings):
    url = f"{BASE}/storage/v1/object/images/public/x.png"
    session.add("GET", url, FakeResponse(200, content=b"png-bytes"))
    storage = SupabaseStorage(session, settings)

    assert storage.download("public/x.png") == b"png-bytes"
    assert session.calls[0].kwargs["headers"]["apikey"] == "service-role"


def test_storage_download_missing(session, settings):
    session.add("GET", f"{BASE}/storage/v1/object/images/public/x.png", FakeResponse(404, {"message": "not found"}))
    storage = SupabaseStorage(session, settings)

    with pytest.raises(NotFoundError):
        storage.download("public/x.png")


def test_storage_network_errors(session, settings):
    session.add("GET", f"{BASE}/storage/v1/object/images/public/x.png", requests.exceptions.Timeout("slow"))
    session.add("DELETE", f"{BASE}/storage/v1/object/images", requests.exceptions.ConnectionError("reset"))
    storage = SupabaseStorage(session, settings)

    with pytest.raises(StorageError) as exc:
        storage.download("public/x.png")
    assert exc.value.message == "Storage download failed: slow"

    with pytest.raises(StorageError) as exc:
        storage.remove(["public/x.png"])
    assert exc.value.message == "Storage delete failed: reset"
