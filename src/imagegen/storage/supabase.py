"""
Clientes REST de Supabase

Acceso al Storage (subida y lectura de ficheros) y a la base de datos a
través de PostgREST, usando requests directamente.

Responsabilidades:
- Subir, descargar y borrar imágenes del bucket
- Construir la URL pública de una imagen
- Insertar y consultar los metadatos de las imágenes
- CRUD de los prompts guardados
"""

import logging
from typing import List, Optional

import requests

from imagegen.config import Settings
from imagegen.errors import ConfigurationError, DatabaseError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

IMAGE_COLUMNS = (
    "id,image_url,prompt_text,negative_prompt,model,provider,width,height,"
    "seed,steps,guidance_scale,style,status,created_at"
)
PROMPT_COLUMNS = "id,created_at,name,prompt_text,negative_prompt,notes"


class SupabaseClient:
    def __init__(self, session: requests.Session, settings: Settings):
        if not settings.SUPABASE_URL:
            raise ConfigurationError(
                "Supabase URL is not defined in environment variables. Please set SUPABASE_URL."
            )
        if not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise ConfigurationError(
                "Supabase Service Role Key is not defined in environment variables. "
                "Please set SUPABASE_SERVICE_ROLE_KEY."
            )
        self.session = session
        self.base_url = settings.SUPABASE_URL.rstrip("/")
        self.timeout = settings.HTTP_TIMEOUT
        self.headers = {
            "apikey": settings.SUPABASE_SERVICE_ROLE_KEY,
            "Authorization": f"Bearer {settings.SUPABASE_SERVICE_ROLE_KEY}",
        }

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        return self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)


class SupabaseStorage(SupabaseClient):
    def __init__(self, session: requests.Session, settings: Settings):
        super().__init__(session, settings)
        self.bucket = settings.STORAGE_BUCKET

    def object_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{path}"

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        try:
            resp = self.request(
                "POST",
                self.object_url(path),
                data=data,
                headers={"Content-Type": content_type, "x-upsert": "true"},
            )
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Storage upload failed: {e}") from e
        if resp.status_code not in (200, 201):
            raise StorageError(f"Storage upload failed: {resp.status_code} - {resp.text}")
        return path

    def download(self, path: str) -> bytes:
        try:
            resp = self.request("GET", self.object_url(path))
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Storage download failed: {e}") from e
        if resp.status_code == 404:
            raise NotFoundError(f"Storage object '{path}' not found.")
        if resp.status_code != 200:
            raise StorageError(f"Storage download failed: {resp.status_code} - {resp.text}")
        return resp.content

    def remove(self, paths: List[str]) -> None:
        try:
            resp = self.request(
                "DELETE",
                f"{self.base_url}/storage/v1/object/{self.bucket}",
                json={"prefixes": paths},
            )
        except requests.exceptions.RequestException as e:
            raise StorageError(f"Storage delete failed: {e}") from e
        if resp.status_code != 200:
            raise StorageError(f"Storage delete failed: {resp.status_code} - {resp.text}")


def database_error(resp: requests.Response, table: str) -> DatabaseError:
    try:
        body = resp.json()
    except ValueError:
        body = {}
    code = body.get("code") if isinstance(body, dict) else None
    message = (body.get("message") if isinstance(body, dict) else None) or resp.text

    if code == "42501":
        return DatabaseError(
            f"Database Permission Error: {message}. Ensure policies allow access to '{table}'.",
            code=code,
        )
    if code == "42P01":
        return DatabaseError(f"Database Error: The '{table}' table was not found.", code=code)
    return DatabaseError(f"Database Error: {message}", code=code)


class TableRepository(SupabaseClient):
    table: str = ""
    columns: str = "*"

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _call(self, method: str, params: dict = None, json=None, headers: dict = None):
        try:
            resp = self.request(method, self.table_url, params=params, json=json, headers=headers or {})
        except requests.exceptions.RequestException as e:
            raise DatabaseError(f"Database Error: {e}") from e
        if not 200 <= resp.status_code < 300:
            raise database_error(resp, self.table)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise DatabaseError(f"Database Error: unexpected response from '{self.table}': {e}") from e

    def _insert(self, row: dict) -> dict:
        rows = self._call(
            "POST",
            params={"select": self.columns},
            json=row,
            headers={"Prefer": "return=representation"},
        )
        return rows[0] if rows else {}

    def _get(self, record_id) -> dict:
        rows = self._call("GET", params={"select": self.columns, "id": f"eq.{record_id}"})
        if not rows:
            raise NotFoundError(f"No {self.table} record with id '{record_id}'.")
        return rows[0]


class ImageRepository(TableRepository):
    table = "images"
    columns = IMAGE_COLUMNS

    def insert(self, row: dict) -> dict:
        return self._insert(row)

    def get(self, image_id: int) -> dict:
        return self._get(image_id)

    def list(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        style: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[dict]:
        params = {
            "select": self.columns,
            "order": "created_at.desc",
            "limit": str(limit),
            "offset": str(offset),
        }
        if provider:
            params["provider"] = f"eq.{provider}"
        if model:
            params["model"] = f"eq.{model}"
        if style:
            params["style"] = f"eq.{style}"
        if search:
            params["prompt_text"] = f"ilike.*{search}*"
        return self._call("GET", params=params) or []


class PromptRepository(TableRepository):
    table = "prompts"
    columns = PROMPT_COLUMNS

    def list(self) -> List[dict]:
        return self._call("GET", params={"select": self.columns, "order": "created_at.desc"}) or []

    def get(self, prompt_id: str) -> dict:
        return self._get(prompt_id)

    def create(self, data: dict) -> dict:
        return self._insert(data)

    def update(self, prompt_id: str, data: dict) -> dict:
        rows = self._call(
            "PATCH",
            params={"id": f"eq.{prompt_id}", "select": self.columns},
            json=data,
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise NotFoundError(f"No prompts record with id '{prompt_id}'.")
        return rows[0]

    def delete(self, prompt_id: str) -> None:
        rows = self._call(
            "DELETE",
            params={"id": f"eq.{prompt_id}"},
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise NotFoundError(f"No prompts record with id '{prompt_id}'.")
