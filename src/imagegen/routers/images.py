from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from imagegen.deps import get_image_repository, get_storage
from imagegen.schemas import ImageRecord
from imagegen.storage.supabase import ImageRepository, SupabaseStorage
from imagegen.utils import is_http_url

router = APIRouter()


def to_record(row: dict, storage: SupabaseStorage) -> ImageRecord:
    path = row.get("image_url") or ""
    public_url = path if is_http_url(path) else storage.public_url(path)
    return ImageRecord(**{**row, "public_url": public_url})


@router.get("/images", response_model=List[ImageRecord])
def list_images(
    provider: Optional[str] = None,
    model: Optional[str] = None,
    style: Optional[str] = None,
    search: Optional[str] = Query(default=None, min_length=1),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    repo: ImageRepository = Depends(get_image_repository),
    storage: SupabaseStorage = Depends(get_storage),
):
    """Browse generated images, newest first."""
    rows = repo.list(provider=provider, model=model, style=style, search=search, limit=limit, offset=offset)
    return [to_record(row, storage) for row in rows]


@router.get("/images/{image_id}", response_model=ImageRecord)
def get_image(
    image_id: int,
    repo: ImageRepository = Depends(get_image_repository),
    storage: SupabaseStorage = Depends(get_storage),
):
    return to_record(repo.get(image_id), storage)


def get_router():
    return router
