from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from imagegen.capabilities import AVAILABLE_STYLES, DEFAULT_CAPABILITIES, GENERIC_DIMENSIONS, list_capabilities
from imagegen.config import Settings, get_settings
from imagegen.deps import get_http_session, get_pipeline_factory
from imagegen.schemas import ErrorResponse, GenerateRequest, GenerateResponse
from imagegen.services.generation import generate_images

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post("/generate", response_model=GenerateResponse, responses=ERROR_RESPONSES)
def generate_image(
    req: GenerateRequest,
    request: Request,
    session=Depends(get_http_session),
    pipeline_factory=Depends(get_pipeline_factory),
    settings: Settings = Depends(get_settings),
):
    """Generate images with the selected provider and store the first one."""
    result = generate_images(req, request.headers, session, pipeline_factory, settings)
    if not result.success:
        return JSONResponse(
            status_code=result.status_code,
            content={"error": result.error or "API call failed internally"},
        )
    return GenerateResponse(images=result.images)


@router.get("/capabilities")
def get_capabilities():
    """Capability table shared with the form controls."""
    return {
        "providers": list_capabilities(),
        "default": DEFAULT_CAPABILITIES.to_dict(),
        "generic_dimensions": list(GENERIC_DIMENSIONS),
    }


@router.get("/styles")
def get_styles():
    return list(AVAILABLE_STYLES)


def get_router():
    return router
