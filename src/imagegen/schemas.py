"""
Modelos de datos y validación

Define los esquemas Pydantic utilizados para:
- Validar los datos de entrada en los endpoints
- Documentar automáticamente la API con OpenAPI
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerateRequest(BaseModel):
    # Los campos obligatorios se comprueban en el normalizador para
    # devolver siempre el mismo mensaje de error
    model_config = ConfigDict(populate_by_name=True)

    prompt: Optional[str] = None
    provider: Optional[str] = None
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    negative_prompt: Optional[str] = Field(default=None, alias="negativePrompt")
    num_outputs: Optional[int] = Field(default=None, gt=0, alias="numOutputs")
    style: Optional[str] = None
    seed: Optional[int] = Field(default=None, ge=0)
    steps: Optional[int] = Field(default=None, gt=0)
    guidance_scale: Optional[float] = Field(default=None, gt=0, alias="guidanceScale")


class GenerateResponse(BaseModel):
    images: List[str]


class ErrorResponse(BaseModel):
    error: str


class ImageRecord(BaseModel):
    id: int
    image_url: str
    public_url: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    prompt_text: Optional[str] = None
    negative_prompt: Optional[str] = None
    seed: Optional[int] = None
    steps: Optional[int] = None
    guidance_scale: Optional[float] = None
    style: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class PromptBase(BaseModel):
    name: Optional[str] = None
    prompt_text: str
    negative_prompt: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("prompt_text")
    @classmethod
    def prompt_not_empty(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Prompt text cannot be empty")
        return value


class PromptCreate(PromptBase):
    pass


class PromptUpdate(PromptBase):
    pass


class PromptRecord(PromptBase):
    id: str
    created_at: Optional[datetime] = None
