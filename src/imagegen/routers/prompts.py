import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from imagegen.deps import get_prompt_repository
from imagegen.schemas import PromptCreate, PromptRecord, PromptUpdate
from imagegen.storage.supabase import PromptRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/prompts")


@router.get("", response_model=List[PromptRecord])
def list_prompts(repo: PromptRepository = Depends(get_prompt_repository)):
    return repo.list()


@router.post("", response_model=PromptRecord, status_code=201)
def save_prompt(data: PromptCreate, repo: PromptRepository = Depends(get_prompt_repository)):
    record = repo.create(data.model_dump())
    logger.info("Prompt %s saved", record.get("id"))
    return record


@router.get("/{prompt_id}", response_model=PromptRecord)
def get_prompt(prompt_id: UUID, repo: PromptRepository = Depends(get_prompt_repository)):
    return repo.get(str(prompt_id))


@router.put("/{prompt_id}", response_model=PromptRecord)
def update_prompt(prompt_id: UUID, data: PromptUpdate, repo: PromptRepository = Depends(get_prompt_repository)):
    record = repo.update(str(prompt_id), data.model_dump())
    logger.info("Prompt %s updated", prompt_id)
    return record


@router.delete("/{prompt_id}", status_code=204)
def delete_prompt(prompt_id: UUID, repo: PromptRepository = Depends(get_prompt_repository)):
    repo.delete(str(prompt_id))
    logger.info("Prompt %s deleted", prompt_id)


def get_router():
    return router
