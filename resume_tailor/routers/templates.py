from typing import List

from fastapi import APIRouter

from resume_tailor.services.templates import TemplateConfig, list_templates

router = APIRouter(
    prefix="/templates",
    tags=["templates"]
)


@router.get("", response_model=List[TemplateConfig])
def get_templates():
    """Public catalogue of resume templates."""
    return list_templates()
