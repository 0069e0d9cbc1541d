from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from core.content_store import ContentKind
from .content import build_content_router


class ProjectGigCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    deliverables: str = Field(min_length=1)
    required_skills: List[str] = Field(default_factory=list)
    deadline: Optional[datetime] = None
    compensation: str = Field(min_length=1, max_length=200)
    category_tags: List[str] = Field(default_factory=list)


class ProjectGigUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    deliverables: Optional[str] = None
    required_skills: Optional[List[str]] = None
    deadline: Optional[datetime] = None
    compensation: Optional[str] = Field(default=None, max_length=200)
    category_tags: Optional[List[str]] = None


router = build_content_router(
    ContentKind.PROJECT_GIG,
    prefix="/project-gigs",
    tag="项目外包",
    create_schema=ProjectGigCreateRequest,
    update_schema=ProjectGigUpdateRequest,
)
