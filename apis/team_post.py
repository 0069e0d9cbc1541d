from typing import List, Optional

from pydantic import BaseModel, Field

from core.content_store import ContentKind
from .content import build_content_router


class TeamPostCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    skills_needed: List[str] = Field(default_factory=list)
    time_commitment: str = Field(min_length=1, max_length=50)
    compensation_type: str = Field(min_length=1, max_length=50)
    category: str = Field(min_length=1, max_length=100)


class TeamPostUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    skills_needed: Optional[List[str]] = None
    time_commitment: Optional[str] = Field(default=None, max_length=50)
    compensation_type: Optional[str] = Field(default=None, max_length=50)
    category: Optional[str] = Field(default=None, max_length=100)


router = build_content_router(
    ContentKind.TEAM_POST,
    prefix="/team-posts",
    tag="组队帖",
    create_schema=TeamPostCreateRequest,
    update_schema=TeamPostUpdateRequest,
)
