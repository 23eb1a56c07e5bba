"""
Practice sheet, chapter and recommendation schemas.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime

from .user import UserSummary


Subject = Literal["physics", "chemistry", "biology"]


class ChapterData(BaseModel):
    done: bool = False
    practiced: bool = False
    questions_practiced: int = Field(0, ge=0)


class SubjectData(BaseModel):
    present: int = Field(0, ge=0)
    chapters: Dict[str, ChapterData] = {}


class SheetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    physics: SubjectData
    chemistry: SubjectData
    biology: SubjectData


class SheetResponse(BaseModel):
    id: int
    user_id: int
    name: str
    physics: SubjectData
    chemistry: SubjectData
    biology: SubjectData
    created_at: datetime

    class Config:
        from_attributes = True


class ActivityEntry(SheetResponse):
    """Sheet in the activity feed with its owner and their liveness."""
    user: UserSummary
    is_online: bool


class UserProfileResponse(BaseModel):
    user: UserSummary
    sheets: List[SheetResponse]


class ChaptersConfigBody(BaseModel):
    physics: List[str]
    chemistry: List[str]
    biology: List[str]


class ChaptersConfigResponse(ChaptersConfigBody):
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RecommendationCreate(BaseModel):
    subject: Subject
    chapter_name: str = Field(..., max_length=200)


class RecommendationResponse(BaseModel):
    id: int
    user_id: int
    subject: str
    chapter_name: str
    approvals: List[int]
    rejections: List[int]
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
