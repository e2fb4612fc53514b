from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class GroupCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)


class GroupCategoryUpdate(BaseModel):
    name: str = Field(..., min_length=1)


class GroupCategoryResponse(BaseModel):
    id: str
    name: str
    color: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
