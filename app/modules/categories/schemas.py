from pydantic import BaseModel
from datetime import date as date_type, datetime


class CategoryCreate(BaseModel):
    title: str
    date: date_type


class CategoryResponse(BaseModel):
    id: str
    title: str
    date: datetime
    color: str

    class Config:
        from_attributes = True
