from pydantic import BaseModel
from typing import Optional


class GiftCreate(BaseModel):
    recipient: str
    recipient_email: Optional[str] = None
    name: str
    price: Optional[float] = None
    url: Optional[str] = None


class GiftUpdate(BaseModel):
    recipient: Optional[str] = None
    recipient_email: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    url: Optional[str] = None
    is_purchased: Optional[bool] = None


class GiftResponse(BaseModel):
    id: str
    recipient: str
    recipient_email: Optional[str] = None
    name: str
    price: Optional[float] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    is_purchased: bool = False

    class Config:
        from_attributes = True


class RecipientLookup(BaseModel):
    nickname: str
