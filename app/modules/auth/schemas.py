from pydantic import BaseModel, EmailStr
from typing import Optional, List


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    nickname: Optional[str] = None
    full_name: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    interests: List[str] = []  # predefined_categories ids


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str
