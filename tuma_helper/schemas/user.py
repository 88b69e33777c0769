from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    confirm_password: Optional[str] = None
    role: Literal["customer", "provider"] = "customer"
    phone: Optional[str] = None
    city: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    id: int
    email: EmailStr
    full_name: str
    display_name: Optional[str] = None
    role: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False
    preferred_language: Optional[str] = None
    preferred_city: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PublicProfile(BaseModel):
    id: int
    full_name: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    city: Optional[str] = None
    is_verified: bool = False

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, min_length=1)
    display_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    avatar_url: Optional[str] = None


class PreferencesUpdate(BaseModel):
    language: Optional[str] = None
    city: Optional[str] = None


class ContextResponse(BaseModel):
    language: str
    city: Optional[str] = None
