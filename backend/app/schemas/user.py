"""Pydantic schemas for Users and auth."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class RegisterRequest(BaseModel):
    email: str
    name: str
    password: str
    role: str = "member"  # coordinator, member


class LoginRequest(BaseModel):
    email: str
    password: str


class UserUpdate(BaseModel):
    name: Optional[str] = None


class UserOut(BaseModel):
    user_id: str
    email: str
    name: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserOut
