from pydantic import BaseModel, EmailStr
from typing import Optional, Literal

from app.schemas.common import CamelModel


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    role: str


class MagicLoginValidateOut(CamelModel):
    email: Optional[str] = None
    user_id: int
    target_type: str
    target_id: Optional[int] = None
    meta: dict = {}
    has_password: bool
    access_token: str
