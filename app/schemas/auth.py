# app/schemas/auth.py
from pydantic import BaseModel, Field, constr, field_validator
from typing import Optional

from app.core.security import is_valid_pincode


class RegisterRequest(BaseModel):
    username: constr(min_length=3, max_length=50) = Field(..., description="Login name")
    password: constr(min_length=8, max_length=72) = Field(..., description="Password (min 8 chars)")
    display_name: Optional[str] = Field(None, max_length=80)
    pincode: Optional[str] = Field(None, description="Home pincode (6 digits)")

    @field_validator("pincode")
    @classmethod
    def _check_pincode(cls, v):
        if v is not None and not is_valid_pincode(v):
            raise ValueError("Pincode must be 6 digits")
        return v


class LoginRequest(BaseModel):
    username: str = Field(..., description="Login name")
    password: str = Field(..., description="Password")


class UserInfo(BaseModel):
    userId: int
    username: str
    displayName: Optional[str] = None
    pincode: Optional[str] = None
    partyId: Optional[int] = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserInfo
