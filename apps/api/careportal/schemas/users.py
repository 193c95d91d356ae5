from datetime import datetime

from pydantic import BaseModel, Field


class UserCreate(BaseModel):
    id: int | None = Field(default=None, ge=1)
    username: str = Field(min_length=1, max_length=255)
    role: str = Field(pattern="^(admin|patient)$")


class UserResponse(BaseModel):
    id: int
    username: str
    role: str
    created_at: datetime


class UserDetailsResponse(BaseModel):
    user_id: int
    role: str
    is_in_household: bool
