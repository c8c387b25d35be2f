from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from .common import reject_null

USERNAME_PATTERN = r"^[A-Za-z0-9_.\-]+$"


class User(BaseModel):
    id: int
    username: str
    email: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    is_admin: bool

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    login: str = Field(..., description="Username, or email when it contains '@'")
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=100, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=6)
    firstname: Optional[str] = Field(None, max_length=100)
    lastname: Optional[str] = Field(None, max_length=100)


class UserWithGamesCreate(UserCreate):
    publication_ids: list[int] = Field(default_factory=list)


class UserUpdate(BaseModel):
    """Self-service update; omitted fields keep their value, null clears a name."""
    username: Optional[str] = Field(None, min_length=3, max_length=100, pattern=USERNAME_PATTERN)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    firstname: Optional[str] = Field(None, max_length=100)
    lastname: Optional[str] = Field(None, max_length=100)

    @field_validator("username", "email", "password")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class AdminUserUpdate(UserUpdate):
    is_admin: Optional[bool] = None

    @field_validator("is_admin")
    @classmethod
    def admin_not_null(cls, v):
        return reject_null(v)
