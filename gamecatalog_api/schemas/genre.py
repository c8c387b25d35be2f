from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import reject_null


class Genre(BaseModel):
    id: int
    name: str
    description: str

    class Config:
        from_attributes = True


class GenreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""


class GenreUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)
