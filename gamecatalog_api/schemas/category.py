from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .common import reject_null


class Category(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("name")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)


class CategoryLink(BaseModel):
    video_game_id: int
