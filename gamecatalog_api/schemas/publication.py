from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_serializer, field_validator

from .common import reject_null
from .platform import CODE_PATTERN


class Publication(BaseModel):
    id: int
    video_game_id: int
    platform_code: str
    release_date: date
    release_price: Optional[float] = None
    store_page_url: Optional[str] = None

    class Config:
        from_attributes = True


class PublicationCreate(BaseModel):
    video_game_id: int
    platform_code: str = Field(..., pattern=CODE_PATTERN)
    release_date: date
    release_price: Optional[float] = Field(None, ge=0)
    store_page_url: Optional[HttpUrl] = None

    @field_serializer("store_page_url")
    def url_as_str(self, v: Optional[HttpUrl]) -> Optional[str]:
        return str(v) if v is not None else None


class PublicationUpdate(BaseModel):
    """Only the fields present in the request body are updated; null clears price and URL."""
    video_game_id: Optional[int] = None
    platform_code: Optional[str] = Field(None, pattern=CODE_PATTERN)
    release_date: Optional[date] = None
    release_price: Optional[float] = Field(None, ge=0)
    store_page_url: Optional[HttpUrl] = None

    @field_validator("video_game_id", "platform_code", "release_date")
    @classmethod
    def not_null(cls, v):
        return reject_null(v)

    @field_serializer("store_page_url")
    def url_as_str(self, v: Optional[HttpUrl]) -> Optional[str]:
        return str(v) if v is not None else None
