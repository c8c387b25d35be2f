from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_serializer, field_validator

from .platform import PlatformCreate


class VideoGame(BaseModel):
    id: int
    name: str
    description: str

    class Config:
        from_attributes = True


class PlatformVideoGame(BaseModel):
    """A new video game published on the platform being created."""
    name: str = Field(..., min_length=1)
    description: str = ""
    release_date: date
    release_price: Optional[float] = Field(None, ge=0)
    store_page_url: Optional[HttpUrl] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_serializer("store_page_url")
    def url_as_str(self, v: Optional[HttpUrl]) -> Optional[str]:
        return str(v) if v is not None else None


class PlatformWithVideoGamesCreate(BaseModel):
    """
    JSON part of the multipart request creating a platform with its video games.
    Pictures travel as files, one per entry of `video_games`, in the same order.
    """
    platform: PlatformCreate
    video_games: list[PlatformVideoGame] = Field(..., min_length=1)
