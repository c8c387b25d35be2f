from sqlalchemy import Table, Column, Integer, ForeignKey
from ..models import Base

video_game_categories = Table(
    "video_game_category",
    Base.metadata,
    Column("video_game_id", Integer, ForeignKey("video_game.id"), primary_key=True),
    Column("category_id", Integer, ForeignKey("category.id"), primary_key=True),
)
