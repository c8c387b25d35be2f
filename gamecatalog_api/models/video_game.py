from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..models import Base


class VideoGame(Base):
    __tablename__ = "video_game"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")

    publications = relationship("Publication", back_populates="video_game")
    categories = relationship("Category", secondary="video_game_category", back_populates="video_games")

    def __repr__(self):
        return f"<VideoGame(id={self.id}, name={self.name})>"
