from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..models import Base


class Category(Base):
    __tablename__ = "category"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)

    video_games = relationship("VideoGame", secondary="video_game_category", back_populates="categories")

    def __repr__(self):
        return f"<Category(id={self.id}, name={self.name})>"
