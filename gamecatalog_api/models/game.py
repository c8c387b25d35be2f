from sqlalchemy import Column, ForeignKey, Integer
from ..models import Base


class Game(Base):
    """One user's ownership of one publication."""
    __tablename__ = "game"

    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True)
    publication_id = Column(Integer, ForeignKey("publication.id"), primary_key=True, index=True)

    def __repr__(self):
        return f"<Game(user_id={self.user_id}, publication_id={self.publication_id})>"
