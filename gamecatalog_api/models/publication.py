from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship
from ..models import Base


class Publication(Base):
    __tablename__ = "publication"
    __table_args__ = (
        UniqueConstraint("video_game_id", "platform_code", name="uq_publication_video_game_platform"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_game_id = Column(Integer, ForeignKey("video_game.id"), nullable=False, index=True)
    platform_code = Column(String, ForeignKey("platform.code", onupdate="CASCADE"), nullable=False, index=True)
    release_date = Column(Date, nullable=False)
    release_price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    store_page_url = Column(String, nullable=True)

    video_game = relationship("VideoGame", back_populates="publications")
    platform = relationship("Platform", back_populates="publications")

    def __repr__(self):
        return f"<Publication(id={self.id}, video_game_id={self.video_game_id}, platform_code={self.platform_code})>"
