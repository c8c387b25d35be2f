from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from ..models import Base


class Platform(Base):
    __tablename__ = "platform"

    code = Column(String, primary_key=True)
    description = Column(String, nullable=False)
    abbreviation = Column(String, nullable=False)

    publications = relationship("Publication", back_populates="platform")

    def __repr__(self):
        return f"<Platform(code={self.code}, abbreviation={self.abbreviation})>"
