from pydantic import BaseModel


class Game(BaseModel):
    user_id: int
    publication_id: int

    class Config:
        from_attributes = True


class GameCreate(BaseModel):
    publication_id: int
