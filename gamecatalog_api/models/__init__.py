from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .user import User
from .genre import Genre
from .category import Category
from .video_game_category import video_game_categories
from .video_game import VideoGame
from .platform import Platform
from .publication import Publication
from .game import Game
