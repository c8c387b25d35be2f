from pathlib import Path
import logging
import os
import secrets
from dotenv import load_dotenv

ENV_PATH = Path(__file__).parent.parent / ".env"

load_dotenv(dotenv_path=ENV_PATH)

logger = logging.getLogger(__name__)

SECRET_KEY = os.getenv("SECRET_KEY")

if not SECRET_KEY:
    SECRET_KEY = secrets.token_hex(32)
    logger.warning("SECRET_KEY is not set; tokens will not survive a restart")

ALGORITHM = "HS256"
JWT_EXPIRATION = int(os.getenv("JWT_EXPIRATION", "86400"))

PICTURES_DIR = Path(os.getenv("PICTURES_DIR", "./pictures"))
QUERY_LIMIT = int(os.getenv("QUERY_LIMIT", "50"))
TRANSACTION_TIMEOUT = float(os.getenv("TRANSACTION_TIMEOUT", "30"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
