from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException
from jose import JWTError, jwt

from .config import ALGORITHM, JWT_EXPIRATION, SECRET_KEY


def create_access_token(payload: dict) -> str:
    claims = dict(payload)
    claims.setdefault("exp", datetime.now(timezone.utc) + timedelta(seconds=JWT_EXPIRATION))
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
