from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..db import get_db
from ..models.user import User as UserModel
from ..schemas.common import Count, Pagination, pagination
from ..schemas.user import (
    AdminUserUpdate,
    LoginRequest,
    Token,
    User,
    UserCreate,
    UserUpdate,
    UserWithGamesCreate,
)
from ..utils.auth import get_current_admin, get_current_user, issue_token
from ..utils.errors import NotFound
from ..utils.user import (
    authenticate,
    count_users,
    create_user,
    create_user_with_games,
    delete_user,
    get_user,
    get_users,
    update_user,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/login", response_model=Token)
def login(creds: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, creds.login, creds.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return {"access_token": issue_token(user), "token_type": "bearer"}


@router.post("/", response_model=User, status_code=201)
def register(data: UserCreate, db: Session = Depends(get_db)):
    return get_user(db, create_user(db, data.model_dump()))


@router.post("/with_games", response_model=User, status_code=201, dependencies=[Depends(get_current_admin)])
def register_with_games(data: UserWithGamesCreate, db: Session = Depends(get_db)):
    """Create a user together with the publications they own; all or nothing."""
    fields = data.model_dump(exclude={"publication_ids"})
    return get_user(db, create_user_with_games(db, fields, data.publication_ids))


@router.get("/me", response_model=User)
def read_me(user: UserModel = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=User)
def update_me(data: UserUpdate, user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)):
    update_user(db, user.id, data.model_dump(exclude_unset=True))
    return get_user(db, user.id)


@router.delete("/me", status_code=204)
def delete_me(user: UserModel = Depends(get_current_user), db: Session = Depends(get_db)) -> None:
    delete_user(db, user.id)


@router.get("/", response_model=List[User], dependencies=[Depends(get_current_admin)])
def list_users(
        id: Optional[int] = Query(None),
        username: Optional[str] = Query(None),
        pages: Pagination = Depends(pagination),
        db: Session = Depends(get_db),
):
    return get_users(db, user_id=id, username=username, page=pages.page, limit=pages.limit)


@router.get("/count", response_model=Count, dependencies=[Depends(get_current_admin)])
def users_count(db: Session = Depends(get_db)):
    return {"count": count_users(db)}


@router.get("/{user_id}", response_model=User, dependencies=[Depends(get_current_admin)])
def get_user_by_id(user_id: int, db: Session = Depends(get_db)):
    user = get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


@router.patch("/{user_id}", response_model=User, dependencies=[Depends(get_current_admin)])
def update_user_endpoint(user_id: int, data: AdminUserUpdate, db: Session = Depends(get_db)):
    update_user(db, user_id, data.model_dump(exclude_unset=True))
    return get_user(db, user_id)


@router.delete("/{user_id}", status_code=204, dependencies=[Depends(get_current_admin)])
def delete_user_endpoint(user_id: int, db: Session = Depends(get_db)) -> None:
    delete_user(db, user_id)
