from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..utils.auth import get_current_admin
from ..utils.images import ImageStore, get_image_store, sweep_images

router = APIRouter(prefix="/pictures", tags=["Pictures"])


@router.post("/sweep", response_model=dict, dependencies=[Depends(get_current_admin)])
def sweep_pictures(db: Session = Depends(get_db), store: ImageStore = Depends(get_image_store)) -> dict:
    """Remove orphaned and stale staged pictures; report rows without one."""
    return sweep_images(db, store)
