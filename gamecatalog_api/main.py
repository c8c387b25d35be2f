import logging

from .utils.config import LOG_LEVEL, PICTURES_DIR

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logging.getLogger("passlib.handlers.bcrypt").setLevel(logging.ERROR)

from contextlib import asynccontextmanager
from typing import AsyncIterator
from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from .db_init import init_db
from .utils.db_tools import with_db
from .utils.errors import CatalogError
from .utils.images import get_image_store, sweep_images
from .utils.response import catalog_error_response

from .routers.categories import router as categories_router
from .routers.games import router as games_router
from .routers.genres import router as genres_router
from .routers.pictures import router as pictures_router
from .routers.platforms import router as platforms_router
from .routers.publications import router as publications_router
from .routers.users import router as users_router
from .routers.video_games import router as video_games_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup: create tables and picture folders, then reconcile the pictures with the
    rows that own them. A failed sweep is logged and does not block startup.
    """
    init_db()
    store = get_image_store()
    store.ensure_folders()

    with with_db() as db:
        try:
            sweep_images(db, store)
        except Exception:
            logger.exception("Startup image sweep failed")

    yield


app = FastAPI(title="Game Catalog API", lifespan=lifespan)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    if exc.http_status() >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.error_code)
    return catalog_error_response(exc)


app.include_router(users_router)
app.include_router(platforms_router)
app.include_router(video_games_router)
app.include_router(publications_router)
app.include_router(games_router)
app.include_router(categories_router)
app.include_router(genres_router)
app.include_router(pictures_router)


@app.get("/health")
def health():
    return {"ok": True, "service": "Game Catalog API"}


# after the routers so that POST /pictures/sweep is matched first
app.mount("/pictures", StaticFiles(directory=PICTURES_DIR, check_dir=False), name="pictures")
