import io
import logging
import shutil
import time
import uuid
from pathlib import Path
from typing import Callable

from PIL import Image, UnidentifiedImageError
from sqlalchemy.orm import Session

from ..models.platform import Platform
from ..models.video_game import VideoGame
from .config import PICTURES_DIR, TRANSACTION_TIMEOUT

logger = logging.getLogger(__name__)

PLATFORM_FOLDER = "platform"
VIDEO_GAME_FOLDER = "videoGame"
STAGING_DIR = ".staging"

ACCEPTED_FORMATS = {"JPEG", "PNG", "WEBP"}


class InvalidImageFormat(ValueError):
    """The uploaded bytes are not an image the store accepts."""


def _decode(data: bytes) -> Image.Image:
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, SyntaxError, ValueError, OSError) as e:
        raise InvalidImageFormat("Invalid image format") from e

    if image.format not in ACCEPTED_FORMATS:
        raise InvalidImageFormat(f"Unsupported image format: {image.format}")

    if image.mode not in ("RGB", "RGBA", "L", "LA", "P"):
        image = image.convert("RGBA")
    return image


def _check_key(key) -> str:
    key = str(key)
    if not key or key in (".", "..") or Path(key).name != key:
        raise ValueError(f"Invalid image key: {key!r}")
    return key


class ImageStore:
    """
    Filesystem store holding one PNG per owning row:
        {root}/{folder}/{key}.png

    Writes go through a staging file in {root}/{folder}/.staging/ so that the final
    path only ever holds a complete image.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def ensure_folders(self) -> None:
        for folder in (PLATFORM_FOLDER, VIDEO_GAME_FOLDER):
            (self.root / folder / STAGING_DIR).mkdir(parents=True, exist_ok=True)

    def path_for(self, folder: str, key) -> Path:
        return self.root / folder / f"{_check_key(key)}.png"

    def exists(self, folder: str, key) -> bool:
        return self.path_for(folder, key).is_file()

    def keys(self, folder: str) -> list[str]:
        base = self.root / folder
        if not base.exists():
            return []
        return sorted(p.stem for p in base.glob("*.png") if p.is_file())

    def stage(self, folder: str, key, data: bytes) -> Path:
        """
        Decode `data` and write it as PNG to a staging file.
        Raises InvalidImageFormat for undecodable content, OSError for I/O problems.
        """
        key = _check_key(key)
        image = _decode(data)
        staging = self.root / folder / STAGING_DIR
        staging.mkdir(parents=True, exist_ok=True)
        staged = staging / f"{uuid.uuid4().hex}-{key}.png"
        try:
            image.save(staged, format="PNG")
        except Exception:
            staged.unlink(missing_ok=True)
            raise
        return staged

    def stage_copy(self, folder: str, old_key, new_key) -> Path:
        """Copy the image under `old_key` to a fresh staging file destined for `new_key`."""
        src = self.path_for(folder, old_key)
        staging = self.root / folder / STAGING_DIR
        staging.mkdir(parents=True, exist_ok=True)
        staged = staging / f"{uuid.uuid4().hex}-{_check_key(new_key)}.png"
        try:
            shutil.copyfile(src, staged)
        except Exception:
            staged.unlink(missing_ok=True)
            raise
        return staged

    def promote(self, staged: Path, folder: str, key) -> Path:
        dest = self.path_for(folder, key)
        staged.replace(dest)
        return dest

    def discard(self, staged: Path) -> None:
        staged.unlink(missing_ok=True)

    def put(self, folder: str, key, data: bytes) -> Path:
        return self.promote(self.stage(folder, key, data), folder, key)

    def delete(self, folder: str, key) -> bool:
        path = self.path_for(folder, key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def rename(self, folder: str, old_key, new_key) -> Path:
        src = self.path_for(folder, old_key)
        dest = self.path_for(folder, new_key)
        if not src.exists():
            raise FileNotFoundError(str(src))
        src.replace(dest)
        return dest


image_store = ImageStore(PICTURES_DIR)


def get_image_store() -> ImageStore:
    return image_store


class ImageSync:
    """
    Ties image side effects to a Transaction.

    New images and renamed copies are staged immediately (so a bad upload fails the
    transaction before commit), then promoted once the transaction commits or discarded
    if it rolls back. Deletes are only queued and run after the commit.
    """

    def __init__(self, store: ImageStore, tx):
        self.store = store
        self._staged: list[Path] = []
        self._actions: list[tuple[str, Callable[[], object]]] = []
        tx.after_commit(self._finalize)
        tx.after_rollback(self._discard)

    def put(self, folder: str, key, data: bytes) -> None:
        staged = self.store.stage(folder, key, data)
        self._staged.append(staged)
        self._actions.append((f"promote {folder}/{key}", lambda: self.store.promote(staged, folder, key)))

    def rename(self, folder: str, old_key, new_key) -> None:
        """
        Stage a copy under the new key now; promote it and drop the old file after the
        commit. The sweep never removes a fresh staging file, so the picture survives a
        sweep that runs between the commit and the promotion.
        """
        if not self.store.exists(folder, old_key):
            logger.warning("No image to rename at %s/%s", folder, old_key)
            return
        staged = self.store.stage_copy(folder, old_key, new_key)
        self._staged.append(staged)
        self._actions.append((f"promote {folder}/{new_key}", lambda: self.store.promote(staged, folder, new_key)))
        self._actions.append((f"delete {folder}/{old_key}", lambda: self.store.delete(folder, old_key)))

    def delete(self, folder: str, key) -> None:
        self._actions.append((f"delete {folder}/{key}", lambda: self.store.delete(folder, key)))

    def _finalize(self) -> None:
        for label, action in self._actions:
            try:
                action()
            except Exception:
                # the rows are already committed; the sweep picks up whatever is left
                logger.exception("Post-commit image step failed: %s", label)
        self._actions.clear()
        self._staged.clear()

    def _discard(self) -> None:
        for staged in self._staged:
            try:
                self.store.discard(staged)
            except OSError:
                logger.warning("Could not remove staged image %s", staged)
        self._actions.clear()
        self._staged.clear()


def sweep_images(session: Session, store: ImageStore, staging_max_age: float | None = None) -> dict:
    """
    Reconcile the picture folders with the rows that own them.

    - removes staging files older than `staging_max_age` seconds
    - removes images whose platform / video game row no longer exists
    - reports rows that have no image

    Files are listed before rows are read. A final image only appears after its row
    committed, and a renamed image is copied to staging before the commit, so a listed
    image without a row is either deleted or already has its staged successor.
    """
    if staging_max_age is None:
        staging_max_age = TRANSACTION_TIMEOUT * 2

    results = {"removed": [], "missing": []}
    now = time.time()

    listed = {
        PLATFORM_FOLDER: store.keys(PLATFORM_FOLDER),
        VIDEO_GAME_FOLDER: store.keys(VIDEO_GAME_FOLDER),
    }
    owners = {
        PLATFORM_FOLDER: {code for (code,) in session.query(Platform.code).all()},
        VIDEO_GAME_FOLDER: {str(vg_id) for (vg_id,) in session.query(VideoGame.id).all()},
    }

    for folder, keys in listed.items():
        staging = store.root / folder / STAGING_DIR
        if staging.exists():
            for staged in staging.iterdir():
                if staged.is_file() and now - staged.stat().st_mtime > staging_max_age:
                    staged.unlink(missing_ok=True)
                    results["removed"].append(f"{folder}/{STAGING_DIR}/{staged.name}")

        for key in keys:
            if key not in owners[folder]:
                store.delete(folder, key)
                results["removed"].append(f"{folder}/{key}.png")
                logger.info("Deleted orphaned image %s/%s", folder, key)

        for key in sorted(owners[folder] - set(store.keys(folder))):
            results["missing"].append(f"{folder}/{key}.png")

    if results["missing"]:
        logger.warning("%d row(s) have no image", len(results["missing"]))
    logger.info("Image sweep completed: %d removed", len(results["removed"]))
    return results
