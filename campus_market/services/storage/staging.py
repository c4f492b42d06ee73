import asyncio
import os
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile
from loguru import logger

from campus_market.services.exceptions import FieldValidationError

CHUNK_SIZE = 64 * 1024


@dataclass
class StagedImage:
    """A locally held copy of an uploaded image, valid until released."""

    token: str
    path: Path
    filename: str
    content_type: str
    size: int
    released: bool = field(default=False)


class ImageStagingArea:
    """
    Holds uploaded images on local disk until they reach the object store.

    Use it as an async context manager: every handle still held when the
    block exits is released, whether the upload succeeded or raised.
    """

    def __init__(self, directory: Path, max_images: int, max_bytes: int) -> None:
        self.directory = Path(directory)
        self.max_images = max_images
        self.max_bytes = max_bytes
        self._held: dict[str, StagedImage] = {}

    async def __aenter__(self) -> "ImageStagingArea":
        self.directory.mkdir(parents=True, exist_ok=True)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release_all()

    @property
    def held(self) -> list[StagedImage]:
        return list(self._held.values())

    async def acquire(self, upload: UploadFile) -> StagedImage:
        """
        Copy ``upload`` into the staging directory.

        :raises FieldValidationError: on too many images, a non image file or
            a file over the size limit.
        """
        if len(self._held) >= self.max_images:
            raise FieldValidationError(
                "images", f"Maximum {self.max_images} images allowed"
            )

        filename = upload.filename or "image"
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise FieldValidationError("images", f"{filename} is not an image")

        self.directory.mkdir(parents=True, exist_ok=True)
        fd, raw_path = tempfile.mkstemp(prefix="staged-", dir=self.directory)
        path = Path(raw_path)
        size = 0
        try:
            with os.fdopen(fd, "wb") as target:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    if size > self.max_bytes:
                        limit_mb = self.max_bytes // (1024 * 1024)
                        raise FieldValidationError(
                            "images", f"{filename} exceeds {limit_mb}MB limit"
                        )
                    await asyncio.to_thread(target.write, chunk)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        if size == 0:
            path.unlink(missing_ok=True)
            raise FieldValidationError("images", f"{filename} is empty")

        staged = StagedImage(
            token=uuid4().hex,
            path=path,
            filename=filename,
            content_type=content_type,
            size=size,
        )
        self._held[staged.token] = staged
        return staged

    def release(self, staged: StagedImage) -> None:
        if staged.released:
            return
        self._held.pop(staged.token, None)
        staged.path.unlink(missing_ok=True)
        staged.released = True

    def release_all(self) -> None:
        for staged in list(self._held.values()):
            self.release(staged)


def sweep_staging_dir(directory: Path, max_age_minutes: int) -> int:
    """Delete staged files left behind by crashed workers, return how many."""
    directory = Path(directory)
    if not directory.exists():
        return 0

    cutoff = time.time() - max_age_minutes * 60
    removed = 0
    for path in directory.glob("staged-*"):
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning("Could not remove staged file {}: {}", path, e)
    return removed
