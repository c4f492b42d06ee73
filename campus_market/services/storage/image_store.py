import asyncio

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import storage
from google.api_core import exceptions as google_exceptions
from loguru import logger

from campus_market.services.exceptions import StoreError
from campus_market.services.storage.staging import StagedImage

STORAGE_ERRORS = (firebase_exceptions.FirebaseError, google_exceptions.GoogleAPIError)


class ImageStore:
    """Listing images in the Firebase Cloud Storage bucket."""

    def __init__(self, bucket=None) -> None:
        self._bucket = bucket

    @property
    def bucket(self):
        if self._bucket is None:
            self._bucket = storage.bucket()
        return self._bucket

    async def upload(self, path: str, image: StagedImage) -> str:
        """Upload a staged image to ``path`` and return its public URL."""

        def _upload() -> str:
            blob = self.bucket.blob(path)
            blob.upload_from_filename(str(image.path), content_type=image.content_type)
            blob.make_public()
            return blob.public_url

        try:
            return await asyncio.to_thread(_upload)
        except STORAGE_ERRORS as e:
            logger.error("Uploading {} to {} failed: {}", image.filename, path, e)
            raise StoreError(f"Failed to upload {image.filename}.") from e

    async def delete(self, path: str) -> None:
        def _delete() -> None:
            self.bucket.blob(path).delete()

        try:
            await asyncio.to_thread(_delete)
        except google_exceptions.NotFound:
            logger.debug("Blob {} already gone", path)
        except STORAGE_ERRORS as e:
            raise StoreError(f"Failed to delete {path}.") from e


def get_image_store() -> ImageStore:
    return ImageStore()
