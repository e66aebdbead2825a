"""
Chunked blob store on top of the relational database.
Files are written as numbered chunks under a named bucket, in the style of GridFS.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from app.config import settings
from app.models.blob import BlobFile, BlobChunk
from app.utils.exceptions import ServiceUnavailableError
from typing import AsyncIterator, Optional
import uuid
import logging

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "models"


class BlobBucket:
    """
    Handle to one named bucket of the blob store.
    Obtain instances through get_blob_bucket().
    """

    def __init__(self, db: AsyncSession, bucket_name: str = DEFAULT_BUCKET, chunk_size: Optional[int] = None):
        self.db = db
        self.bucket_name = bucket_name
        self.chunk_size = chunk_size or settings.blob_chunk_size

    async def upload_from_stream(self, filename: str, source, content_type: Optional[str] = None) -> BlobFile:
        """
        Store the contents of a readable source under a filename.

        Args:
            filename: Name of the stored file, unique within the bucket
            source: Object with an async read(size) method, such as an UploadFile
            content_type: Content type recorded with the file

        Returns:
            Metadata row of the stored file
        """
        try:
            blob_file = BlobFile(
                bucket=self.bucket_name,
                filename=filename,
                content_type=content_type,
                length=0,
                chunk_size=self.chunk_size
            )
            self.db.add(blob_file)
            await self.db.flush()

            length = 0
            n = 0
            while True:
                data = await source.read(self.chunk_size)
                if not data:
                    break
                self.db.add(BlobChunk(file_id=blob_file.id, n=n, data=data))
                length += len(data)
                n += 1

            blob_file.length = length
            await self.db.commit()

            logger.info(f"Stored blob {self.bucket_name}/{filename} ({length} bytes in {n} chunks)")
            return blob_file
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to store blob {self.bucket_name}/{filename}: {e}")
            raise

    async def find_by_name(self, filename: str) -> Optional[BlobFile]:
        """
        Look up a stored file by name.

        Args:
            filename: Name of the stored file

        Returns:
            Metadata row, or None if the file does not exist
        """
        query = select(BlobFile).where(
            BlobFile.bucket == self.bucket_name,
            BlobFile.filename == filename
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def iter_chunks(self, file_id: uuid.UUID) -> AsyncIterator[bytes]:
        """
        Yield the chunks of a stored file in order, one query per chunk,
        so only a single chunk is held in memory at a time.

        Args:
            file_id: UUID of the stored file

        Yields:
            Chunk payloads, starting at chunk 0
        """
        n = 0
        while True:
            query = select(BlobChunk.data).where(
                BlobChunk.file_id == file_id,
                BlobChunk.n == n
            )
            data = (await self.db.execute(query)).scalar_one_or_none()
            if data is None:
                return
            yield data
            n += 1

    async def delete_by_name(self, filename: str) -> bool:
        """
        Delete a stored file and its chunks.

        Args:
            filename: Name of the stored file

        Returns:
            True if a file was deleted
        """
        try:
            blob_file = await self.find_by_name(filename)
            if blob_file is None:
                return False

            await self.db.execute(delete(BlobChunk).where(BlobChunk.file_id == blob_file.id))
            await self.db.execute(delete(BlobFile).where(BlobFile.id == blob_file.id))
            await self.db.commit()
            logger.info(f"Deleted blob {self.bucket_name}/{filename}")
            return True
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete blob {self.bucket_name}/{filename}: {e}")
            raise


def get_blob_bucket(db: Optional[AsyncSession], bucket_name: str = DEFAULT_BUCKET) -> BlobBucket:
    """
    Get a handle to a blob bucket for storing or streaming files.

    Args:
        db: Active database session
        bucket_name: Name of the bucket

    Returns:
        BlobBucket bound to the session

    Raises:
        ServiceUnavailableError: If no database session is available
    """
    if db is None:
        raise ServiceUnavailableError("Database not connected")
    return BlobBucket(db, bucket_name)
