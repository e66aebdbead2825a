"""
Serves files kept in the chunked blob store.
"""

from fastapi import APIRouter, Depends, Path, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repositories.blob import get_blob_bucket
from app.utils.exceptions import NotFoundError
from app.utils.file_utils import FileValidator, MODEL_MIME_TYPES
from app.schemas.error import get_public_error_responses


router = APIRouter(prefix="/files", tags=["Files"])


@router.get(
    "/{bucket}/{filename}",
    status_code=status.HTTP_200_OK,
    summary="Download a stored file",
    description="Stream a file from the blob store, e.g. a 3D model uploaded with the gridfs backend.",
    responses=get_public_error_responses()
)
async def get_stored_file(
    bucket: str = Path(..., description="Bucket name"),
    filename: str = Path(..., description="Stored filename"),
    db: AsyncSession = Depends(get_db)
) -> StreamingResponse:
    """
    Stream a stored file chunk by chunk.

    Raises:
        NotFoundError: If no such file exists in the bucket
    """
    blob_bucket = get_blob_bucket(db, bucket)
    stored = await blob_bucket.find_by_name(filename)
    if stored is None:
        raise NotFoundError("File")

    media_type = (
        stored.content_type
        or MODEL_MIME_TYPES.get(FileValidator.get_extension(filename))
        or "application/octet-stream"
    )

    return StreamingResponse(
        blob_bucket.iter_chunks(stored.id),
        media_type=media_type,
        headers={
            "Content-Length": str(stored.length),
            "Access-Control-Allow-Origin": "*",
        }
    )
