"""
Chunked binary storage tables.
Large uploads are split into fixed-size chunks under a named bucket,
mirroring the files/chunks layout of GridFS.
"""

from sqlalchemy import String, Integer, BigInteger, LargeBinary, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base
import uuid
from typing import Optional


class BlobFile(Base):
    """File metadata for a stored blob."""

    __tablename__ = "blob_files"
    __table_args__ = (
        UniqueConstraint("bucket", "filename", name="uq_blob_files_bucket_filename"),
    )

    bucket: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    filename: Mapped[str] = mapped_column(String(255), nullable=False)

    content_type: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    length: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    chunk_size: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<BlobFile(bucket={self.bucket}, filename={self.filename}, length={self.length})>"


class BlobChunk(Base):
    """One chunk of a stored blob, numbered from zero."""

    __tablename__ = "blob_chunks"

    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("blob_files.id", ondelete="CASCADE"),
        nullable=False
    )

    n: Mapped[int] = mapped_column(Integer, nullable=False)

    data: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)


Index("idx_blob_chunks_file_n", BlobChunk.file_id, BlobChunk.n, unique=True)
