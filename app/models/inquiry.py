"""
Inquiry model for buyer leads.
An inquiry is submitted publicly against one property and handled by its owner.
"""

from sqlalchemy import String, Text, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
import enum
import re
import uuid
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.property import Property


EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MAX_MESSAGE_LENGTH = 1000


class InquiryStatus(str, enum.Enum):
    """Follow-up state of an inquiry."""
    PENDING = "pending"
    CONTACTED = "contacted"
    CLOSED = "closed"


class Inquiry(Base):
    """Contact request left by a prospective buyer."""

    __tablename__ = "inquiries"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Inquirer email, matched against a basic pattern"
    )

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Inquiry message (max 1000 characters)"
    )

    status: Mapped[InquiryStatus] = mapped_column(
        SQLEnum(InquiryStatus),
        nullable=False,
        default=InquiryStatus.PENDING,
        index=True
    )

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    property: Mapped["Property"] = relationship("Property", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Inquiry(id={self.id}, property_id={self.property_id}, status={self.status})>"

    @staticmethod
    def is_valid_email(email: str) -> bool:
        """Check an address against the basic email pattern."""
        return bool(email and EMAIL_PATTERN.match(email))

    def to_dict(self, include_property: bool = True) -> dict:
        """
        Convert inquiry to dictionary.

        Args:
            include_property: Whether to join the referenced property summary

        Returns:
            Dictionary representation of inquiry
        """
        result = {
            "id": str(self.id),
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "message": self.message,
            "status": self.status.value,
            "property_id": str(self.property_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_property and self.property:
            listing = self.property
            result["property"] = {
                "id": str(listing.id),
                "title": listing.title,
                "price": float(listing.price),
                "images": list(listing.images or []),
                "owner": listing.owner.to_summary() if listing.owner else None,
            }

        return result
