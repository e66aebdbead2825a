"""
Property model for marketplace listings.
Handles listing data with location, pricing, media URLs and ownership.
"""

from sqlalchemy import (
    String, Text, Integer, Numeric, Boolean, JSON, DDL, Enum as SQLEnum, Index, ForeignKey, Uuid, event
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.database import Base
from decimal import Decimal
import enum
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from app.models.user import User


class PropertyType(str, enum.Enum):
    """Kinds of real estate that can be listed."""
    HOUSE = "house"
    APARTMENT = "apartment"
    VILLA = "villa"
    CONDO = "condo"
    LAND = "land"
    COMMERCIAL = "commercial"


class PropertyStatus(str, enum.Enum):
    """Sale status of a listing."""
    AVAILABLE = "available"
    PENDING = "pending"
    SOLD = "sold"


class Property(Base):
    """
    Property listing owned by a seller or admin.
    Images are kept as an ordered list of public URLs.
    """

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        index=True,
        comment="Property listing title"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description (max 2000 characters)"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=14, scale=2),
        nullable=False,
        comment="Asking price"
    )

    location: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Free text address"
    )

    latitude: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=8),
        nullable=True,
        comment="Property latitude coordinate"
    )

    longitude: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=11, scale=8),
        nullable=True,
        comment="Property longitude coordinate"
    )

    images: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered list of image URLs"
    )

    model_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        comment="URL of the 3D model asset"
    )

    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    area: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Floor area in square feet"
    )

    property_type: Mapped[PropertyType] = mapped_column(
        SQLEnum(PropertyType),
        nullable=False,
        default=PropertyType.HOUSE,
        comment="Kind of property"
    )

    status: Mapped[PropertyStatus] = mapped_column(
        SQLEnum(PropertyStatus),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
        comment="Sale status"
    )

    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    views: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of detail page fetches"
    )

    seo_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    seo_description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="ID of the user who owns this listing"
    )

    owner: Mapped["User"] = relationship("User", lazy="selectin")

    def __repr__(self) -> str:
        """String representation of the property."""
        return f"<Property(id={self.id}, title={self.title[:30]}..., price={self.price})>"

    def validate_price(self) -> None:
        """
        Validate property price.

        Raises:
            ValueError: If price is negative
        """
        if self.price is None or self.price < 0:
            raise ValueError("Property price cannot be negative")

    def validate_counts(self) -> None:
        """
        Validate bedrooms, bathrooms and area.

        Raises:
            ValueError: If any count is negative
        """
        for field_name in ("bedrooms", "bathrooms", "area"):
            if (getattr(self, field_name) or 0) < 0:
                raise ValueError(f"{field_name.capitalize()} cannot be negative")

    def validate_description(self) -> None:
        """
        Validate description length.

        Raises:
            ValueError: If description is too long
        """
        if self.description and len(self.description) > 2000:
            raise ValueError("Description cannot be more than 2000 characters")

    def validate_all(self) -> None:
        """
        Run all validation checks on the property.

        Raises:
            ValueError: If any validation fails
        """
        self.validate_price()
        self.validate_counts()
        self.validate_description()

    def to_dict(self, include_owner: bool = True, include_owner_phone: bool = False) -> dict:
        """
        Convert property to dictionary.

        Args:
            include_owner: Whether to join owner name and email
            include_owner_phone: Whether to also join the owner's phone

        Returns:
            Dictionary representation of property
        """
        result = {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "location": self.location,
            "latitude": float(self.latitude) if self.latitude is not None else None,
            "longitude": float(self.longitude) if self.longitude is not None else None,
            "images": list(self.images or []),
            "model_url": self.model_url,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "area": self.area,
            "property_type": self.property_type.value,
            "status": self.status.value,
            "featured": self.featured,
            "views": self.views,
            "seo_title": self.seo_title,
            "seo_description": self.seo_description,
            "owner_id": str(self.owner_id),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

        if include_owner and self.owner:
            result["owner"] = self.owner.to_summary(include_phone=include_owner_phone)

        return result


# Filter indexes for the listing query
Index('idx_properties_price', Property.price)
Index('idx_properties_type_price', Property.property_type, Property.price)
Index('idx_properties_status', Property.status)
Index('idx_properties_owner_created', Property.owner_id, Property.created_at.desc())

# Full text index over title, description and location (PostgreSQL only)
event.listen(
    Property.__table__,
    "after_create",
    DDL(
        "CREATE INDEX IF NOT EXISTS idx_properties_fulltext ON properties "
        "USING gin (to_tsvector('english', title || ' ' || description || ' ' || location))"
    ).execute_if(dialect="postgresql")
)
