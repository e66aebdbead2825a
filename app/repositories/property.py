"""
Property repository for listing search, similarity lookups and owner analytics.
Translates search filters into SQLAlchemy conditions and runs the aggregation queries.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_, func, desc, asc, extract, literal_column
from app.repositories.base import BaseRepository
from app.models.property import Property, PropertyType, PropertyStatus
from app.models.inquiry import Inquiry
from app.models.favorite import Favorite
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid
import logging

logger = logging.getLogger(__name__)

# Must stay in sync with the expression of the idx_properties_fulltext index
FULLTEXT_DOCUMENT = (
    "to_tsvector('english', properties.title || ' ' || "
    "properties.description || ' ' || properties.location)"
)

SIMILAR_PRICE_BAND = Decimal("0.2")
SIMILAR_LIMIT = 4


class PropertySearchFilters:
    """Data class for property search filters."""

    SORT_OPTIONS = ("price-asc", "price-desc", "newest")

    def __init__(
        self,
        search_text: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        property_type: Optional[PropertyType] = None,
        location: Optional[str] = None,
        owner_id: Optional[uuid.UUID] = None,
        sort: Optional[str] = None
    ):
        self.search_text = search_text
        self.min_price = min_price
        self.max_price = max_price
        self.property_type = property_type
        self.location = location
        self.owner_id = owner_id
        self.sort = sort


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property listings.
    The owner relationship is loaded with every property.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect the session is bound to."""
        return self.db.get_bind().dialect.name

    async def create_property(self, property_data: Dict[str, Any]) -> Property:
        """
        Create a new property with validation.

        Args:
            property_data: Dictionary containing property information

        Returns:
            Created property instance

        Raises:
            ValueError: If validation fails
        """
        try:
            Property(**property_data).validate_all()

            created_property = await self.create(property_data)
            logger.info(f"Created property: {created_property.title} (ID: {created_property.id})")
            return created_property
        except ValueError as e:
            logger.error(f"Property validation failed: {e}")
            raise

    async def search_properties(self, filters: PropertySearchFilters) -> List[Property]:
        """
        Search properties. Filters are combined conjunctively and the
        full result set is returned.

        Args:
            filters: PropertySearchFilters instance with search criteria

        Returns:
            List of matching properties
        """
        try:
            query = select(Property)

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))

            if filters.sort == "price-asc":
                query = query.order_by(asc(Property.price))
            elif filters.sort == "price-desc":
                query = query.order_by(desc(Property.price))
            else:
                # "newest" and anything unrecognised
                query = query.order_by(desc(Property.created_at))

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} results")
            return list(properties)
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from search filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        if filters.search_text and filters.search_text.strip():
            conditions.append(self._text_search_condition(filters.search_text))

        if filters.min_price is not None:
            conditions.append(Property.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Property.price <= filters.max_price)

        if filters.property_type:
            conditions.append(Property.property_type == filters.property_type)

        # Location filter (case-insensitive partial match)
        if filters.location:
            conditions.append(Property.location.icontains(filters.location, autoescape=True))

        if filters.owner_id:
            conditions.append(Property.owner_id == filters.owner_id)

        return conditions

    def _text_search_condition(self, search_text: str):
        """
        Match any search term against title, description and location.
        PostgreSQL uses the full text index; other dialects fall back to substring matching.
        """
        terms = search_text.split()

        if self.dialect_name == "postgresql":
            document = literal_column(FULLTEXT_DOCUMENT)
            return or_(*[
                document.op("@@")(func.plainto_tsquery("english", term))
                for term in terms
            ])

        term_conditions = []
        for term in terms:
            term_conditions.extend([
                Property.title.icontains(term, autoescape=True),
                Property.description.icontains(term, autoescape=True),
                Property.location.icontains(term, autoescape=True)
            ])
        return or_(*term_conditions)

    async def increment_views(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Atomically increment the view counter of a property.

        Args:
            property_id: UUID of the property

        Returns:
            The property with its new view count, or None if not found
        """
        try:
            stmt = (
                update(Property)
                .where(Property.id == property_id)
                .values(views=Property.views + 1)
                .execution_options(synchronize_session=False)
            )
            result = await self.db.execute(stmt)
            await self.db.commit()

            if result.rowcount == 0:
                return None

            return await self.get_by_id(property_id)
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to increment views for property {property_id}: {e}")
            raise

    async def get_similar_properties(self, source: Property, limit: int = SIMILAR_LIMIT) -> List[Property]:
        """
        Get properties of the same type priced within 20% of the source.

        Args:
            source: Property to compare against
            limit: Maximum number of properties to return

        Returns:
            List of similar properties, never including the source
        """
        try:
            price = Decimal(source.price)
            lower = price * (1 - SIMILAR_PRICE_BAND)
            upper = price * (1 + SIMILAR_PRICE_BAND)

            query = (
                select(Property)
                .where(
                    and_(
                        Property.id != source.id,
                        Property.property_type == source.property_type,
                        Property.price >= lower,
                        Property.price <= upper
                    )
                )
                .limit(limit)
            )

            result = await self.db.execute(query)
            return list(result.scalars().all())
        except Exception as e:
            logger.error(f"Failed to get similar properties for {source.id}: {e}")
            raise

    async def get_properties_by_owner(self, owner_id: uuid.UUID) -> List[Property]:
        """
        Get properties owned by a user, newest first.

        Args:
            owner_id: UUID of the owner

        Returns:
            List of properties
        """
        return await self.get_multi(filters={"owner_id": owner_id}, order_by="-created_at")

    async def get_titles(self) -> List[str]:
        """Get every listing title."""
        result = await self.db.execute(select(Property.title))
        return list(result.scalars().all())

    async def update_property_status(self, property_id: uuid.UUID, status: PropertyStatus) -> Optional[Property]:
        """
        Update the sale status of a property.

        Args:
            property_id: UUID of the property
            status: New status

        Returns:
            Updated property or None if not found
        """
        updated_property = await self.update(property_id, {"status": status})
        if updated_property:
            logger.info(f"Property {property_id} status set to {status.value}")
        return updated_property

    async def delete_property_cascade(self, property_id: uuid.UUID) -> bool:
        """
        Delete a property together with its inquiries and favorite references.

        Args:
            property_id: UUID of the property to delete

        Returns:
            True if property was deleted, False if not found
        """
        try:
            await self.db.execute(delete(Inquiry).where(Inquiry.property_id == property_id))
            await self.db.execute(delete(Favorite).where(Favorite.property_id == property_id))
            result = await self.db.execute(delete(Property).where(Property.id == property_id))
            await self.db.commit()

            deleted = result.rowcount > 0
            if deleted:
                logger.info(f"Deleted property {property_id} with its inquiries and favorites")
            return deleted
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete property {property_id}: {e}")
            raise

    async def count_by_status(self, owner_id: uuid.UUID) -> Dict[str, int]:
        """
        Count an owner's properties per status.

        Args:
            owner_id: UUID of the owner

        Returns:
            Mapping of status value to count, including zero counts
        """
        try:
            query = (
                select(Property.status, func.count(Property.id))
                .where(Property.owner_id == owner_id)
                .group_by(Property.status)
            )
            result = await self.db.execute(query)

            counts = {status.value: 0 for status in PropertyStatus}
            for status, count in result.all():
                counts[status.value] = count
            return counts
        except Exception as e:
            logger.error(f"Failed to count properties by status for {owner_id}: {e}")
            raise

    async def count_by_type(self, owner_id: uuid.UUID) -> List[Dict[str, Any]]:
        """
        Count an owner's properties per property type.

        Args:
            owner_id: UUID of the owner

        Returns:
            List of {"property_type", "count"} entries
        """
        try:
            query = (
                select(Property.property_type, func.count(Property.id))
                .where(Property.owner_id == owner_id)
                .group_by(Property.property_type)
            )
            result = await self.db.execute(query)
            return [
                {"property_type": property_type.value, "count": count}
                for property_type, count in result.all()
            ]
        except Exception as e:
            logger.error(f"Failed to count properties by type for {owner_id}: {e}")
            raise

    async def count_by_month(self, owner_id: uuid.UUID, since: datetime) -> List[Dict[str, int]]:
        """
        Count an owner's properties created per calendar month.

        Args:
            owner_id: UUID of the owner
            since: Only properties created at or after this moment are counted

        Returns:
            List of {"year", "month", "count"} entries in ascending order
        """
        try:
            year = extract("year", Property.created_at).label("year")
            month = extract("month", Property.created_at).label("month")

            query = (
                select(year, month, func.count(Property.id))
                .where(and_(Property.owner_id == owner_id, Property.created_at >= since))
                .group_by(year, month)
                .order_by(year, month)
            )
            result = await self.db.execute(query)
            return [
                {"year": int(row_year), "month": int(row_month), "count": count}
                for row_year, row_month, count in result.all()
            ]
        except Exception as e:
            logger.error(f"Failed to count properties by month for {owner_id}: {e}")
            raise

    async def get_most_viewed(self, owner_id: uuid.UUID, limit: int = 5) -> List[Property]:
        """
        Get an owner's most viewed properties.

        Args:
            owner_id: UUID of the owner
            limit: Maximum number of properties to return

        Returns:
            List of properties ordered by views descending
        """
        return await self.get_multi(filters={"owner_id": owner_id}, order_by="-views", limit=limit)
