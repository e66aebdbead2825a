"""
Demo listing generator.
Fabricates a set of type-diverse featured listings for a seller from curated templates.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
import time

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.property import Property, PropertyType
from app.models.user import User
from app.repositories.property import PropertyRepository
from app.utils.exceptions import APIException, InternalServerError

logger = logging.getLogger(__name__)

SEED_COUNT = 6
IMAGES_PER_LISTING = 4


def _unsplash(photo_id: str) -> str:
    return f"https://images.unsplash.com/photo-{photo_id}?w=1200&h=800&fit=crop"


IMAGE_POOLS: Dict[PropertyType, List[str]] = {
    PropertyType.VILLA: [
        _unsplash("1597047084897-51e81819a499"),
        _unsplash("1613977257593-9c0120ff9d2f"),
        _unsplash("1600585154526-990dced4db0d"),
        _unsplash("1500462918059-b1a0cb512f1d"),
        _unsplash("1523217582562-09d0def993a6"),
    ],
    PropertyType.APARTMENT: [
        _unsplash("1494526585095-c41746248156"),
        _unsplash("1499955085172-a104c9463ece"),
        _unsplash("1512917774080-9991f1c4c750"),
        _unsplash("1501183638710-841dd1904471"),
    ],
    PropertyType.HOUSE: [
        _unsplash("1505691723518-36a5ac3b2d53"),
        _unsplash("1560185008-b033106af195"),
        _unsplash("1560448075-bb4caa6c8e0e"),
        _unsplash("1600585154154-1e47e6a6fcb9"),
    ],
    PropertyType.CONDO: [
        _unsplash("1522708323590-d24dbb6b0267"),
        _unsplash("1493809842364-78817add7ffb"),
        _unsplash("1449844908441-8829872d2607"),
        _unsplash("1460353581641-37baddab0fa2"),
    ],
    PropertyType.COMMERCIAL: [
        _unsplash("1486406146926-c627a92ad1ab"),
        _unsplash("1461713086041-1c3cf1d45084"),
        _unsplash("1503387762-592deb58ef4e"),
        _unsplash("1449157291145-7efd050a4d0e"),
    ],
    PropertyType.LAND: [
        _unsplash("1500530855697-b586d89ba3ee"),
        _unsplash("1469474968028-56623f02e42e"),
        _unsplash("1469474968028-988cbb503d1b"),
        _unsplash("1495107334309-fcf20504a5ab"),
    ],
}

DEMO_MODELS = [
    "https://res.cloudinary.com/dpu6txhox/image/upload/v1762079555/apartnemt2_ueinwq.glb",
    "https://res.cloudinary.com/dpu6txhox/image/upload/v1762079372/house2_o3dvos.glb",
    "https://res.cloudinary.com/dpu6txhox/image/upload/v1762079372/house_1_mrvbpf.glb",
    "https://res.cloudinary.com/dpu6txhox/image/upload/v1762079372/vilal_2_ss2zg3.glb",
    "https://res.cloudinary.com/dpu6txhox/image/upload/v1762079372/villa1_xuzoha.glb",
    "https://res.cloudinary.com/dpu6txhox/image/upload/v1762079372/Apartment_hjf7bn.glb",
]

LISTING_TEMPLATES: List[Dict[str, Any]] = [
    {
        "title": "Contemporary Villa with Pool - I",
        "description": "Elegant 5BHK villa with private pool, landscaped garden, and premium clubhouse access.",
        "price": Decimal("32000000"),
        "location": "Whitefield, Bengaluru, Karnataka",
        "bedrooms": 5, "bathrooms": 5, "area": 4100,
        "property_type": PropertyType.VILLA,
    },
    {
        "title": "Contemporary Villa with Pool - II",
        "description": "Stunning 5BHK villa featuring home automation, deck sit-out, and double-height living.",
        "price": Decimal("38000000"),
        "location": "Whitefield, Bengaluru, Karnataka",
        "bedrooms": 5, "bathrooms": 5, "area": 4200,
        "property_type": PropertyType.VILLA,
    },
    {
        "title": "Luxury Sea-Facing Apartment",
        "description": "Premium 3BHK apartment with Arabian Sea views and modern amenities.",
        "price": Decimal("27000000"),
        "location": "Bandra West, Mumbai, Maharashtra",
        "bedrooms": 3, "bathrooms": 3, "area": 1650,
        "property_type": PropertyType.APARTMENT,
    },
    {
        "title": "Family Home near Lake Park",
        "description": "Independent 4BHK house with a private terrace, car porch, and walking access to the lake.",
        "price": Decimal("18500000"),
        "location": "HSR Layout, Bengaluru, Karnataka",
        "bedrooms": 4, "bathrooms": 3, "area": 2400,
        "property_type": PropertyType.HOUSE,
    },
    {
        "title": "Skyline View Condo",
        "description": "High-rise condo with skyline views, concierge, and rooftop lounge.",
        "price": Decimal("22000000"),
        "location": "Hiranandani Gardens, Powai, Mumbai",
        "bedrooms": 2, "bathrooms": 2, "area": 1250,
        "property_type": PropertyType.CONDO,
    },
    {
        "title": "Grade-A Office Space",
        "description": "Premium commercial office space with plug-and-play fitouts and ample parking.",
        "price": Decimal("60000000"),
        "location": "DLF Cybercity, Gurgaon, Haryana",
        "bedrooms": 0, "bathrooms": 2, "area": 6000,
        "property_type": PropertyType.COMMERCIAL,
    },
    {
        "title": "Prime Residential Land Plot",
        "description": "East-facing corner plot in a gated layout with 12m wide road access.",
        "price": Decimal("15000000"),
        "location": "Narsingi, Hyderabad, Telangana",
        "bedrooms": 0, "bathrooms": 0, "area": 3600,
        "property_type": PropertyType.LAND,
    },
    {
        "title": "Contemporary Villa with Pool - III",
        "description": "Premium 5BHK villa with private courtyard, sky lounge, and spa room.",
        "price": Decimal("45000000"),
        "location": "Whitefield, Bengaluru, Karnataka",
        "bedrooms": 5, "bathrooms": 6, "area": 4500,
        "property_type": PropertyType.VILLA,
    },
    {
        "title": "Garden Apartment in Gated Community",
        "description": "Ground-floor 2BHK apartment with a private garden, gym, and children's play area.",
        "price": Decimal("9500000"),
        "location": "Baner, Pune, Maharashtra",
        "bedrooms": 2, "bathrooms": 2, "area": 1100,
        "property_type": PropertyType.APARTMENT,
    },
    {
        "title": "Heritage Bungalow Restored",
        "description": "Restored colonial-era bungalow with high ceilings, courtyard, and mature trees.",
        "price": Decimal("52000000"),
        "location": "Alwarpet, Chennai, Tamil Nadu",
        "bedrooms": 4, "bathrooms": 4, "area": 3800,
        "property_type": PropertyType.HOUSE,
    },
    {
        "title": "Riverside Studio Condo",
        "description": "Compact studio condo overlooking the river with co-working lounge and valet parking.",
        "price": Decimal("7800000"),
        "location": "Koregaon Park, Pune, Maharashtra",
        "bedrooms": 1, "bathrooms": 1, "area": 620,
        "property_type": PropertyType.CONDO,
    },
    {
        "title": "Farmland with Orchard",
        "description": "Two-acre farmland with a mango orchard, borewell, and approach road.",
        "price": Decimal("6500000"),
        "location": "Chevella, Hyderabad, Telangana",
        "bedrooms": 0, "bathrooms": 0, "area": 87120,
        "property_type": PropertyType.LAND,
    },
]


def pick_templates(templates: List[Dict[str, Any]], count: int = SEED_COUNT) -> List[Dict[str, Any]]:
    """
    Choose templates, one per property type first, then in pool order.

    Args:
        templates: Template pool
        count: Number of templates wanted

    Returns:
        Selected templates
    """
    seen_types = set()
    chosen = []
    for template in templates:
        if template["property_type"] not in seen_types:
            seen_types.add(template["property_type"])
            chosen.append(template)
        if len(chosen) >= count:
            return chosen

    for template in templates:
        if len(chosen) >= count:
            break
        if template not in chosen:
            chosen.append(template)
    return chosen


def pick_images(property_type: PropertyType, index: int, seed: int) -> List[str]:
    """Four images from the type's pool, starting at a rotating offset."""
    pool = IMAGE_POOLS.get(property_type) or IMAGE_POOLS[PropertyType.HOUSE]
    base = (index * 2 + seed) % len(pool)
    return [pool[(base + step) % len(pool)] for step in range(IMAGES_PER_LISTING)]


class SeedService:
    """Creates demo listings for the calling seller or admin."""

    def __init__(self, db_session: AsyncSession, templates: Optional[List[Dict[str, Any]]] = None):
        self.db = db_session
        self.templates = templates or LISTING_TEMPLATES
        self.property_repo = PropertyRepository(db_session)

    async def seed_listings(self, owner: User) -> List[Property]:
        """
        Create up to six featured demo listings owned by a user.
        Titles already in use get a " #NNNN" suffix.

        Args:
            owner: User who will own the listings

        Returns:
            The owner's full listing, newest first
        """
        try:
            millis = int(time.time() * 1000)
            suffix = str(millis)[-4:]
            existing_titles = set(await self.property_repo.get_titles())

            listings = []
            for index, template in enumerate(pick_templates(self.templates)):
                title = template["title"]
                if title in existing_titles:
                    title = f"{title} #{suffix}"

                listings.append({
                    **template,
                    "title": title,
                    "images": pick_images(template["property_type"], index, millis % 7),
                    "model_url": DEMO_MODELS[index % len(DEMO_MODELS)],
                    "featured": True,
                    "owner_id": owner.id,
                })

            await self.property_repo.bulk_create(listings)
            logger.info(f"Seeded {len(listings)} demo listings for {owner.email}")

            return await self.property_repo.get_properties_by_owner(owner.id)
        except APIException:
            raise
        except Exception as e:
            logger.error(f"Failed to seed listings for user {owner.id}: {e}")
            raise InternalServerError(str(e))
