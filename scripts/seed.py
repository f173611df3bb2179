#!/usr/bin/env python3
"""Seed database with a starter catalog.

Creates:
- Products across every suit category, with merchandising flags
- A gallery image per product
- Color/size variants (some with price overrides or tracked stock)

The script is idempotent: products are keyed by SKU and skipped when present.

Usage:
    python -m scripts.seed
"""

import asyncio
import os
import sys
from decimal import Decimal

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from storefront.models import (
    Product,
    ProductCategory,
    ProductCollection,
    ProductImage,
    ProductVariant,
)
from storefront.settings import get_settings

load_dotenv()

IMAGE_BASE = "https://images.example.com/suits"

STANDARD_SIZES = ["S", "M", "L"]

# ============================================================
# Catalog Definitions
# ============================================================

PRODUCTS = [
    {
        "sku": "LWN-001",
        "name": "Mint Floral Lawn 3-Piece",
        "description": "Printed lawn shirt with chiffon dupatta and dyed cambric trouser.",
        "price": "5000",
        "category": ProductCategory.LAWN_SUITS,
        "collection": ProductCollection.SUMMER,
        "new_arrival": True,
        "colors": ["Mint", "Peach"],
        "stock": 40,
    },
    {
        "sku": "LWN-002",
        "name": "Indigo Block Print Lawn",
        "description": "Unstitched block-printed lawn with embroidered neckline patch.",
        "price": "4200",
        "sale_price": "3600",
        "category": ProductCategory.LAWN_SUITS,
        "collection": ProductCollection.CASUAL,
        "best_seller": True,
        "colors": ["Indigo"],
    },
    {
        "sku": "CHF-001",
        "name": "Champagne Chiffon Formal",
        "description": "Embellished chiffon front with sequinned sleeves and organza dupatta.",
        "price": "14500",
        "category": ProductCategory.CHIFFON_SUITS,
        "collection": ProductCollection.FESTIVE,
        "featured": True,
        "colors": ["Champagne", "Rose Gold"],
        "size_premium": {"L": "500"},
    },
    {
        "sku": "CTN-001",
        "name": "Everyday Cotton Kurta Set",
        "description": "Soft cotton kurta and trouser for daily wear.",
        "price": "3200",
        "category": ProductCategory.COTTON_SUITS,
        "collection": ProductCollection.CASUAL,
        "colors": ["White", "Sky"],
    },
    {
        "sku": "EMB-001",
        "name": "Emerald Embroidered Suit",
        "description": "Heavily embroidered khaddar suit with shawl.",
        "price": "9800",
        "category": ProductCategory.EMBROIDERED_SUITS,
        "collection": ProductCollection.PREMIUM,
        "featured": True,
        "best_seller": True,
        "colors": ["Emerald"],
        "stock": 12,
    },
    {
        "sku": "PRT-001",
        "name": "Abstract Digital Print",
        "description": "Digitally printed linen with matching trouser.",
        "price": "4500",
        "category": ProductCategory.PRINTED_SUITS,
        "collection": ProductCollection.NEW_ARRIVALS,
        "new_arrival": True,
        "colors": ["Mustard", "Teal"],
    },
    {
        "sku": "BRD-001",
        "name": "Crimson Bridal Lehenga",
        "description": "Hand-worked zardozi lehenga with net dupatta. Made to order.",
        "price": "185000",
        "category": ProductCategory.BRIDAL_COLLECTION,
        "collection": ProductCollection.WEDDING,
        "featured": True,
        "colors": ["Crimson"],
        "stock": 2,
    },
]


async def seed_database() -> None:
    """Seed database with the starter catalog."""
    settings = get_settings()
    engine = create_async_engine(
        settings.async_database_url,
        echo=False,
        connect_args=settings.asyncpg_connect_args,
    )
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        print("Seeding catalog...")
        created = await seed_products(session)
        await session.commit()
        print(f"Done: {created} new products")

    await engine.dispose()


async def seed_products(session: AsyncSession) -> int:
    """Insert missing products with their images and variants."""
    created = 0
    for definition in PRODUCTS:
        result = await session.execute(select(Product).where(Product.sku == definition["sku"]))
        if result.scalars().first() is not None:
            print(f"  skip {definition['sku']} (exists)")
            continue

        image = f"{IMAGE_BASE}/{definition['sku'].lower()}.jpg"
        product = Product(
            sku=definition["sku"],
            name=definition["name"],
            description=definition["description"],
            price=Decimal(definition["price"]),
            sale_price=Decimal(definition["sale_price"]) if "sale_price" in definition else None,
            category=definition["category"],
            collection=definition.get("collection"),
            featured=definition.get("featured", False),
            best_seller=definition.get("best_seller", False),
            new_arrival=definition.get("new_arrival", False),
            thumbnail_image=image,
            stock_quantity=definition.get("stock"),
        )
        session.add(product)
        await session.flush()

        session.add(ProductImage(product_id=product.id, image_url=image, is_primary=True))
        await seed_variants(session, product, definition)

        created += 1
        print(f"  add {product.sku} {product.name} (Rs {product.price})")
    return created


async def seed_variants(session: AsyncSession, product: Product, definition: dict) -> None:
    """One variant per (color, size); size premiums become price overrides."""
    premium = definition.get("size_premium", {})
    for color in definition.get("colors", []):
        for size in STANDARD_SIZES:
            extra = premium.get(size)
            session.add(
                ProductVariant(
                    product_id=product.id,
                    color=color,
                    size=size,
                    price=product.price + Decimal(extra) if extra else None,
                )
            )
    await session.flush()


if __name__ == "__main__":
    asyncio.run(seed_database())
