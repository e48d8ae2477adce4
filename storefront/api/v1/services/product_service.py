from typing import Optional

from fastapi import UploadFile
from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from storefront.api.v1.models.category_models import Category
from storefront.api.v1.models.product_models import Product
from storefront.core.exceptions import NotFound, ValidationError
from storefront.core.logging import get_logger
from storefront.utils.file_saver import MediaHost

logger = get_logger(__name__)


def search_clause(search: str):
    """Match any whitespace-separated term against name or description."""
    terms = [term for term in search.split() if term]
    return or_(*[or_(Product.name.ilike(f"%{term}%"), Product.description.ilike(f"%{term}%")) for term in terms])


async def list_products(
    db: AsyncSession,
    category: Optional[int] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
):
    conditions = []
    if category is not None:
        conditions.append(Product.category_id == category)
    if search and search.strip():
        conditions.append(search_clause(search))
    if min_price is not None:
        conditions.append(Product.price >= min_price)
    if max_price is not None:
        conditions.append(Product.price <= max_price)

    query = select(Product).options(selectinload(Product.category))
    if conditions:
        query = query.where(and_(*conditions))
    result = await db.execute(query.order_by(Product.created_at.desc(), Product.id.desc()))
    return result.scalars().all()


async def get_product_or_404(product_id: int, db: AsyncSession) -> Product:
    result = await db.execute(
        select(Product)
        .options(selectinload(Product.category))
        .where(Product.id == product_id)
        .execution_options(populate_existing=True)
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise NotFound("Product not found")
    return product


async def _ensure_category(category_id: int, db: AsyncSession) -> None:
    if await db.get(Category, category_id) is None:
        raise ValidationError(f"Category not found: {category_id}")


async def create_product(data: dict, image: Optional[UploadFile], media_host: MediaHost, placeholder: str, db: AsyncSession) -> Product:
    name = (data.get("name") or "").strip()
    description = (data.get("description") or "").strip()
    price = data.get("price")
    category_id = data.get("category")
    if not name or not description or price is None or category_id is None:
        raise ValidationError("Please provide all required fields")
    if price < 0:
        raise ValidationError("Price cannot be negative")

    stock = data.get("stock") or 0
    if stock < 0:
        raise ValidationError("Stock cannot be negative")

    await _ensure_category(category_id, db)

    image_url = placeholder
    if image is not None:
        image_url = await media_host.upload(image)

    product = Product(
        name=name,
        description=description,
        price=price,
        image=image_url,
        category_id=category_id,
        stock=stock,
    )
    db.add(product)
    await db.commit()

    logger.info("product_created", product_id=product.id, category_id=category_id)
    return await get_product_or_404(product.id, db)


async def update_product(product_id: int, data: dict, image: Optional[UploadFile], media_host: MediaHost, db: AsyncSession) -> Product:
    product = await get_product_or_404(product_id, db)

    if data.get("name") is not None:
        name = data["name"].strip()
        if not name:
            raise ValidationError("Product name cannot be empty")
        product.name = name
    if data.get("description") is not None:
        description = data["description"].strip()
        if not description:
            raise ValidationError("Product description cannot be empty")
        product.description = description
    if data.get("price") is not None:
        if data["price"] < 0:
            raise ValidationError("Price cannot be negative")
        product.price = data["price"]
    if data.get("stock") is not None:
        if data["stock"] < 0:
            raise ValidationError("Stock cannot be negative")
        product.stock = data["stock"]
    if data.get("category") is not None:
        await _ensure_category(data["category"], db)
        product.category_id = data["category"]

    previous_image = None
    if image is not None:
        previous_image = product.image
        product.image = await media_host.upload(image)

    await db.commit()

    if previous_image and previous_image != product.image:
        media_host.destroy(previous_image)

    return await get_product_or_404(product.id, db)


async def delete_product(product_id: int, media_host: MediaHost, db: AsyncSession) -> None:
    product = await get_product_or_404(product_id, db)
    image = product.image

    await db.delete(product)
    await db.commit()
    logger.info("product_deleted", product_id=product_id)

    media_host.destroy(image)
