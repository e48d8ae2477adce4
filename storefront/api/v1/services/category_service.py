from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storefront.api.v1.models.category_models import Category
from storefront.api.v1.models.product_models import Product
from storefront.core.exceptions import NotFound, ValidationError
from storefront.core.logging import get_logger

logger = get_logger(__name__)


async def list_categories(db: AsyncSession):
    result = await db.execute(select(Category).order_by(Category.created_at.desc(), Category.id.desc()))
    return result.scalars().all()


async def get_category_or_404(category_id: int, db: AsyncSession) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


async def get_category_products(category_id: int, db: AsyncSession):
    result = await db.execute(
        select(Product).where(Product.category_id == category_id).order_by(Product.created_at.desc(), Product.id.desc())
    )
    return result.scalars().all()


async def count_category_products(category_id: int, db: AsyncSession) -> int:
    result = await db.execute(select(func.count(Product.id)).where(Product.category_id == category_id))
    return result.scalar_one()


async def _name_taken(name: str, db: AsyncSession, exclude_id: int = None) -> bool:
    query = select(Category.id).where(Category.name == name)
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def _commit_unique_name(db: AsyncSession) -> None:
    # The unique index still catches a name taken after the pre-check
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Category already exists")


async def create_category(data: dict, db: AsyncSession) -> Category:
    name = (data.get("name") or "").strip()
    description = (data.get("description") or "").strip()
    if not name or not description:
        raise ValidationError("Please provide name and description")

    if await _name_taken(name, db):
        raise ValidationError("Category already exists")

    category = Category(name=name, description=description)
    db.add(category)
    await _commit_unique_name(db)
    await db.refresh(category)

    logger.info("category_created", category_id=category.id)
    return category


async def update_category(category_id: int, data: dict, db: AsyncSession) -> Category:
    category = await get_category_or_404(category_id, db)

    if "name" in data:
        name = (data["name"] or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if await _name_taken(name, db, exclude_id=category.id):
            raise ValidationError("Category already exists")
        category.name = name
    if "description" in data:
        description = (data["description"] or "").strip()
        if not description:
            raise ValidationError("Category description cannot be empty")
        category.description = description

    await _commit_unique_name(db)
    await db.refresh(category)
    return category


async def delete_category(category_id: int, db: AsyncSession) -> None:
    category = await get_category_or_404(category_id, db)

    products_count = await count_category_products(category.id, db)
    if products_count > 0:
        raise ValidationError(
            f"Cannot delete category. It has {products_count} product(s). Please delete or reassign products first."
        )

    await db.delete(category)
    await db.commit()
    logger.info("category_deleted", category_id=category_id)
