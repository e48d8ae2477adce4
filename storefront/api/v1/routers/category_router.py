from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.v1.schema.category_schema import CategoryCreate, CategoryDetail, CategoryOut, CategoryProduct, CategoryUpdate
from storefront.api.v1.services import category_service
from storefront.core.db import get_db
from storefront.core.responses import envelope
from storefront.utils.get_user import get_admin_user

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("")
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await category_service.list_categories(db)
    return envelope([CategoryOut.model_validate(c) for c in categories], count=len(categories))


@router.get("/{category_id}")
async def get_category(category_id: int, db: AsyncSession = Depends(get_db)):
    category = await category_service.get_category_or_404(category_id, db)
    products = await category_service.get_category_products(category.id, db)
    detail = CategoryDetail(
        **CategoryOut.model_validate(category).model_dump(),
        products=[CategoryProduct.model_validate(p) for p in products],
    )
    return envelope(detail)


@router.post("", status_code=201)
async def create_category(payload: CategoryCreate, db: AsyncSession = Depends(get_db), admin=Depends(get_admin_user)):
    category = await category_service.create_category(payload.model_dump(), db)
    return envelope(CategoryOut.model_validate(category))


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(get_admin_user),
):
    category = await category_service.update_category(category_id, payload.model_dump(exclude_unset=True), db)
    return envelope(CategoryOut.model_validate(category))


@router.delete("/{category_id}")
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db), admin=Depends(get_admin_user)):
    await category_service.delete_category(category_id, db)
    return envelope(message="Category deleted successfully")
