from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.v1.schema.product_schema import ProductDetail, ProductOut
from storefront.api.v1.services import product_service
from storefront.core.db import get_db
from storefront.core.responses import envelope
from storefront.utils.file_saver import MediaHost, get_media_host
from storefront.utils.get_user import get_admin_user, get_settings

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("")
async def list_products(
    category: Optional[int] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    db: AsyncSession = Depends(get_db),
):
    products = await product_service.list_products(
        db, category=category, search=search, min_price=min_price, max_price=max_price
    )
    return envelope([ProductOut.model_validate(p) for p in products], count=len(products))


@router.get("/{product_id}")
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    product = await product_service.get_product_or_404(product_id, db)
    return envelope(ProductDetail.model_validate(product))


@router.post("", status_code=201)
async def create_product(
    request: Request,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[int] = Form(None),
    stock: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
    admin=Depends(get_admin_user),
):
    data = {"name": name, "description": description, "price": price, "category": category, "stock": stock}
    placeholder = get_settings(request).PLACEHOLDER_IMAGE
    product = await product_service.create_product(data, image, media_host, placeholder, db)
    return envelope(ProductOut.model_validate(product))


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    category: Optional[int] = Form(None),
    stock: Optional[int] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
    admin=Depends(get_admin_user),
):
    data = {"name": name, "description": description, "price": price, "category": category, "stock": stock}
    product = await product_service.update_product(product_id, data, image, media_host, db)
    return envelope(ProductOut.model_validate(product))


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    media_host: MediaHost = Depends(get_media_host),
    admin=Depends(get_admin_user),
):
    await product_service.delete_product(product_id, media_host, db)
    return envelope(message="Product deleted successfully")
