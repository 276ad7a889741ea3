"""Products API router"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from app.core.store import DataStore, get_store
from app.schemas.product import ProductCreate, ProductUpdate, PriceUpdate
from app.services.product_service import ProductService

router = APIRouter()

@router.get("")
async def get_products(
    category_id: Optional[int] = Query(None, description="Filter by category"),
    featured: Optional[bool] = Query(None, description="Only featured products"),
    search: Optional[str] = Query(None, max_length=200, description="Search name and description"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Number of items to return"),
    store: DataStore = Depends(get_store)
):
    """Get active products, newest first"""
    products = await ProductService(store).list_products(
        category_id=category_id,
        featured=featured,
        search=search,
        limit=limit,
    )
    return {"success": True, "message": "Products retrieved", "count": len(products), "products": products}

@router.get("/featured/all")
async def get_featured_products(store: DataStore = Depends(get_store)):
    """Get featured products"""
    products = await ProductService(store).featured_products()
    return {"success": True, "message": "Products retrieved", "count": len(products), "products": products}

@router.get("/categories/all")
async def get_categories(store: DataStore = Depends(get_store)):
    categories = await ProductService(store).list_categories()
    return {"success": True, "message": "Categories retrieved", "categories": categories}

@router.get("/{product_id}")
async def get_product(product_id: int, store: DataStore = Depends(get_store)):
    product = await ProductService(store).get_product(product_id)
    return {"success": True, "message": "Product retrieved", "product": product}

@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(data: ProductCreate, store: DataStore = Depends(get_store)):
    product = await ProductService(store).create_product(data)
    return {"success": True, "message": "Product created successfully", "product": product}

@router.put("/{product_id}")
async def update_product(product_id: int, data: ProductUpdate, store: DataStore = Depends(get_store)):
    product = await ProductService(store).update_product(product_id, data)
    return {"success": True, "message": "Product updated successfully", "product": product}

@router.patch("/{product_id}/price")
async def update_product_price(product_id: int, data: PriceUpdate, store: DataStore = Depends(get_store)):
    change = await ProductService(store).update_price(product_id, data.price)
    return {
        "success": True,
        "message": "Price updated successfully",
        "old_price": change.old_price,
        "new_price": change.new_price,
        "product": change.product,
    }

@router.delete("/{product_id}")
async def delete_product(product_id: int, store: DataStore = Depends(get_store)):
    """Soft delete"""
    await ProductService(store).delete_product(product_id)
    return {"success": True, "message": "Product deleted successfully"}
