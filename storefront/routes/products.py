"""Product catalog routes"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ..core.config import settings
from ..models.product import Product
from ..services.api_client import StorefrontAPIClient
from ..services.catalog import (
    AvailabilityFilter,
    CatalogPage,
    CatalogQuery,
    CatalogStats,
    CatalogView,
    OfferFilter,
    ProductDetailView,
)
from .dependencies import get_api_client

router = APIRouter(prefix="/api/products", tags=["Products"])


class CatalogResponse(BaseModel):
    """Filtered page of products plus catalog-wide counts"""
    page: CatalogPage
    stats: CatalogStats


async def _load_catalog(client: StorefrontAPIClient) -> CatalogView:
    view = CatalogView(client)
    await view.load()
    if view.error:
        raise HTTPException(status_code=503 if view.can_retry else 502, detail=view.error)
    return view


@router.get("", response_model=CatalogResponse)
async def list_products(
    search: str = Query("", description="Match against name and description"),
    availability: AvailabilityFilter = Query(AvailabilityFilter.ALL),
    offer: OfferFilter = Query(OfferFilter.ALL),
    category: Optional[str] = Query(None, description="Filter by category name"),
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int = Query(settings.catalog_page_size, ge=1, le=100),
    client: StorefrontAPIClient = Depends(get_api_client),
):
    """Search, filter and paginate the product directory"""
    view = await _load_catalog(client)
    query = CatalogQuery(
        search=search,
        availability=availability,
        offer=offer,
        category=category,
        page=page,
        page_size=page_size,
    )
    return CatalogResponse(page=view.page(query), stats=view.stats())


@router.get("/categories", response_model=list[str])
async def list_categories(client: StorefrontAPIClient = Depends(get_api_client)):
    """List the category names present in the directory"""
    view = await _load_catalog(client)
    return sorted({p.category for p in view.products})


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    client: StorefrontAPIClient = Depends(get_api_client),
):
    """Get a product by ID"""
    view = ProductDetailView(client)
    await view.load(product_id)

    if view.not_found:
        raise HTTPException(status_code=404, detail="Product not found")
    if view.error:
        raise HTTPException(status_code=503 if view.can_retry else 502, detail=view.error)
    return view.product
