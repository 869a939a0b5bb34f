"""
Catalog views

Read-only search, filtering and pagination over directory products, plus
the view state behind the catalog and product detail pages.
"""

import logging
import math
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from ..models.product import Product
from .api_client import ProductNotFoundError, StorefrontAPIClient, StorefrontAPIError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12


class AvailabilityFilter(str, Enum):
    ALL = "all"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class OfferFilter(str, Enum):
    ALL = "all"
    ON_OFFER = "onOffer"
    NOT_ON_OFFER = "notOnOffer"


class CatalogQuery(BaseModel):
    """Search and filter options for the catalog page"""
    search: str = ""
    availability: AvailabilityFilter = AvailabilityFilter.ALL
    offer: OfferFilter = OfferFilter.ALL
    category: Optional[str] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)


class CatalogPage(BaseModel):
    """One page of filtered products"""
    products: list[Product]
    page: int
    page_size: int
    total: int
    total_pages: int
    start_index: int
    end_index: int


class CatalogStats(BaseModel):
    """Headline counts shown above the catalog"""
    total: int = 0
    in_stock: int = 0
    out_of_stock: int = 0
    on_offer: int = 0
    not_on_offer: int = 0


def _matches_search(product: Product, search: str) -> bool:
    if not search:
        return True
    term = search.lower()
    if term in product.name.lower():
        return True
    return bool(product.description) and term in product.description.lower()


def _matches_availability(product: Product, availability: AvailabilityFilter) -> bool:
    if availability == AvailabilityFilter.AVAILABLE:
        return product.available
    if availability == AvailabilityFilter.UNAVAILABLE:
        return not product.available
    return True


def _matches_offer(product: Product, offer: OfferFilter) -> bool:
    if offer == OfferFilter.ON_OFFER:
        return product.on_offer
    if offer == OfferFilter.NOT_ON_OFFER:
        return not product.on_offer
    return True


def filter_products(products: Sequence[Product], query: CatalogQuery) -> list[Product]:
    """Apply search, availability, offer and category filters, keeping order"""
    category = query.category.lower() if query.category else None
    return [
        p for p in products
        if _matches_search(p, query.search)
        and _matches_availability(p, query.availability)
        and _matches_offer(p, query.offer)
        and (category is None or p.category.lower() == category)
    ]


def paginate(products: Sequence[Product], page: int, page_size: int) -> CatalogPage:
    """
    Slice one page out of already filtered products.

    start_index/end_index are 1-based for "Showing X to Y of Z"; both are 0
    when the page is empty.
    """
    total = len(products)
    total_pages = math.ceil(total / page_size) if total else 0

    offset = (page - 1) * page_size
    page_products = list(products[offset : offset + page_size])

    if page_products:
        start_index = offset + 1
        end_index = offset + len(page_products)
    else:
        start_index = end_index = 0

    return CatalogPage(
        products=page_products,
        page=page,
        page_size=page_size,
        total=total,
        total_pages=total_pages,
        start_index=start_index,
        end_index=end_index,
    )


def catalog_stats(products: Sequence[Product]) -> CatalogStats:
    in_stock = sum(1 for p in products if p.available)
    on_offer = sum(1 for p in products if p.on_offer)
    return CatalogStats(
        total=len(products),
        in_stock=in_stock,
        out_of_stock=len(products) - in_stock,
        on_offer=on_offer,
        not_on_offer=len(products) - on_offer,
    )


class CatalogView:
    """
    State behind the catalog page.

    ``load`` fetches the directory once; a result that arrives after
    ``dispose`` is dropped instead of being written into the view.
    """

    def __init__(self, client: StorefrontAPIClient):
        self.client = client
        self.products: list[Product] = []
        self.loading = False
        self.error: Optional[str] = None
        self.can_retry = False
        self.disposed = False

    async def load(self) -> None:
        """Fetch products; on failure record an error the user can retry"""
        self.loading = True
        self.error = None
        self.can_retry = False

        try:
            products = await self.client.list_products()
        except StorefrontAPIError as e:
            if self.disposed:
                return
            logger.error(f"Error fetching products: {e}")
            self.error = f"Failed to load products: {e}"
            self.can_retry = e.can_retry
            self.loading = False
            return

        if self.disposed:
            logger.debug("Catalog view disposed mid-fetch, discarding products")
            return

        self.products = products
        self.loading = False

    def dispose(self) -> None:
        self.disposed = True

    def stats(self) -> CatalogStats:
        return catalog_stats(self.products)

    def page(self, query: CatalogQuery) -> CatalogPage:
        filtered = filter_products(self.products, query)
        return paginate(filtered, query.page, query.page_size)


class ProductDetailView:
    """State behind the product detail page"""

    def __init__(self, client: StorefrontAPIClient):
        self.client = client
        self.product: Optional[Product] = None
        self.loading = False
        self.not_found = False
        self.error: Optional[str] = None
        self.can_retry = False
        self.disposed = False

    async def load(self, product_id: str) -> None:
        self.loading = True
        self.not_found = False
        self.error = None
        self.can_retry = False

        try:
            product = await self.client.get_product(product_id)
        except ProductNotFoundError:
            if self.disposed:
                return
            self.not_found = True
            self.error = "The product you're looking for doesn't exist."
            self.loading = False
            return
        except StorefrontAPIError as e:
            if self.disposed:
                return
            logger.error(f"Error fetching product {product_id}: {e}")
            self.error = "Failed to load product details. Please try again."
            self.can_retry = e.can_retry
            self.loading = False
            return

        if self.disposed:
            logger.debug(f"Product view disposed mid-fetch, discarding {product_id}")
            return

        self.product = product
        self.loading = False

    def dispose(self) -> None:
        self.disposed = True
