# Storefront services

from .api_client import (
    StorefrontAPIClient,
    StorefrontAPIError,
    APITransportError,
    APIResponseError,
    ProductNotFoundError,
    OrderRejectedError,
)
from .cart_store import CartStore
from .catalog import (
    AvailabilityFilter,
    OfferFilter,
    CatalogQuery,
    CatalogPage,
    CatalogStats,
    CatalogView,
    ProductDetailView,
    filter_products,
    paginate,
    catalog_stats,
)
from .checkout import CheckoutFlow, CheckoutInProgressError, EmptyCartError

__all__ = [
    "StorefrontAPIClient",
    "StorefrontAPIError",
    "APITransportError",
    "APIResponseError",
    "ProductNotFoundError",
    "OrderRejectedError",
    "CartStore",
    "AvailabilityFilter",
    "OfferFilter",
    "CatalogQuery",
    "CatalogPage",
    "CatalogStats",
    "CatalogView",
    "ProductDetailView",
    "filter_products",
    "paginate",
    "catalog_stats",
    "CheckoutFlow",
    "EmptyCartError",
    "CheckoutInProgressError",
]
