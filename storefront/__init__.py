"""Storefront: product catalog, shopping cart and checkout service."""

__version__ = "1.0.0"
