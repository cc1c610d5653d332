"""
PATH: products/models/__init__.py

Catalog models export surface.
"""

from .product import Product
from .service import Service, TimeUnit

__all__ = [
    "Product",
    "Service",
    "TimeUnit",
]
