"""Selectors for the catalog kernel (read side)."""

from catalog_kernel.selectors.base import BaseSelector
from catalog_kernel.selectors.catalog_selector import CatalogSelector

__all__ = [
    "BaseSelector",
    "CatalogSelector",
]
