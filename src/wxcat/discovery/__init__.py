"""File discovery: root resolution, filtering, classification and traversal."""

from .classifier import CATEGORIES, classify
from .filters import InclusionFilter
from .models import CatalogEntry, ScanRoot
from .paths import PathResolver
from .traversal import Traverser

__all__ = [
    "CATEGORIES",
    "CatalogEntry",
    "InclusionFilter",
    "PathResolver",
    "ScanRoot",
    "Traverser",
    "classify",
]
