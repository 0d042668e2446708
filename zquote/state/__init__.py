"""
Input snapshots and the quote cache
"""

from .pools import PoolReserves
from .quote_cache import CacheEntry, CachePool, CacheStats, QuoteCache
from .sale import DEFAULT_UNIT_SCALE, SaleParameters

__all__ = [
    "PoolReserves",
    "CacheEntry",
    "CachePool",
    "CacheStats",
    "QuoteCache",
    "DEFAULT_UNIT_SCALE",
    "SaleParameters",
]
