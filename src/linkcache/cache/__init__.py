from .expiry_heap import ExpiryScheduler
from .lru_cache import BoundedCache

__all__ = ["BoundedCache", "ExpiryScheduler"]
