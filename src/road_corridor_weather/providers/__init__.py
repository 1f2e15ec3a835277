"""Weather data provider adapters and their shared caching/HTTP plumbing."""

from .alerts import VedurCapProvider
from .base import StationProvider
from .cache import CacheEntry, TTLCache
from .forecast import YrNoForecastProvider
from .registry import ProviderRegistry, build_default_registry
from .vedur import VedurAwsProvider
from .vegagerdin import VegagerdinProvider

__all__ = [
    "CacheEntry",
    "ProviderRegistry",
    "StationProvider",
    "TTLCache",
    "VedurAwsProvider",
    "VedurCapProvider",
    "VegagerdinProvider",
    "YrNoForecastProvider",
    "build_default_registry",
]
