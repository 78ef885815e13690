from . import names
from .base import InMemoryMetricsHook, MetricsHook, NoOpMetricsHook

__all__ = [
    "MetricsHook",
    "NoOpMetricsHook",
    "InMemoryMetricsHook",
    "names",
]
