"""Route group exports."""

from . import customers, health, stores

__all__ = ["stores", "health", "customers"]
