"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .store import InvalidStatusTransition, Product, StoreDomain, StoreStatus, default_catalog

__all__ = ["StoreDomain", "StoreStatus", "Product", "InvalidStatusTransition", "default_catalog"]
