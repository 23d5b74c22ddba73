"""
Repository Pattern implementation.
Centralizes tenant-scoped data access.

Usage:
    from rest_api.repositories import TenantRepository

    repo = TenantRepository(Product, db)
    product = repo.find_by_id(123, establishment_id=1)
"""

from .base import TenantRepository

__all__ = ["TenantRepository"]
