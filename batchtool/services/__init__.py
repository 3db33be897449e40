"""
Service layer for batch-tool.

Contains business logic that orchestrates domain objects and infrastructure:
- CatalogService: Catalog loading, label index, repository selection

Services are the primary API for commands to use.
They handle coordination between infrastructure and domain layers.
"""

from .catalog_service import CatalogService

__all__ = [
    'CatalogService',
]
