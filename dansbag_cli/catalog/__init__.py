"""External metadata catalog access.

Usage:
    from dansbag_cli.catalog import make_catalog_client

    client = make_catalog_client(settings.catalog)
    hits = client.search_by_sword_token("urn:uuid:...")
"""

from __future__ import annotations

import logging

from dansbag_cli.catalog.dataverse import DataverseClient
from dansbag_cli.catalog.protocol import CatalogClient, CatalogRecord, RoleAssignment, SearchHit
from dansbag_cli.config import CatalogSettings
from dansbag_cli.errors import InvalidConfigError

__all__ = [
    "CatalogClient",
    "CatalogRecord",
    "DataverseClient",
    "RoleAssignment",
    "SearchHit",
    "make_catalog_client",
]

logger = logging.getLogger(__name__)


def make_catalog_client(settings: CatalogSettings) -> CatalogClient:
    """Create the Dataverse client described by the settings.

    Raises:
        InvalidConfigError: If no base URL is configured.
    """
    if not settings.base_url:
        raise InvalidConfigError(
            "dataverse.base_url",
            "required for validation with data station context "
            "(set it in the config file, DANSBAG_DATAVERSE_URL or --dataverse-url)",
        )
    logger.debug("Creating DataverseClient for %s", settings.base_url)
    return DataverseClient(
        settings.base_url, api_key=settings.api_key, timeout=settings.timeout
    )
