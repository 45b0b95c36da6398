"""CatalogClient backed by the Dataverse native and search APIs.

Responses are wrapped in the Dataverse envelope {"status": "OK", "data": ...}.
Transport failures, non-2xx answers and envelopes with a status other than
OK all raise CatalogUnavailableError.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from dansbag_cli.catalog.protocol import CatalogRecord, RoleAssignment, SearchHit
from dansbag_cli.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)

# Metadata block and fields holding the vault identifiers
VAULT_METADATA_BLOCK = "dansDataVaultMetadata"
OTHER_ID_FIELD = "dansOtherId"
SWORD_TOKEN_FIELD = "dansSwordToken"

API_KEY_HEADER = "X-Dataverse-key"


def parse_search_hits(data: dict[str, Any]) -> list[SearchHit]:
    """Extract dataset hits from the data part of a search response."""
    return [
        SearchHit(global_id=item["global_id"], name=item.get("name", ""))
        for item in data.get("items", [])
        if item.get("type", "dataset") == "dataset" and "global_id" in item
    ]


def parse_latest_version(data: dict[str, Any]) -> CatalogRecord:
    """Build a CatalogRecord from the data part of a dataset response."""
    latest = data.get("latestVersion", {})
    persistent_id = latest.get("datasetPersistentId") or data.get("persistentUrl", "")
    block = latest.get("metadataBlocks", {}).get(VAULT_METADATA_BLOCK, {})
    values = {f.get("typeName"): f.get("value") for f in block.get("fields", [])}
    return CatalogRecord(
        persistent_id=persistent_id,
        other_id=values.get(OTHER_ID_FIELD),
        sword_token=values.get(SWORD_TOKEN_FIELD),
    )


def parse_role_assignments(data: list[dict[str, Any]]) -> frozenset[RoleAssignment]:
    """Build role assignments from the data part of an assignments response."""
    return frozenset(
        RoleAssignment(assignee=a["assignee"], role_alias=a["_roleAlias"])
        for a in data
        if "assignee" in a and "_roleAlias" in a
    )


class DataverseClient:
    """Talks to a Dataverse installation over HTTP.

    Args:
        base_url: Installation root, e.g. "https://dataverse.example.org".
        api_key: Optional API token sent as X-Dataverse-key.
        timeout: Seconds to wait for each request.
        session: Optional requests session (for connection reuse and tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        # The session is shared with the caller; its headers stay as given
        self._headers = {API_KEY_HEADER: api_key} if api_key else {}

    def search_by_identifier(self, identifier: str) -> list[SearchHit]:
        return self._search(f'{OTHER_ID_FIELD}:"{identifier}"', "search_by_identifier")

    def search_by_sword_token(self, token: str) -> list[SearchHit]:
        return self._search(f'{SWORD_TOKEN_FIELD}:"{token}"', "search_by_sword_token")

    def get_dataset_latest_version(self, persistent_id: str) -> CatalogRecord:
        data = self._get(
            "/api/datasets/:persistentId/",
            {"persistentId": persistent_id},
            "get_dataset_latest_version",
        )
        return parse_latest_version(data or {})

    def get_collection_role_assignments(self, alias: str) -> frozenset[RoleAssignment]:
        data = self._get(
            f"/api/dataverses/{alias}/assignments", None, "get_collection_role_assignments"
        )
        return parse_role_assignments(data or [])

    def get_dataset_role_assignments(self, persistent_id: str) -> frozenset[RoleAssignment]:
        data = self._get(
            "/api/datasets/:persistentId/assignments",
            {"persistentId": persistent_id},
            "get_dataset_role_assignments",
        )
        return parse_role_assignments(data or [])

    def _search(self, query: str, operation: str) -> list[SearchHit]:
        data = self._get("/api/search", {"q": query, "type": "dataset"}, operation)
        return parse_search_hits(data or {})

    def _get(self, path: str, params: dict[str, str] | None, operation: str) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self._session.get(
                url, params=params, headers=self._headers, timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as exc:
            raise CatalogUnavailableError(operation, str(exc)) from exc
        except ValueError as exc:
            raise CatalogUnavailableError(operation, f"invalid JSON response: {exc}") from exc

        if not isinstance(body, dict) or body.get("status") != "OK":
            status = body.get("status") if isinstance(body, dict) else None
            raise CatalogUnavailableError(operation, f"unexpected response status {status!r}")
        return body.get("data")
