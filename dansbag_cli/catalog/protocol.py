"""CatalogClient protocol for the external metadata catalog.

Identity reconciliation only depends on this protocol. The built-in
implementation is DataverseClient; tests substitute in-memory fakes.

Every method may raise CatalogUnavailableError when the catalog cannot be
reached or answers with an error. Callers do not catch it: the rule engine
turns it into a FATAL outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class SearchHit:
    """A dataset found by a catalog search.

    Attributes:
        global_id: Persistent identifier, e.g. "doi:10.5072/FK2/QZZSST".
        name: Dataset title as shown by the catalog.
    """

    global_id: str
    name: str = ""


@dataclass(frozen=True)
class CatalogRecord:
    """Latest version metadata of a dataset, as stored in the catalog.

    Attributes:
        persistent_id: Persistent identifier of the dataset.
        other_id: Stored organizational (other) identifier, prefixed per account.
        sword_token: SWORD token linking the dataset to its deposits.
    """

    persistent_id: str
    other_id: str | None = None
    sword_token: str | None = None


@dataclass(frozen=True)
class RoleAssignment:
    """A role held by an assignee (e.g. "@user001") on a collection or dataset."""

    assignee: str
    role_alias: str


@runtime_checkable
class CatalogClient(Protocol):
    """Read-only view of the catalog needed for identity reconciliation."""

    def search_by_identifier(self, identifier: str) -> list[SearchHit]:
        """Find datasets whose stored other identifier equals `identifier`."""
        ...

    def search_by_sword_token(self, token: str) -> list[SearchHit]:
        """Find datasets linked to a SWORD token."""
        ...

    def get_dataset_latest_version(self, persistent_id: str) -> CatalogRecord:
        """Fetch the latest version metadata of a dataset."""
        ...

    def get_collection_role_assignments(self, alias: str) -> frozenset[RoleAssignment]:
        """Role assignments on a collection (Dataverse "dataverse")."""
        ...

    def get_dataset_role_assignments(self, persistent_id: str) -> frozenset[RoleAssignment]:
        """Role assignments on a dataset."""
        ...
