"""Per-run validation context."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

from dansbag_cli.bag import BagInfo, read_bag_info
from dansbag_cli.validation.documents import DocumentCache

if TYPE_CHECKING:
    from dansbag_cli.catalog.protocol import CatalogClient

T = TypeVar("T")


class ValidationContext:
    """Everything one validation run may look at.

    A context belongs to exactly one run and is discarded afterwards. Rules
    read from it but never change what another rule already produced.

    Attributes:
        bag_dir: Root directory of the bag.
        documents: Run-scoped cache of parsed XML documents.
        catalog: Client for the external catalog, or None when validating
            without data station context.
    """

    def __init__(self, bag_dir: Path, *, catalog: CatalogClient | None = None) -> None:
        self.bag_dir = bag_dir
        self.documents = DocumentCache(bag_dir)
        self.catalog = catalog
        self._bag_info: BagInfo | None = None
        self._memo: dict[str, Any] = {}

    @property
    def bag_info(self) -> BagInfo:
        """bag-info.txt, read on first access."""
        if self._bag_info is None:
            self._bag_info = read_bag_info(self.bag_dir)
        return self._bag_info

    def require_catalog(self) -> CatalogClient:
        """Return the catalog client; rules that need one are only registered with it."""
        if self.catalog is None:
            raise RuntimeError("This rule needs a catalog client but the context has none")
        return self.catalog

    def memoize(self, key: str, factory: Callable[[], T]) -> T:
        """Compute a value once per run and share it between rules."""
        if key not in self._memo:
            self._memo[key] = factory()
        return self._memo[key]  # type: ignore[no-any-return]
