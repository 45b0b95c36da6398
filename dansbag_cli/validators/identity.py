"""Cross-checks between the bag's identity claims and the external catalog.

IdentityReconciler runs four independent sub-checks against the catalog and
files each problem under its own rule code:

    4.3     The organizational identifier matches no dataset, or several.
    4.4(b)  The matched dataset stores a different other identifier.
    4.2     Is-Version-Of (the SWORD token) matches no dataset version ...
    4.4(a)  ... and is therefore not linked; both codes are always reported together.
    4.1(a)  The depositor lacks an accepted role on the target collection.
    4.1(b)  The depositor lacks an accepted role on the dataset.

The sub-checks never short-circuit each other. Findings are computed once
per run and shared by the per-code rules. Catalog failures propagate as
CatalogUnavailableError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from dansbag_cli.bag import BagInfo
from dansbag_cli.catalog.protocol import CatalogClient, CatalogRecord, SearchHit
from dansbag_cli.config import DepositorRoles, OtherIdPrefix
from dansbag_cli.constants import (
    BAG_INFO_IS_VERSION_OF,
    BAG_INFO_ORGANIZATIONAL_IDENTIFIER,
    BAG_INFO_USER_ACCOUNT,
)
from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.results import RuleOutcome
from dansbag_cli.validators.base import Validator

logger = logging.getLogger(__name__)

COLLECTION_ROLE = "4.1(a)"
DATASET_ROLE = "4.1(b)"
NO_DATASET_VERSION = "4.2"
NO_MATCHING_DATASET = "4.3"
TOKEN_NOT_LINKED = "4.4(a)"
OTHER_ID_MISMATCH = "4.4(b)"

IDENTITY_RULE_CODES: tuple[str, ...] = (
    COLLECTION_ROLE,
    DATASET_ROLE,
    NO_DATASET_VERSION,
    NO_MATCHING_DATASET,
    TOKEN_NOT_LINKED,
    OTHER_ID_MISMATCH,
)

_MEMO_KEY = "identity-findings"


@dataclass(frozen=True)
class IdentityClaim:
    """What the bag says about itself in bag-info.txt."""

    organizational_identifier: str | None
    sword_token: str | None
    owner_account: str | None

    @classmethod
    def from_bag_info(cls, info: BagInfo) -> IdentityClaim:
        return cls(
            organizational_identifier=info.get(BAG_INFO_ORGANIZATIONAL_IDENTIFIER),
            sword_token=info.get(BAG_INFO_IS_VERSION_OF),
            owner_account=info.get(BAG_INFO_USER_ACCOUNT),
        )


@dataclass
class IdentityFindings:
    """Messages per rule code, in the order the sub-checks produced them."""

    messages: dict[str, list[str]] = field(default_factory=dict)

    def add(self, code: str, message: str) -> None:
        self.messages.setdefault(code, []).append(message)

    def for_code(self, code: str) -> list[str]:
        return list(self.messages.get(code, []))

    @property
    def codes(self) -> list[str]:
        return list(self.messages)


def to_catalog_other_id(identifier: str, account: str | None, prefixes: Mapping[str, str]) -> str:
    """Translate the bag's organizational identifier to the stored, prefixed form.

    The prefix configured for the account is prepended unless the
    identifier already carries it. Accounts without a prefix keep the
    identifier as is.
    """
    prefix = prefixes.get(account) if account else None
    if not prefix or identifier.startswith(prefix):
        return identifier
    return f"{prefix}{identifier}"


class IdentityReconciler:
    """Runs the identity sub-checks for one bag against the catalog.

    Args:
        other_id_prefixes: Per-account prefixes of stored other identifiers.
        depositor_roles: Accepted role aliases on collection and dataset.
        collection_alias: Alias of the collection deposits go to.
    """

    def __init__(
        self,
        other_id_prefixes: tuple[OtherIdPrefix, ...] = (),
        depositor_roles: DepositorRoles | None = None,
        collection_alias: str = "root",
    ) -> None:
        self.prefixes = {p.account: p.prefix for p in other_id_prefixes}
        self.roles = depositor_roles or DepositorRoles()
        self.collection_alias = collection_alias

    def findings(self, ctx: ValidationContext) -> IdentityFindings:
        """Findings for the run, computed on first use."""
        return ctx.memoize(_MEMO_KEY, lambda: self.reconcile(ctx))

    def reconcile(self, ctx: ValidationContext) -> IdentityFindings:
        catalog = ctx.require_catalog()
        claim = IdentityClaim.from_bag_info(ctx.bag_info)
        findings = IdentityFindings()

        org_match = self._check_organizational_identifier(catalog, claim, findings)
        token_match = self._check_sword_token(catalog, claim, findings)
        dataset = token_match or org_match
        self._check_roles(catalog, claim, dataset.global_id if dataset else None, findings)

        logger.debug("Identity findings for %s: %s", ctx.bag_dir, findings.codes or "none")
        return findings

    def _check_organizational_identifier(
        self, catalog: CatalogClient, claim: IdentityClaim, findings: IdentityFindings
    ) -> SearchHit | None:
        identifier = claim.organizational_identifier
        if not identifier:
            return None

        expected = to_catalog_other_id(identifier, claim.owner_account, self.prefixes)
        hits = catalog.search_by_identifier(expected)
        if len(hits) != 1:
            findings.add(
                NO_MATCHING_DATASET,
                f"{BAG_INFO_ORGANIZATIONAL_IDENTIFIER} '{identifier}' matches "
                f"{len(hits)} datasets in the catalog; expected exactly one",
            )
            return None

        record: CatalogRecord = catalog.get_dataset_latest_version(hits[0].global_id)
        if record.other_id is None:
            logger.debug("Dataset %s stores no other identifier", hits[0].global_id)
        elif record.other_id != expected:
            findings.add(
                OTHER_ID_MISMATCH,
                f"{BAG_INFO_ORGANIZATIONAL_IDENTIFIER} '{identifier}' does not match the "
                f"other identifier '{record.other_id}' of dataset {hits[0].global_id}",
            )
        return hits[0]

    def _check_sword_token(
        self, catalog: CatalogClient, claim: IdentityClaim, findings: IdentityFindings
    ) -> SearchHit | None:
        token = claim.sword_token
        if not token:
            return None

        hits = catalog.search_by_sword_token(token)
        if not hits:
            findings.add(
                NO_DATASET_VERSION,
                f"{BAG_INFO_IS_VERSION_OF} '{token}' does not refer to an existing dataset version",
            )
            findings.add(
                TOKEN_NOT_LINKED,
                f"SWORD token '{token}' is not linked to any dataset in the catalog",
            )
            return None
        if len(hits) > 1:
            logger.warning(
                "SWORD token %s matches %d datasets, using %s", token, len(hits), hits[0].global_id
            )
        return hits[0]

    def _check_roles(
        self,
        catalog: CatalogClient,
        claim: IdentityClaim,
        dataset_pid: str | None,
        findings: IdentityFindings,
    ) -> None:
        account = claim.owner_account
        if not account:
            findings.add(
                COLLECTION_ROLE,
                f"{BAG_INFO_USER_ACCOUNT} is missing; depositor roles cannot be verified",
            )
            return

        assignee = f"@{account}"
        collection_roles = catalog.get_collection_role_assignments(self.collection_alias)
        if not any(
            a.assignee == assignee and a.role_alias in self.roles.collection for a in collection_roles
        ):
            findings.add(
                COLLECTION_ROLE,
                f"Depositor '{account}' has none of the roles "
                f"{', '.join(sorted(self.roles.collection))} on collection '{self.collection_alias}'",
            )

        if dataset_pid is None:
            return
        dataset_roles = catalog.get_dataset_role_assignments(dataset_pid)
        if not any(
            a.assignee == assignee and a.role_alias in self.roles.dataset for a in dataset_roles
        ):
            findings.add(
                DATASET_ROLE,
                f"Depositor '{account}' has none of the roles "
                f"{', '.join(sorted(self.roles.dataset))} on dataset {dataset_pid}",
            )


class IdentityCheck(Validator):
    """The slice of identity findings filed under one rule code."""

    def __init__(self, code: str, reconciler: IdentityReconciler) -> None:
        if code not in IDENTITY_RULE_CODES:
            raise ValueError(f"Unknown identity rule code: {code}")
        self.code = code
        self.reconciler = reconciler

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        return self._collect(self.reconciler.findings(ctx).for_code(self.code))


class OrganizationalIdentifierConsistent(Validator):
    """All identity sub-checks as a single outcome; messages carry their code."""

    def __init__(self, reconciler: IdentityReconciler) -> None:
        self.reconciler = reconciler

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        findings = self.reconciler.findings(ctx)
        return self._collect(
            f"[{code}] {message}" for code in findings.codes for message in findings.for_code(code)
        )


def organizational_identifier_consistent(
    ctx: ValidationContext, reconciler: IdentityReconciler | None = None
) -> RuleOutcome:
    """Evaluate the whole identity family for a context."""
    return OrganizationalIdentifierConsistent(reconciler or IdentityReconciler())(ctx)
