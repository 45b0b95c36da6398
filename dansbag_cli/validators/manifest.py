"""Checksum manifest validators.

Walk failures and unreadable manifests are reported as violations; nothing
in this module aborts a run.
"""

from __future__ import annotations

import logging

from dansbag_cli.bag import file_digest, iter_payload_files, manifest_paths, read_manifest
from dansbag_cli.constants import PAYLOAD_DIR
from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.results import RuleOutcome
from dansbag_cli.validators.base import Validator

logger = logging.getLogger(__name__)

INVALID_BAG = "Bag is not valid"


class ManifestsCoverPayload(Validator):
    """Every payload file must be listed in at least one manifest.

    Only the first unlisted file (in sorted traversal order) is reported.
    """

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        messages: list[str] = []
        listed: set[str] = set()

        for path in manifest_paths(ctx.bag_dir):
            try:
                listed.update(read_manifest(path).entries)
            except (OSError, UnicodeDecodeError) as exc:
                messages.append(f"{INVALID_BAG}: Manifest [{path.name}] could not be read: {exc}")

        if not (ctx.bag_dir / PAYLOAD_DIR).is_dir():
            messages.append(f"{INVALID_BAG}: Payload directory [{PAYLOAD_DIR}] does not exist!")
            return self._collect(messages)

        def on_walk_error(exc: OSError) -> None:
            messages.append(f"{INVALID_BAG}: Cannot read [{exc.filename}]: {exc.strerror}")

        for relative_path in iter_payload_files(ctx.bag_dir, onerror=on_walk_error):
            if relative_path not in listed:
                messages.append(
                    f"{INVALID_BAG}: File [{relative_path}] is in the payload directory "
                    "but isn't listed in any manifest!"
                )
                break

        return self._collect(messages)


class ManifestChecksumsMatch(Validator):
    """Every manifest entry must exist and match its recorded checksum."""

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        messages: list[str] = []
        paths = manifest_paths(ctx.bag_dir)
        if not paths:
            return self._violation(f"{INVALID_BAG}: No payload manifest found!")

        for manifest_path in paths:
            try:
                manifest = read_manifest(manifest_path)
            except (OSError, UnicodeDecodeError) as exc:
                messages.append(
                    f"{INVALID_BAG}: Manifest [{manifest_path.name}] could not be read: {exc}"
                )
                continue

            logger.debug("Verifying %d entries of %s", len(manifest.entries), manifest.name)
            for relative_path, expected in manifest.entries.items():
                file_path = ctx.bag_dir / relative_path
                if not file_path.is_file():
                    messages.append(
                        f"{INVALID_BAG}: File [{relative_path}] is listed in "
                        f"{manifest.name} but does not exist!"
                    )
                    continue
                try:
                    actual = file_digest(file_path, manifest.algorithm)
                except OSError as exc:
                    messages.append(f"{INVALID_BAG}: Cannot read [{relative_path}]: {exc.strerror}")
                    continue
                if actual != expected:
                    messages.append(
                        f"{INVALID_BAG}: File [{relative_path}] has checksum {actual} "
                        f"but {manifest.name} lists {expected}!"
                    )

        return self._collect(messages)


def manifests_cover_payload() -> ManifestsCoverPayload:
    return ManifestsCoverPayload()


def manifest_checksums_match() -> ManifestChecksumsMatch:
    return ManifestChecksumsMatch()
