"""Bag structure validators: mandatory files and files.xml coverage."""

from __future__ import annotations

from dansbag_cli.bag import iter_payload_files
from dansbag_cli.constants import FILES_XML, NAMESPACES
from dansbag_cli.validation.context import ValidationContext
from dansbag_cli.validation.results import RuleOutcome
from dansbag_cli.validators.base import Validator


class FileExists(Validator):
    """A mandatory file must be present in the bag."""

    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        if (ctx.bag_dir / self.relative_path).is_file():
            return self._success()
        return self._violation(f"Mandatory file '{self.relative_path}' not found in bag")


def described_filepaths(ctx: ValidationContext) -> list[str]:
    """The filepath attributes of files.xml, in document order.

    Raises:
        DocumentParseError: If files.xml is not well-formed.
    """
    root = ctx.documents.tree(FILES_XML).getroot()
    return [str(p) for p in root.xpath("files:file/@filepath", namespaces=NAMESPACES)]


class FilesXmlPathsExist(Validator):
    """Each file/@filepath in files.xml must name a payload file."""

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        payload = set(iter_payload_files(ctx.bag_dir))
        return self._collect(
            f"files.xml: filepath [{path}] does not refer to a payload file"
            for path in described_filepaths(ctx)
            if path not in payload
        )


class FilesXmlDescribesPayload(Validator):
    """Each payload file must have exactly one file element in files.xml."""

    def check(self, ctx: ValidationContext) -> RuleOutcome:
        described = described_filepaths(ctx)
        messages = []
        seen: set[str] = set()
        for path in described:
            if path in seen:
                messages.append(f"files.xml: filepath [{path}] is described more than once")
            seen.add(path)
        messages.extend(
            f"files.xml: payload file [{path}] is not described"
            for path in iter_payload_files(ctx.bag_dir)
            if path not in seen
        )
        return self._collect(messages)


def file_exists(relative_path: str) -> FileExists:
    return FileExists(relative_path)


def files_xml_paths_exist() -> FilesXmlPathsExist:
    return FilesXmlPathsExist()


def files_xml_describes_payload() -> FilesXmlDescribesPayload:
    return FilesXmlDescribesPayload()
