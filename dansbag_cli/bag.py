"""Read-only access to a bag on disk.

This module provides:
- open_bag(): Context manager yielding a bag directory for a path or zip
- read_bag_info(): Parse bag-info.txt into a BagInfo
- read_manifest(): Parse a manifest-<alg>.txt file
- iter_payload_files(): Walk the payload directory in a stable order
- file_digest(): Checksum a file with a manifest algorithm
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import tempfile
import zipfile
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from dansbag_cli.constants import (
    BAG_INFO_TXT,
    CHECKSUM_CHUNK_SIZE,
    MANIFEST_ALGORITHMS,
    MANIFEST_PREFIX,
    PAYLOAD_DIR,
)
from dansbag_cli.errors import BagExtractionError, BagInfoReadError, BagNotFoundError

logger = logging.getLogger(__name__)

_MANIFEST_SEPARATOR = re.compile(r"[ \t]+")


@contextmanager
def open_bag(location: Path) -> Iterator[Path]:
    """Yield the bag directory for a directory or zip file.

    A zip is extracted into a temporary directory that is removed when the
    block exits, whether validation finished, failed or was aborted.

    Args:
        location: Bag directory or zip archive containing one.

    Raises:
        BagNotFoundError: If the location does not exist or cannot be read.
        BagExtractionError: If the zip holds no directory.
    """
    if location.is_dir():
        yield location
        return

    if not location.is_file():
        raise BagNotFoundError(str(location))

    with location.open("rb") as fh:
        with extracted_zip(fh) as bag_dir:
            yield bag_dir


@contextmanager
def extracted_zip(stream) -> Iterator[Path]:  # type: ignore[no-untyped-def]
    """Extract a zip stream and yield the single bag directory inside it."""
    with tempfile.TemporaryDirectory(prefix="dansbag-") as tmp:
        tmp_path = Path(tmp)
        try:
            with zipfile.ZipFile(stream) as archive:
                archive.extractall(tmp_path)
        except zipfile.BadZipFile as exc:
            raise BagExtractionError(f"Not a valid zip file: {exc}") from exc

        directories = sorted(p for p in tmp_path.iterdir() if p.is_dir())
        if not directories:
            raise BagExtractionError("Extracted zip does not contain a directory")
        if len(directories) > 1:
            logger.warning(
                "Zip contains %d top-level directories, using %s",
                len(directories),
                directories[0].name,
            )
        yield directories[0]


@dataclass
class BagInfo:
    """Elements of bag-info.txt in file order.

    Labels may repeat, so each label maps to a list of values.
    """

    elements: dict[str, list[str]] = field(default_factory=dict)

    def get(self, label: str) -> str | None:
        """First value for a label, or None."""
        values = self.elements.get(label)
        return values[0] if values else None

    def get_all(self, label: str) -> list[str]:
        return list(self.elements.get(label, []))


def read_bag_info(bag_dir: Path) -> BagInfo:
    """Parse bag-info.txt; a missing file yields an empty BagInfo.

    Continuation lines (starting with whitespace) are appended to the
    previous value separated by a single space.

    Raises:
        BagInfoReadError: If the file exists but is unreadable or not UTF-8.
    """
    info = BagInfo()
    path = bag_dir / BAG_INFO_TXT
    if not path.is_file():
        return info

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BagInfoReadError(BAG_INFO_TXT, str(exc)) from exc

    label: str | None = None
    for line in text.splitlines():
        if not line.strip():
            continue
        if line[0] in " \t" and label is not None:
            info.elements[label][-1] += " " + line.strip()
            continue
        name, sep, value = line.partition(":")
        if not sep:
            logger.debug("Ignoring malformed bag-info line: %r", line)
            continue
        label = name.strip()
        info.elements.setdefault(label, []).append(value.strip())
    return info


@dataclass(frozen=True)
class Manifest:
    """A payload manifest: relative path -> checksum."""

    name: str
    algorithm: str
    entries: dict[str, str]


def _decode_manifest_path(path: str) -> str:
    # BagIt percent-encodes CR, LF and % in manifest paths
    return path.replace("%0A", "\n").replace("%0D", "\r").replace("%25", "%")


def read_manifest(path: Path) -> Manifest:
    """Parse one manifest-<alg>.txt file.

    Each line is a checksum, one or more spaces or tabs, then the path. The
    path is kept as written, trailing spaces included.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not UTF-8.
    """
    algorithm = path.stem[len(MANIFEST_PREFIX) :].lower()
    entries: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").split("\n"):
        line = line.removesuffix("\r")
        if not line.strip():
            continue
        fields = _MANIFEST_SEPARATOR.split(line.lstrip(" \t"), maxsplit=1)
        if len(fields) < 2:
            logger.debug("Ignoring malformed line in %s: %r", path.name, line)
            continue
        checksum, file_path = fields
        entries[_decode_manifest_path(file_path)] = checksum.lower()
    return Manifest(name=path.name, algorithm=algorithm, entries=entries)


def manifest_paths(bag_dir: Path) -> list[Path]:
    """Payload manifests at the bag root, sorted by name."""
    return sorted(
        p
        for p in bag_dir.glob(f"{MANIFEST_PREFIX}*.txt")
        if p.is_file() and p.stem[len(MANIFEST_PREFIX) :].lower() in MANIFEST_ALGORITHMS
    )


def iter_payload_files(
    bag_dir: Path,
    *,
    onerror: Callable[[OSError], None] | None = None,
) -> Iterator[str]:
    """Yield payload file paths relative to the bag root, e.g. 'data/a.txt'.

    Directories and files are visited in sorted order so the first reported
    problem is the same on every run.
    """
    payload = bag_dir / PAYLOAD_DIR
    for dirpath, dirnames, filenames in os.walk(payload, onerror=onerror):
        dirnames.sort()
        for filename in sorted(filenames):
            yield (Path(dirpath) / filename).relative_to(bag_dir).as_posix()


def file_digest(path: Path, algorithm: str) -> str:
    """Hex digest of a file using a manifest algorithm name (md5, sha1, ...)."""
    digest = hashlib.new(algorithm)
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(CHECKSUM_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
