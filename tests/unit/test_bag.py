"""Tests for bag access: opening directories and zips, bag-info.txt and manifests."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from dansbag_cli.bag import (
    extracted_zip,
    file_digest,
    iter_payload_files,
    manifest_paths,
    open_bag,
    read_bag_info,
    read_manifest,
)
from dansbag_cli.errors import BagExtractionError, BagInfoReadError, BagNotFoundError

BagFactory = Callable[..., Path]


def zip_directory(bag_dir: Path, target: Path) -> Path:
    with zipfile.ZipFile(target, "w") as archive:
        for path in sorted(bag_dir.rglob("*")):
            archive.write(path, path.relative_to(bag_dir.parent).as_posix())
    return target


class TestOpenBag:
    @pytest.mark.unit
    def test_directory_is_used_in_place(self, make_bag: BagFactory) -> None:
        bag_dir = make_bag()

        with open_bag(bag_dir) as opened:
            assert opened == bag_dir

        assert bag_dir.exists()

    @pytest.mark.unit
    def test_zip_is_extracted_and_cleaned_up(self, make_bag: BagFactory, tmp_path: Path) -> None:
        archive = zip_directory(make_bag("audiences"), tmp_path / "audiences.zip")

        with open_bag(archive) as opened:
            extracted = opened
            assert opened.name == "audiences"
            assert (opened / "bagit.txt").is_file()
            assert (opened / "data" / "file1.txt").read_bytes() == b"Lorem ipsum dolor sit amet\n"

        assert not extracted.exists()

    @pytest.mark.unit
    def test_cleanup_when_block_raises(self, make_bag: BagFactory, tmp_path: Path) -> None:
        archive = zip_directory(make_bag(), tmp_path / "bag.zip")

        with pytest.raises(RuntimeError):
            with open_bag(archive) as opened:
                extracted = opened
                raise RuntimeError("aborted")

        assert not extracted.exists()

    @pytest.mark.unit
    def test_missing_location(self, tmp_path: Path) -> None:
        with pytest.raises(BagNotFoundError):
            with open_bag(tmp_path / "nope"):
                pass

    @pytest.mark.unit
    def test_not_a_zip(self, tmp_path: Path) -> None:
        junk = tmp_path / "junk.zip"
        junk.write_bytes(b"definitely not a zip")

        with pytest.raises(BagExtractionError):
            with open_bag(junk):
                pass

    @pytest.mark.unit
    def test_zip_without_directory(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("bagit.txt", "BagIt-Version: 1.0\n")
        buffer.seek(0)

        with pytest.raises(BagExtractionError) as exc_info:
            with extracted_zip(buffer):
                pass

        assert exc_info.value.message == "Extracted zip does not contain a directory"


class TestBagInfo:
    @pytest.mark.unit
    def test_repeated_labels_and_continuations(self, tmp_path: Path) -> None:
        (tmp_path / "bag-info.txt").write_text(
            "Bagging-Date: 2023-01-10\n"
            "Internal-Sender-Description: A description\n"
            "  that continues here\n"
            "Keyword: one\n"
            "Keyword: two\n"
        )

        info = read_bag_info(tmp_path)

        assert info.get("Bagging-Date") == "2023-01-10"
        assert info.get("Internal-Sender-Description") == "A description that continues here"
        assert info.get_all("Keyword") == ["one", "two"]
        assert info.get("Missing") is None

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_bag_info(tmp_path).elements == {}

    @pytest.mark.unit
    def test_undecodable_file(self, tmp_path: Path) -> None:
        (tmp_path / "bag-info.txt").write_bytes(b"Data-Station-User-Account: us\xff\xfeer\n")

        with pytest.raises(BagInfoReadError) as exc_info:
            read_bag_info(tmp_path)

        assert exc_info.value.code == "DBAG-FTL004"
        assert exc_info.value.message.startswith("bag-info.txt could not be read: ")


class TestManifests:
    @pytest.mark.unit
    def test_read_manifest(self, make_bag: BagFactory) -> None:
        bag_dir = make_bag()
        (bag_dir / "manifest-unknown.txt").write_text("abc  data/file1.txt\n")

        paths = manifest_paths(bag_dir)
        manifest = read_manifest(paths[0])

        assert [p.name for p in paths] == ["manifest-sha1.txt"]
        assert manifest.algorithm == "sha1"
        assert set(manifest.entries) == {"data/file1.txt", "data/subdir/file2.txt"}

    @pytest.mark.unit
    def test_tab_separated_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "manifest-md5.txt"
        path.write_text("ABC123\tdata/a.txt\ndef456 \t data/b c.txt\n")

        assert read_manifest(path).entries == {"data/a.txt": "abc123", "data/b c.txt": "def456"}

    @pytest.mark.unit
    def test_trailing_spaces_belong_to_the_path(self, tmp_path: Path) -> None:
        path = tmp_path / "manifest-md5.txt"
        path.write_text("abc123  data/name \r\n\n")

        assert read_manifest(path).entries == {"data/name ": "abc123"}

    @pytest.mark.unit
    def test_line_without_path_is_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "manifest-md5.txt"
        path.write_text("abc123\n")

        assert read_manifest(path).entries == {}

    @pytest.mark.unit
    def test_file_digest(self, tmp_path: Path) -> None:
        path = tmp_path / "a.txt"
        path.write_bytes(b"abc")

        assert file_digest(path, "md5") == "900150983cd24fb0d6963f7d28e17f72"
        assert file_digest(path, "sha1") == "a9993e364706816aba3e25717850c26c9cd0d89d"

    @pytest.mark.unit
    def test_iter_payload_files(self, make_bag: BagFactory) -> None:
        assert list(iter_payload_files(make_bag())) == ["data/file1.txt", "data/subdir/file2.txt"]
