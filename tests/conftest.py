"""Shared pytest fixtures for dansbag tests."""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Mapping
from pathlib import Path

import pytest
import yaml

from dansbag_cli.config import CatalogSettings, ValidatorSettings
from dansbag_cli.validation.documents import SchemaCache

DDM_NAMESPACES = (
    'xmlns:ddm="http://schemas.dans.knaw.nl/dataset/ddm-v2/" '
    'xmlns:gml="http://www.opengis.net/gml" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcx-gml="http://easy.dans.knaw.nl/schemas/dcx/gml/"'
)

DEFAULT_SPATIAL = """
    <dcx-gml:spatial>
      <gml:Point><gml:pos>126466 529006</gml:pos></gml:Point>
    </dcx-gml:spatial>
    <dcx-gml:spatial>
      <gml:boundedBy>
        <gml:Envelope srsName="urn:ogc:def:crs:EPSG::28992">
          <gml:lowerCorner>-7000 289000</gml:lowerCorner>
          <gml:upperCorner>300000 629000</gml:upperCorner>
        </gml:Envelope>
      </gml:boundedBy>
    </dcx-gml:spatial>
"""

DEFAULT_PAYLOAD: dict[str, bytes] = {
    "data/file1.txt": b"Lorem ipsum dolor sit amet\n",
    "data/subdir/file2.txt": b"consectetur adipiscing elit\n",
}

DEFAULT_BAG_INFO: dict[str, str] = {
    "Bagging-Date": "2023-01-10",
    "Has-Organizational-Identifier": "REPO1:123",
    "Is-Version-Of": "urn:uuid:4f8d8a2c-7d60-4ab5-9a93-7f1d5a8b0a11",
    "Data-Station-User-Account": "user001",
}

BagFactory = Callable[..., Path]


def ddm_document(spatial: str = DEFAULT_SPATIAL) -> str:
    """A dataset.xml with the given dcmiMetadata content."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<ddm:DDM {DDM_NAMESPACES}>\n"
        "  <ddm:profile><dc:title>A test dataset</dc:title></ddm:profile>\n"
        f"  <ddm:dcmiMetadata>{spatial}</ddm:dcmiMetadata>\n"
        "</ddm:DDM>\n"
    )


def files_document(paths: list[str]) -> str:
    """A files.xml describing the given payload paths."""
    entries = "".join(f'  <file filepath="{p}"/>\n' for p in paths)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<files xmlns="http://easy.dans.knaw.nl/schemas/bag/metadata/files/">\n'
        f"{entries}</files>\n"
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def schema_locations(fixtures_dir: Path) -> dict[str, str]:
    return {
        "dataset.xml": str(fixtures_dir / "schemas" / "dataset.xsd"),
        "files.xml": str(fixtures_dir / "schemas" / "files.xsd"),
    }


@pytest.fixture
def schemas(schema_locations: dict[str, str]) -> SchemaCache:
    """Compiled test schemas for dataset.xml and files.xml."""
    return SchemaCache(schema_locations)


@pytest.fixture
def settings(schema_locations: dict[str, str]) -> ValidatorSettings:
    return ValidatorSettings(
        schema_locations=schema_locations,
        catalog=CatalogSettings(base_url="https://dataverse.example.org"),
    )


@pytest.fixture
def config_file(tmp_path: Path, schema_locations: dict[str, str]) -> Path:
    """A config.yaml pointing at the test schemas."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"schemas": schema_locations}))
    return path


@pytest.fixture
def make_bag(tmp_path: Path) -> BagFactory:
    """Factory writing a bag that passes every stand-alone rule by default.

    Keyword arguments override one part of the bag:
        name: Bag directory name.
        payload: Payload files (path below the bag root -> content).
        bag_info: bag-info.txt elements.
        dataset_xml / files_xml: Document text; None omits the file. The
            default files.xml describes every payload file.
        unlisted: Payload paths left out of the manifest.
    """

    def factory(
        name: str = "bag",
        *,
        payload: Mapping[str, bytes] | None = None,
        bag_info: Mapping[str, str] | None = None,
        dataset_xml: str | None = ddm_document(),
        files_xml: str | None = "",
        unlisted: tuple[str, ...] = (),
    ) -> Path:
        payload = DEFAULT_PAYLOAD if payload is None else payload
        bag_info = DEFAULT_BAG_INFO if bag_info is None else bag_info

        bag_dir = tmp_path / name
        bag_dir.mkdir()
        (bag_dir / "data").mkdir()
        (bag_dir / "bagit.txt").write_text("BagIt-Version: 1.0\nTag-File-Character-Encoding: UTF-8\n")
        (bag_dir / "bag-info.txt").write_text("".join(f"{k}: {v}\n" for k, v in bag_info.items()))

        manifest_lines = []
        for relative_path, content in payload.items():
            file_path = bag_dir / relative_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(content)
            if relative_path not in unlisted:
                manifest_lines.append(f"{hashlib.sha1(content).hexdigest()}  {relative_path}\n")
        (bag_dir / "manifest-sha1.txt").write_text("".join(manifest_lines))

        (bag_dir / "metadata").mkdir()
        if dataset_xml is not None:
            (bag_dir / "metadata" / "dataset.xml").write_text(dataset_xml)
        if files_xml is not None:
            text = files_xml or files_document(sorted(payload))
            (bag_dir / "metadata" / "files.xml").write_text(text)
        return bag_dir

    return factory


@pytest.fixture
def make_dataset_xml() -> Callable[..., str]:
    """Builder for dataset.xml text around a dcmiMetadata fragment."""
    return ddm_document


@pytest.fixture
def make_files_xml() -> Callable[[list[str]], str]:
    """Builder for files.xml text describing a list of payload paths."""
    return files_document
