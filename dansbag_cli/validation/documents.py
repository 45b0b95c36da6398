"""XML document and schema caches.

DocumentCache is owned by one validation run: each document is parsed at
most once and the result (tree or parse diagnostic) is shared by every rule
that reads the same path.

SchemaCache is built once per process. All schemas are loaded and compiled
when the cache is constructed and are read-only afterwards.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import requests
from lxml import etree

from dansbag_cli.errors import DocumentParseError, SchemaLoadError, UnknownSchemaError

logger = logging.getLogger(__name__)

# libxml2 reports unclosed elements as a tag mismatch
_TAG_MISMATCH = re.compile(r"Opening and ending tag mismatch: (?P<name>\S+) line \d+ and \S+")

_REMOTE_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class ParseDiagnostic:
    """Why a document could not be parsed.

    Attributes:
        filename: File name (without directories) of the document.
        line: Line of the first fatal error (0 if unknown).
        column: Column of the first fatal error (0 if unknown).
        message: Parser message without position information.
    """

    filename: str
    line: int
    column: int
    message: str

    def format(self) -> str:
        """Render as '<filename> - line: <L>; column: <C> msg: <M>.'"""
        return format_xml_error(self.filename, self.line, self.column, self.message)


def format_xml_error(filename: str, line: int, column: int, message: str) -> str:
    """Render an XML error the way rule violations report them."""
    text = message.strip().rstrip(".")
    return f"{filename} - line: {line}; column: {column} msg: {text}."


def _describe_syntax_error(filename: str, exc: etree.XMLSyntaxError) -> ParseDiagnostic:
    entry = next(iter(exc.error_log.filter_from_errors()), None)
    if entry is None:
        line, column = exc.position if exc.position else (0, 0)
        message = exc.msg or str(exc)
    else:
        line, column, message = entry.line, entry.column, entry.message

    match = _TAG_MISMATCH.match(message)
    if match:
        name = match.group("name")
        message = f'The element type "{name}" must be terminated by the matching end-tag "</{name}>"'
    return ParseDiagnostic(filename=filename, line=line, column=column, message=message)


@dataclass(frozen=True)
class ParsedDocument:
    """A cache entry: either a parsed tree or a terminal parse diagnostic."""

    path: str
    tree: etree._ElementTree | None = None
    diagnostic: ParseDiagnostic | None = None

    def __post_init__(self) -> None:
        if (self.tree is None) == (self.diagnostic is None):
            raise ValueError(f"{self.path}: exactly one of tree and diagnostic must be set")

    @property
    def ok(self) -> bool:
        return self.tree is not None

    def require_tree(self) -> etree._ElementTree:
        """Return the tree, raising DocumentParseError if parsing failed."""
        if self.tree is not None:
            return self.tree
        reason = self.diagnostic.format() if self.diagnostic is not None else "not parsed"
        raise DocumentParseError(self.path, reason)


class DocumentCache:
    """Parses XML documents of one bag at most once."""

    def __init__(self, bag_dir: Path) -> None:
        self._bag_dir = bag_dir
        self._documents: dict[str, ParsedDocument] = {}

    def get(self, relative_path: str) -> ParsedDocument:
        """Return the parsed document for a path relative to the bag root."""
        cached = self._documents.get(relative_path)
        if cached is None:
            cached = self._parse(relative_path)
            self._documents[relative_path] = cached
        return cached

    def tree(self, relative_path: str) -> etree._ElementTree:
        """Shortcut for get(path).require_tree()."""
        return self.get(relative_path).require_tree()

    def _parse(self, relative_path: str) -> ParsedDocument:
        path = self._bag_dir / relative_path
        filename = path.name
        logger.debug("Parsing %s", path)
        # No network access and no entity expansion for untrusted packages
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            tree = etree.parse(str(path), parser)
        except etree.XMLSyntaxError as exc:
            diagnostic = _describe_syntax_error(filename, exc)
            logger.debug("Cannot parse %s: %s", path, diagnostic.message)
            return ParsedDocument(path=relative_path, diagnostic=diagnostic)
        except OSError as exc:
            diagnostic = ParseDiagnostic(filename=filename, line=0, column=0, message=str(exc))
            return ParsedDocument(path=relative_path, diagnostic=diagnostic)
        return ParsedDocument(path=relative_path, tree=tree)


class _HttpResolver(etree.Resolver):
    """Fetch schema imports over http(s) with requests.

    libxml2 cannot fetch https URLs itself.
    """

    def __init__(self, session: requests.Session, timeout: float) -> None:
        super().__init__()
        self._session = session
        self._timeout = timeout

    def resolve(self, system_url, public_id, context):  # type: ignore[no-untyped-def]
        if not system_url or not system_url.startswith(_REMOTE_SCHEMES):
            return None
        logger.debug("Fetching schema resource %s", system_url)
        response = self._session.get(system_url, timeout=self._timeout)
        response.raise_for_status()
        return self.resolve_string(response.content, context, base_url=system_url)


class SchemaCache:
    """Compiled XML schemas keyed by document file name.

    Example:
        >>> schemas = SchemaCache({"files.xml": "schemas/files.xsd"})
        >>> schemas.get("files.xml").validate(tree)
    """

    def __init__(
        self,
        locations: Mapping[str, str | Path],
        *,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._schemas: dict[str, etree.XMLSchema] = {
            key: self._load(key, str(location)) for key, location in locations.items()
        }

    def __contains__(self, schema_key: object) -> bool:
        return schema_key in self._schemas

    @property
    def keys(self) -> list[str]:
        return sorted(self._schemas)

    def get(self, schema_key: str) -> etree.XMLSchema:
        """Return the compiled schema registered for a key.

        Raises:
            UnknownSchemaError: If no schema was registered under the key.
        """
        try:
            return self._schemas[schema_key]
        except KeyError:
            raise UnknownSchemaError(schema_key) from None

    def _load(self, key: str, location: str) -> etree.XMLSchema:
        logger.debug("Loading schema %s from %s", key, location)
        parser = etree.XMLParser()
        parser.resolvers.add(_HttpResolver(self._session, self._timeout))
        try:
            if location.startswith(_REMOTE_SCHEMES):
                response = self._session.get(location, timeout=self._timeout)
                response.raise_for_status()
                root = etree.fromstring(response.content, parser, base_url=location)
                document = root.getroottree()
            else:
                document = etree.parse(location, parser)
            return etree.XMLSchema(document)
        except requests.RequestException as exc:
            raise SchemaLoadError(key, location, str(exc)) from exc
        except (OSError, etree.XMLSyntaxError, etree.XMLSchemaParseError) as exc:
            raise SchemaLoadError(key, location, str(exc)) from exc
