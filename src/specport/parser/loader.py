"""Load RAML and OpenAPI documents from a file, URL, or stdin.

This module handles all I/O for fetching raw API description documents and
converting them into generic trees of dicts, lists and scalars. Everything is
parsed as YAML (a superset of JSON), using a loader that understands RAML's
``!include`` tag. Included files are **not** expanded: the tag's value is kept
as an :class:`IncludeTag` placeholder string.

The public functions are:

* :func:`load_document` -- Read and parse a document from any supported source.
* :func:`load_document_async` -- The same, awaiting the read.
* :func:`parse_document` -- Parse already-read text.
* :func:`detect_format` -- Decide whether a parsed document is RAML or OpenAPI.

After loading, the :class:`SourceDocument` is handed to the format adapter
chosen by :func:`detect_format` (see :mod:`specport.adapters`).
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml

from specport.exceptions import DocumentLoadError, ImportStage, UnsupportedFormatError
from specport.models import DocumentFormat, ImportSettings

logger = logging.getLogger(__name__)

RAML_HEADER = "#%RAML"


class IncludeTag(str):
    """Inert placeholder for a RAML ``!include`` scalar.

    Behaves exactly like the referenced path string so that downstream code
    can treat it as an ordinary scalar; ``isinstance(value, IncludeTag)``
    tells the two apart.
    """

    tag = "!include"

    def __repr__(self) -> str:
        return f"IncludeTag({str.__repr__(self)})"


class _DocumentLoader(yaml.SafeLoader):
    """``SafeLoader`` that tolerates RAML's custom tags."""


def _construct_include(loader: yaml.SafeLoader, node: yaml.Node) -> IncludeTag:
    return IncludeTag(loader.construct_scalar(node))


def _construct_unknown_tag(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    # Unknown local tags are read as their untagged value, best-effort.
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node, deep=True)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node, deep=True)
    return loader.construct_scalar(node)


_DocumentLoader.add_constructor(IncludeTag.tag, _construct_include)
_DocumentLoader.add_multi_constructor("!", _construct_unknown_tag)


@dataclass
class SourceDocument:
    """A parsed document together with the text it came from.

    The raw text is kept because RAML is recognised by its ``#%RAML``
    comment header, which YAML parsing discards.
    """

    source: str
    text: str
    data: dict[str, Any] = field(default_factory=dict)


def load_document(source: str, settings: Optional[ImportSettings] = None) -> SourceDocument:
    """Load a RAML or OpenAPI document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        settings: Import settings; only ``allowed_extensions`` and
            ``request_timeout`` are consulted here.

    Returns:
        The parsed :class:`SourceDocument`.

    Raises:
        DocumentLoadError: If the source cannot be read (stage ``read``) or
            its content is not valid YAML/JSON (stage ``parse``).
    """
    settings = settings or ImportSettings()
    if source == "-":
        text, hint = _read_from_stdin()
    elif source.startswith(("http://", "https://")):
        text, hint = _read_from_url(source, settings.request_timeout)
    else:
        text, hint = _read_from_file(source, settings.allowed_extensions)
    return SourceDocument(source=source, text=text, data=parse_document(text, hint=hint))


async def load_document_async(
    source: str, settings: Optional[ImportSettings] = None
) -> SourceDocument:
    """Asynchronous variant of :func:`load_document`.

    Only the read suspends; parsing runs synchronously once the text is
    available. URLs are fetched with :class:`httpx.AsyncClient`, files are
    read in a worker thread.
    """
    settings = settings or ImportSettings()
    if source == "-":
        text, hint = await asyncio.to_thread(_read_from_stdin)
    elif source.startswith(("http://", "https://")):
        text, hint = await _read_from_url_async(source, settings.request_timeout)
    else:
        text, hint = await asyncio.to_thread(
            _read_from_file, source, settings.allowed_extensions
        )
    return SourceDocument(source=source, text=text, data=parse_document(text, hint=hint))


def _read_from_stdin() -> tuple[str, str]:
    """Read a document from stdin.

    Raises:
        DocumentLoadError: If stdin cannot be read or is empty.
    """
    try:
        content = sys.stdin.read()
    except Exception as exc:
        raise DocumentLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DocumentLoadError("No input received from stdin")

    return content, ""


def _hint_from_content_type(content_type: str) -> str:
    if "json" in content_type:
        return "json"
    if "yaml" in content_type or "yml" in content_type or "raml" in content_type:
        return "yaml"
    return ""


def _read_from_url(url: str, timeout: float) -> tuple[str, str]:
    """Fetch a document from a URL.

    The response content-type is used as a parsing hint.

    Raises:
        DocumentLoadError: If the URL cannot be fetched.
    """
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DocumentLoadError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DocumentLoadError(f"Failed to fetch document from {url}: {exc}") from exc

    return response.text, _hint_from_content_type(response.headers.get("content-type", ""))


async def _read_from_url_async(url: str, timeout: float) -> tuple[str, str]:
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise DocumentLoadError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise DocumentLoadError(f"Failed to fetch document from {url}: {exc}") from exc

    return response.text, _hint_from_content_type(response.headers.get("content-type", ""))


def _read_from_file(path: str, allowed_extensions: list[str]) -> tuple[str, str]:
    """Read a document from a local file.

    Only files whose suffix appears in *allowed_extensions* are accepted
    (compared case-insensitively).

    Raises:
        DocumentLoadError: If the file is missing, has an unsupported
            extension, cannot be read, or is empty.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentLoadError(f"Document file not found: {path}")

    suffix = file_path.suffix.lower()
    allowed = {ext.lower() for ext in allowed_extensions}
    if suffix not in allowed:
        raise DocumentLoadError(
            f"Unsupported file extension '{suffix or '(none)'}' for {path}. "
            f"Expected one of: {', '.join(sorted(allowed))}"
        )

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"Failed to read document file {path}: {exc}") from exc

    if not content.strip():
        raise DocumentLoadError(f"Document file is empty: {path}")

    return content, "json" if suffix == ".json" else "yaml"


def parse_document(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as YAML, or as strict JSON when *hint* is ``"json"``.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed mapping.

    Raises:
        DocumentLoadError: With stage ``parse`` when the content is not valid
            YAML/JSON or its top level is not a mapping.
    """
    if hint == "json":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.error("Error parsing the document as JSON: %s", exc)
            raise DocumentLoadError(f"Invalid JSON: {exc}", stage=ImportStage.PARSE) from exc
    else:
        try:
            result = yaml.load(content, Loader=_DocumentLoader)  # noqa: S506
        except yaml.YAMLError as exc:
            logger.error("Error parsing the document as YAML: %s", exc)
            raise DocumentLoadError(
                f"Invalid YAML/JSON document: {exc}", stage=ImportStage.PARSE
            ) from exc

    if not isinstance(result, dict):
        raise DocumentLoadError(
            "Document must be a YAML/JSON mapping (got "
            f"{type(result).__name__ if result is not None else 'empty document'})",
            stage=ImportStage.PARSE,
        )
    return result


def detect_format(document: SourceDocument) -> DocumentFormat:
    """Decide which adapter should convert *document*.

    RAML documents are recognised by their ``#%RAML`` header line; OpenAPI
    documents by an ``openapi`` field declaring a 3.x version. A mapping with
    neither an ``openapi`` nor a ``swagger`` field is read as a RAML tree,
    since JSON-encoded RAML cannot carry the header comment.

    Raises:
        UnsupportedFormatError: For Swagger 2.x and OpenAPI versions other
            than 3.x.
    """
    if document.text.lstrip("\ufeff \t\r\n").startswith(RAML_HEADER):
        return DocumentFormat.RAML

    data = document.data
    if "swagger" in data:
        raise UnsupportedFormatError(
            f"Swagger {data['swagger']} is not supported. "
            "Only RAML and OpenAPI 3.x documents can be imported."
        )

    openapi_version = data.get("openapi")
    if openapi_version is None:
        return DocumentFormat.RAML
    if not str(openapi_version).startswith("3."):
        raise UnsupportedFormatError(
            f"Unsupported OpenAPI version: {openapi_version}. Only OpenAPI 3.x is supported."
        )
    return DocumentFormat.OPENAPI
