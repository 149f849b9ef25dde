"""Document parsing -- load source files, resolve ``$ref`` pointers, scaffold bodies.

This sub-package is responsible for the format-neutral first half of the
specport pipeline: turning a raw RAML or OpenAPI document (YAML or JSON, local
file, stdin or URL) into a generic tree that a format adapter can walk.

Typical usage::

    from specport.parser import load_document, detect_format

    document = load_document("petstore.yaml")
    fmt = detect_format(document)

Sub-modules:

* :mod:`~specport.parser.loader` -- I/O layer (URL, file, stdin), YAML
  parsing with RAML ``!include`` placeholders, and format detection.
* :mod:`~specport.parser.resolver` -- ``$ref`` resolution against the
  ``components`` index with soft misses and a cycle guard.
* :mod:`~specport.parser.schema` -- Empty JSON body scaffolds built from
  request body schemas.
"""

from specport.parser.loader import (
    IncludeTag,
    SourceDocument,
    detect_format,
    load_document,
    load_document_async,
    parse_document,
)
from specport.parser.resolver import resolve_refs
from specport.parser.schema import scaffold_from_schema

__all__ = [
    "IncludeTag",
    "SourceDocument",
    "detect_format",
    "load_document",
    "load_document_async",
    "parse_document",
    "resolve_refs",
    "scaffold_from_schema",
]
