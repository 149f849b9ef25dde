"""Format adapters -- one converter per source description format.

Each adapter implements the :class:`FormatAdapter` capability: take a parsed
document, return the collection's top-level items. The two adapters share the
item builders in :mod:`specport.builder` but no traversal code.

* :class:`RamlAdapter` -- nested RAML resource trees.
* :class:`OpenApiAdapter` -- OpenAPI 3.x path maps, grouped by tag.

Example::

    from specport.adapters import get_adapter

    adapter = get_adapter(DocumentFormat.RAML)
    items = adapter.convert(document.data)
"""

from __future__ import annotations

from typing import Optional

from specport.adapters.base import FormatAdapter
from specport.adapters.openapi import OpenApiAdapter
from specport.adapters.raml import RamlAdapter
from specport.models import DocumentFormat, ImportSettings

ADAPTERS: dict[DocumentFormat, type[FormatAdapter]] = {
    DocumentFormat.RAML: RamlAdapter,
    DocumentFormat.OPENAPI: OpenApiAdapter,
}


def get_adapter(fmt: DocumentFormat, settings: Optional[ImportSettings] = None) -> FormatAdapter:
    """Instantiate the adapter registered for *fmt*."""
    return ADAPTERS[fmt](settings)


__all__ = ["ADAPTERS", "FormatAdapter", "OpenApiAdapter", "RamlAdapter", "get_adapter"]
