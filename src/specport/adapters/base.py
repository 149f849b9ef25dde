"""Abstract base class for source-format adapters.

Every supported description format is converted by one subclass of
:class:`FormatAdapter`. Adapters share no traversal code: each one walks its
own source shape and produces the same normalized item list through
:mod:`specport.builder`. Known gaps of one format therefore stay inside its
adapter.

Example:
    Minimal adapter implementation::

        class EmptyAdapter(FormatAdapter):
            format = DocumentFormat.RAML
            display_name = "empty"

            def convert(self, document):
                return []
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from specport.models import DocumentFormat, ImportSettings, Item


class FormatAdapter(ABC):
    """Converts one parsed source document into collection items.

    Subclasses set :attr:`format` and :attr:`display_name` and implement
    :meth:`convert`. Adapters are cheap to construct and hold nothing but
    their settings, so one instance per import is the norm.

    Args:
        settings: Import settings. Defaults are used when omitted.
    """

    format: DocumentFormat
    display_name: str

    def __init__(self, settings: Optional[ImportSettings] = None) -> None:
        self.settings = settings or ImportSettings()

    @abstractmethod
    def convert(self, document: dict[str, Any]) -> list[Item]:
        """Return the top-level items for *document*, in source order.

        Args:
            document: The parsed source tree.

        Returns:
            A freshly built list of folder and request items.
        """
        ...

    def title(self, document: dict[str, Any]) -> str:
        """Return the collection name declared by *document* (``""`` if none)."""
        title = document.get("title")
        return str(title) if title is not None else ""
