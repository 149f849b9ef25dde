"""Convert RAML resource trees into folders and requests.

A RAML document nests resources by path: every key starting with ``/`` is a
resource whose value may hold further resources and HTTP method nodes. The
walker mirrors that tree one to one:

* a method key (``get``, ``post``, ... case-insensitive) becomes a request,
* a ``/segment`` key becomes a folder named after the segment, holding
  whatever its value converts to,
* every other key is ignored.

RAML's structural keywords (``title``, ``traits``, ``types``,
``uriParameters``, ...) are *not* filtered before interpretation. None of them
looks like a method or a resource path, but nothing prevents a document from
declaring a colliding key. :attr:`ImportSettings.raml_excluded_keys` can
exclude keys explicitly; :data:`RAML_RESERVED_KEYS` lists the candidates.

Every step returns newly built items; the walker never mutates a folder once
it has been created.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specport.adapters.base import FormatAdapter
from specport.builder import (
    FORM_MODES,
    as_text,
    body_mode_for_mime,
    build_api_name,
    build_folder,
    build_request_item,
    extract_uri_vars,
    make_field,
    select_media_type,
    template_path,
)
from specport.models import (
    Body,
    BodyMode,
    DocumentFormat,
    HTTPMethod,
    Item,
    RequestField,
    RequestItem,
)

logger = logging.getLogger(__name__)

RAML_METHODS = frozenset(m.value for m in HTTPMethod)

RAML_RESERVED_KEYS = (
    "title",
    "protocols",
    "mediatype",
    "resourcetypes",
    "traits",
    "types",
    "type",
    "uriparameters",
    "headers",
)
"""Structural RAML keywords that could be excluded from interpretation.

Not applied by default: pass them to ``raml_excluded_keys`` to opt in.
"""


def _mapping(value: Any) -> dict[str, Any]:
    """Return *value* if it is a mapping, else an empty one (``get:`` with no body, type shorthands)."""
    return value if isinstance(value, dict) else {}


def folder_name(resource_key: str) -> str:
    """Derive a folder name from a resource key: ``/pets`` -> ``pets``."""
    return " ".join(resource_key.replace("/", " ").split())


class RamlAdapter(FormatAdapter):
    """Walks a RAML document and returns its resources as nested folders."""

    format = DocumentFormat.RAML
    display_name = "RAML"

    def convert(self, document: dict[str, Any]) -> list[Item]:
        base_uri = document.get("baseUri") or self.settings.base_uri_placeholder
        media_type = self._default_media_type(document)
        logger.debug("RAML base URI %s, default media type %s", base_uri, media_type)
        return self.walk(document, str(base_uri), "", media_type)

    def _default_media_type(self, document: dict[str, Any]) -> Optional[str]:
        declared = document.get("mediaType")
        if isinstance(declared, list):
            return select_media_type(declared, self.settings.default_media_type)
        if declared:
            return str(declared)
        return self.settings.default_media_type

    def walk(
        self,
        node: Any,
        base_uri: str,
        base_path: str,
        default_media_type: Optional[str] = None,
    ) -> list[Item]:
        """Convert the keys of one RAML node into items, in source key order.

        Args:
            node: A RAML node (the document root or a resource's value).
            base_uri: Prefix of every request URL.
            base_path: Templated path accumulated from enclosing resources.
            default_media_type: Media type assumed for bodies that do not
                declare one of the known types.

        Returns:
            One request per method key and one folder per resource key.
        """
        excluded = {key.lower() for key in self.settings.raml_excluded_keys}
        items: list[Item] = []
        for raw_key, value in _mapping(node).items():
            key = str(raw_key)
            if key.lower() in excluded:
                continue
            if key.lower() in RAML_METHODS:
                items.append(
                    self.build_request(key, base_uri, base_path, _mapping(value), default_media_type)
                )
            elif key.startswith("/"):
                children = self.walk(
                    value, base_uri, base_path + template_path(key), default_media_type
                )
                items.append(build_folder(folder_name(key), children))
        return items

    def build_request(
        self,
        method: str,
        base_uri: str,
        path: str,
        node: dict[str, Any],
        default_media_type: Optional[str] = None,
    ) -> RequestItem:
        """Build the request for one RAML method node."""
        return build_request_item(
            name=str(node.get("displayName") or build_api_name(method, path)),
            method=method,
            url=f"{base_uri}/{path}",
            headers=self._fields(node.get("headers"), use_example=True),
            params=self._fields(node.get("queryParameters")),
            uri_vars=extract_uri_vars(path, self.settings.base_uri_placeholder),
            body=self.build_body(node.get("body"), default_media_type),
            docs=as_text(node.get("description")),
        )

    def _fields(self, declared: Any, use_example: bool = False) -> list[RequestField]:
        fields = []
        for name, props in _mapping(declared).items():
            props = _mapping(props)
            fields.append(
                make_field(
                    name,
                    value=props.get("example") if use_example else "",
                    description=props.get("description"),
                    enabled=props.get("required"),
                )
            )
        return fields

    def build_body(self, body: Any, default_media_type: Optional[str] = None) -> Body:
        """Build a request body from a RAML ``body`` node.

        The media type is chosen by :func:`~specport.builder.select_media_type`.
        Form bodies list the declared ``properties`` (under the chosen media
        type, else directly under ``body``); other bodies carry the declared
        ``example``.
        """
        if not body:
            return Body()

        declared = _mapping(body)
        media_type = select_media_type(declared.keys(), default_media_type)
        if media_type is None:
            return Body()

        mode = body_mode_for_mime(media_type) or BodyMode.NONE
        media_node = _mapping(declared.get(media_type))

        if mode in FORM_MODES:
            properties = media_node.get("properties") or declared.get("properties")
            fields = [
                make_field(
                    name,
                    description=_mapping(props).get("description"),
                    enabled=_mapping(props).get("required"),
                )
                for name, props in _mapping(properties).items()
            ]
            return Body.for_mode(mode, fields)

        example = media_node.get("example", declared.get("example"))
        return Body.for_mode(mode, as_text(example, indent=self.settings.json_indent))
