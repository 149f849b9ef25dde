"""Convert OpenAPI 3.x documents into tag folders and requests.

OpenAPI describes an API as a flat map of paths to HTTP methods, plus a
shared ``components`` index. Conversion runs in three steps:

1. :func:`extract_operations` resolves ``$ref`` pointers per path item and
   produces one :class:`~specport.models.OperationDescriptor` per
   path + method, carrying the document-wide :class:`OperationContext`
   (base server URL, security schemes, default security).
2. :func:`group_by_tag` buckets the descriptors by their **first** tag.
3. :class:`OpenApiAdapter` turns each bucket into a folder and each untagged
   operation into a top-level request.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they share
the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from specport.adapters.auth import extract_security_schemes, map_auth, select_scheme
from specport.adapters.base import FormatAdapter
from specport.builder import (
    FORM_MODES,
    as_text,
    body_mode_for_mime,
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
    ImportSettings,
    Item,
    OperationContext,
    OperationDescriptor,
    RequestField,
    RequestItem,
)
from specport.parser.resolver import resolve_refs
from specport.parser.schema import scaffold_from_schema

logger = logging.getLogger(__name__)

# HTTP methods recognised by OpenAPI
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)

_SERVER_VARIABLE = re.compile(r"\{([^{}]+)\}")


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def resolve_base_url(servers: Any, placeholder: str = "{{baseUrl}}") -> str:
    """Return the first server URL with its variables replaced by their defaults.

    Variables without a default are left as written. Without any server the
    *placeholder* is returned.
    """
    if not isinstance(servers, list) or not servers or not isinstance(servers[0], dict):
        return placeholder

    server = servers[0]
    url = str(server.get("url") or "")
    if not url:
        return placeholder
    variables = _mapping(server.get("variables"))

    def _substitute(match: re.Match[str]) -> str:
        default = _mapping(variables.get(match.group(1))).get("default")
        return str(default) if default is not None else match.group(0)

    return _SERVER_VARIABLE.sub(_substitute, url).rstrip("/")


def merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field), per the OpenAPI spec.

    Args:
        path_params: Parameters defined at the path level.
        op_params: Parameters defined at the operation level.

    Returns:
        A merged list of parameter dicts.
    """
    path_params = [p for p in path_params if isinstance(p, dict)]
    op_params = [p for p in op_params if isinstance(p, dict)]

    op_keys = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [p for p in path_params if (p.get("name", ""), p.get("in", "")) not in op_keys]
    merged.extend(op_params)
    return merged


def extract_operations(
    document: dict[str, Any], settings: Optional[ImportSettings] = None
) -> list[OperationDescriptor]:
    """Extract one descriptor per path + HTTP method, in source order.

    Each path item is resolved against ``components`` before extraction, so
    descriptors carry inlined schemas, parameters and request bodies wherever
    the refs could be followed.

    Args:
        document: The parsed OpenAPI document.
        settings: Import settings (ref depth, cycle policy, base URL
            placeholder).

    Returns:
        A list of :class:`~specport.models.OperationDescriptor` instances.

    Raises:
        RefCycleError: When a ref cycle is found and the cycle policy is
            ``error``.
    """
    settings = settings or ImportSettings()
    components = _mapping(document.get("components"))

    def resolve(node: Any) -> Any:
        return resolve_refs(
            node,
            components,
            max_depth=settings.max_ref_depth,
            on_cycle=settings.on_ref_cycle,
        )

    context = OperationContext(
        base_url=resolve_base_url(document.get("servers"), settings.base_url_placeholder),
        security_schemes=extract_security_schemes(resolve(components.get("securitySchemes"))),
        default_security=[s for s in document.get("security") or [] if isinstance(s, dict)],
    )

    descriptors: list[OperationDescriptor] = []
    for path, raw_path_item in _mapping(document.get("paths")).items():
        path_item = resolve(raw_path_item)
        if not isinstance(path_item, dict):
            continue

        path_params = path_item.get("parameters") or []
        for method_str, operation in path_item.items():
            method_key = str(method_str).lower()
            if method_key not in _HTTP_METHODS or not isinstance(operation, dict):
                continue
            descriptors.append(
                OperationDescriptor(
                    method=HTTPMethod(method_key),
                    path=str(path),
                    operation=operation,
                    parameters=merge_parameters(path_params, operation.get("parameters") or []),
                    context=context,
                )
            )

    logger.debug("Extracted %d operations", len(descriptors))
    return descriptors


def group_by_tag(
    descriptors: list[OperationDescriptor],
) -> tuple[dict[str, list[OperationDescriptor]], list[OperationDescriptor]]:
    """Bucket operations by their first declared tag.

    Returns:
        ``(tagged, ungrouped)`` -- an insertion-ordered mapping of tag name to
        operations, and the operations that declare no tag. Both keep source
        order.
    """
    tagged: dict[str, list[OperationDescriptor]] = {}
    ungrouped: list[OperationDescriptor] = []
    for descriptor in descriptors:
        tags = descriptor.tags
        if tags:
            tagged.setdefault(tags[0], []).append(descriptor)
        else:
            ungrouped.append(descriptor)
    return tagged, ungrouped


def operation_name(descriptor: OperationDescriptor) -> str:
    """Name precedence: ``operationId``, ``summary``, ``description``, ``"METHOD path"``."""
    operation = descriptor.operation
    for key in ("operationId", "summary", "description"):
        value = operation.get(key)
        if value:
            return str(value)
    return f"{descriptor.method.value.upper()} {descriptor.path}"


class OpenApiAdapter(FormatAdapter):
    """Converts an OpenAPI 3.x document into tag folders of requests."""

    format = DocumentFormat.OPENAPI
    display_name = "OpenAPI"

    def title(self, document: dict[str, Any]) -> str:
        title = _mapping(document.get("info")).get("title")
        return str(title) if title is not None else ""

    def convert(self, document: dict[str, Any]) -> list[Item]:
        tagged, ungrouped = group_by_tag(extract_operations(document, self.settings))
        items: list[Item] = [
            build_folder(tag, [self.build_request(d) for d in descriptors])
            for tag, descriptors in tagged.items()
        ]
        items.extend(self.build_request(d) for d in ungrouped)
        return items

    def build_request(self, descriptor: OperationDescriptor) -> RequestItem:
        """Build the request for one operation descriptor."""
        operation = descriptor.operation
        context = descriptor.context
        path = template_path(descriptor.path)

        auth_mapping = map_auth(
            select_scheme(
                operation.get("security"),
                context.security_schemes,
                context.default_security,
            ),
            self.settings,
        )

        return build_request_item(
            name=operation_name(descriptor),
            method=descriptor.method.value,
            url=context.base_url + path,
            auth=auth_mapping.auth,
            headers=self._parameters(descriptor, "header") + auth_mapping.headers,
            params=self._parameters(descriptor, "query"),
            uri_vars=extract_uri_vars(path, self.settings.base_url_placeholder),
            body=self.build_body(operation.get("requestBody")),
            docs=as_text(operation.get("description")),
        )

    def _parameters(self, descriptor: OperationDescriptor, location: str) -> list[RequestField]:
        fields = []
        for param in descriptor.parameters:
            if param.get("in") != location:
                continue
            schema = _mapping(param.get("schema"))
            example = param.get("example", schema.get("example", schema.get("default")))
            fields.append(
                make_field(
                    param.get("name", ""),
                    value=example,
                    description=param.get("description"),
                    enabled=param.get("required"),
                )
            )
        return fields

    def build_body(self, request_body: Any) -> Body:
        """Build a request body from a resolved ``requestBody`` object.

        JSON bodies are pre-filled with a scaffold of their schema; form
        bodies list the schema's properties, all enabled; text and XML
        bodies are left empty.
        """
        content = _mapping(_mapping(request_body).get("content"))
        media_type = select_media_type(content.keys())
        if media_type is None:
            return Body()

        mode = body_mode_for_mime(media_type) or BodyMode.NONE
        schema = _mapping(_mapping(content.get(media_type)).get("schema"))

        if mode == BodyMode.JSON:
            scaffold = scaffold_from_schema(schema)
            return Body.for_mode(
                mode, json.dumps(scaffold, indent=self.settings.json_indent, ensure_ascii=False)
            )
        if mode in FORM_MODES:
            fields = [
                make_field(name, description=_mapping(prop).get("description"), enabled=True)
                for name, prop in _mapping(schema.get("properties")).items()
            ]
            return Body.for_mode(mode, fields)
        return Body.for_mode(mode, "")
