"""Shared assembly of normalized request and folder items.

Both format adapters describe requests in their own vocabulary; this module
is where those descriptions become :class:`~specport.models.RequestItem` and
:class:`~specport.models.FolderItem` values. It owns the pieces the adapters
must agree on:

* the media-type -> body-mode table (:data:`BODY_MODE_BY_MIME`) and the
  "first declared in table order wins" selection rule,
* URL clean-up (duplicate slash collapsing) and ``{param}`` templating,
* URI variable extraction from a templated path,
* field construction with source values coerced to text.

Every builder returns a new value; nothing here mutates its arguments.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from typing import Any, Optional

from specport.models import (
    Auth,
    Body,
    BodyMode,
    FolderItem,
    Item,
    Request,
    RequestField,
    RequestItem,
    RequestVar,
    RequestVars,
)

# Declaration order matters: when a body declares several media types the
# first one listed here is used.
BODY_MODE_BY_MIME: dict[str, BodyMode] = {
    "multipart/form-data": BodyMode.MULTIPART_FORM,
    "application/x-www-form-urlencoded": BodyMode.FORM_URL_ENCODED,
    "application/json": BodyMode.JSON,
    "application/xml": BodyMode.XML,
    "text/xml": BodyMode.XML,
    "text/plain": BodyMode.TEXT,
}

FORM_MODES = frozenset({BodyMode.MULTIPART_FORM, BodyMode.FORM_URL_ENCODED})

_DUPLICATE_SLASHES = re.compile(r"([^:]/)/+")
_SINGLE_BRACED = re.compile(r"(?<!\{)\{([^{}]+)\}(?!\})")


def _normalise_mime(mime: str) -> str:
    return mime.split(";")[0].strip().lower()


def body_mode_for_mime(mime: str) -> Optional[BodyMode]:
    """Return the body mode for *mime*, or ``None`` if it is not in the table."""
    return BODY_MODE_BY_MIME.get(_normalise_mime(mime))


def mime_for_body_mode(mode: BodyMode) -> Optional[str]:
    """Return the first media type in table order that maps to *mode*."""
    for mime, candidate in BODY_MODE_BY_MIME.items():
        if candidate == mode:
            return mime
    return None


def select_media_type(declared: Iterable[str], default: Optional[str] = None) -> Optional[str]:
    """Pick the media type whose body mode will be used.

    The first entry of :data:`BODY_MODE_BY_MIME` that appears in *declared*
    wins, regardless of the order of *declared*. Declared keys are compared
    without parameters or case, and the matching key is returned as written
    so it can still index the source mapping. When none matches, *default*
    is used if it is itself a known media type.

    Example::

        select_media_type(["application/json", "multipart/form-data"])
        # -> "multipart/form-data"
    """
    declared_by_mime: dict[str, str] = {}
    for raw in declared:
        declared_by_mime.setdefault(_normalise_mime(str(raw)), str(raw))
    for mime in BODY_MODE_BY_MIME:
        if mime in declared_by_mime:
            return declared_by_mime[mime]
    if default is not None and body_mode_for_mime(default) is not None:
        return default
    return None


def ensure_url(url: str) -> str:
    """Collapse runs of slashes, leaving the ``://`` of a scheme intact."""
    return _DUPLICATE_SLASHES.sub(r"\1", url)


def template_path(path: str) -> str:
    """Turn ``{param}`` segments into ``{{param}}`` variable references.

    Already doubled ``{{param}}`` references are left alone.
    """
    return _SINGLE_BRACED.sub(r"{{\1}}", path)


def extract_uri_vars(path: str, base_uri_token: str = "{{baseUri}}") -> list[RequestVar]:
    """Return one request variable per templated segment of *path*.

    Each ``/``-delimited segment that starts with ``{`` becomes a variable
    named after the segment itself; the synthetic base URI token is skipped.
    """
    return [
        RequestVar(name=segment, value="", local=False, enabled=True)
        for segment in path.split("/")
        if segment.startswith("{") and segment != base_uri_token
    ]


def build_api_name(method: str, path: str) -> str:
    """Synthesize a request name such as ``GET pets id`` from a method and path."""
    words = re.sub(r"[/{}]", " ", path).split()
    return " ".join([method.upper(), *words])


def as_text(value: Any, indent: int = 2) -> str:
    """Coerce a source scalar, mapping or list to the text stored in a field.

    Mappings and lists become indented JSON and booleans their JSON spelling;
    numbers, dates and other scalars use ``str``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=indent, ensure_ascii=False, default=str)
    if isinstance(value, bool):
        return json.dumps(value)
    return str(value)



def make_field(
    name: str,
    value: Any = "",
    description: Any = "",
    enabled: Any = False,
) -> RequestField:
    """Build a header/param/form field, coercing source values."""
    return RequestField(
        name=str(name),
        value=as_text(value),
        description=as_text(description),
        enabled=bool(enabled),
    )


def build_request_item(
    name: str,
    method: str,
    url: str,
    *,
    auth: Optional[Auth] = None,
    headers: Optional[list[RequestField]] = None,
    params: Optional[list[RequestField]] = None,
    uri_vars: Optional[list[RequestVar]] = None,
    body: Optional[Body] = None,
    docs: str = "",
) -> RequestItem:
    """Assemble a complete request item; omitted parts get neutral defaults."""
    return RequestItem(
        name=name,
        request=Request(
            url=ensure_url(url),
            method=method.upper(),
            auth=auth or Auth(),
            headers=list(headers or []),
            params=list(params or []),
            vars=RequestVars(req=list(uri_vars or [])),
            body=body or Body(),
            docs=docs or "",
        ),
    )


def build_folder(name: str, items: Iterable[Item]) -> FolderItem:
    return FolderItem(name=name, items=list(items))
