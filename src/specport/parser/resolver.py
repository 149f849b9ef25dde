"""Resolve local ``$ref`` pointers against an OpenAPI ``components`` index.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. This module
walks a (sub)document depth-first and replaces every local components
reference with a copy of the object it points to, then keeps walking into the
substituted content.

Resolution is deliberately forgiving:

* A pointer whose path does not exist in the index is a *soft miss*: the
  ``$ref`` dict is returned unchanged and a debug message is logged.
* References that do not start with ``#/components/`` (external files, URLs,
  pointers into other parts of the document) are passed through unresolved.

Cycles are guarded by a ``seen`` set of refs on the current resolution stack
and by a maximum ref-chain depth. Under :attr:`RefCyclePolicy.TRUNCATE` the
``$ref`` dict is kept at the cycle point; under :attr:`RefCyclePolicy.ERROR`
a :class:`~specport.exceptions.RefCycleError` is raised.

The single public function is :func:`resolve_refs`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any

from specport.exceptions import RefCycleError
from specport.models import RefCyclePolicy

logger = logging.getLogger(__name__)

COMPONENTS_PREFIX = "#/components/"

_MISSING = object()


def resolve_refs(
    node: Any,
    components: dict[str, Any] | None,
    *,
    max_depth: int = 64,
    on_cycle: RefCyclePolicy = RefCyclePolicy.TRUNCATE,
) -> Any:
    """Resolve all local components ``$ref`` pointers within *node*.

    Args:
        node: The (sub)document to resolve -- usually a path item or a
            security scheme map.
        components: The document's ``components`` mapping. ``None`` or an
            empty mapping makes every ref a soft miss.
        max_depth: Longest chain of nested ref substitutions followed before
            the chain is treated like a cycle.
        on_cycle: Whether a cycle truncates (keeps the ``$ref``) or raises.

    Returns:
        A new tree with resolvable refs substituted. *node* and *components*
        are never mutated.

    Raises:
        RefCycleError: Only when *on_cycle* is :attr:`RefCyclePolicy.ERROR`
            and a cycle or over-deep chain is found.

    Example::

        components = {"schemas": {"Pet": {"type": "object"}}}
        resolve_refs({"$ref": "#/components/schemas/Pet"}, components)
        # -> {"type": "object"}
    """
    return _deep_resolve(node, components or {}, frozenset(), max_depth, on_cycle)


def _lookup(ref: str, components: dict[str, Any]) -> Any:
    """Walk *components* along the path of a ``#/components/...`` pointer.

    Returns ``_MISSING`` when any segment is absent. JSON Pointer escapes
    (``~1`` for ``/``, ``~0`` for ``~``) are honoured.
    """
    current: Any = components
    for segment in ref[len(COMPONENTS_PREFIX):].split("/"):
        segment = segment.replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return _MISSING
    return current


def _deep_resolve(
    obj: Any,
    components: dict[str, Any],
    seen: frozenset[str],
    max_depth: int,
    on_cycle: RefCyclePolicy,
) -> Any:
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str) and ref.startswith(COMPONENTS_PREFIX):
            if ref in seen or len(seen) >= max_depth:
                reason = "cycle" if ref in seen else f"chain deeper than {max_depth}"
                if on_cycle == RefCyclePolicy.ERROR:
                    raise RefCycleError(f"Cannot resolve $ref '{ref}': {reason}", ref=ref)
                logger.debug("Leaving $ref '%s' unresolved: %s", ref, reason)
                return dict(obj)

            target = _lookup(ref, components)
            if target is _MISSING:
                logger.debug("Unresolved $ref '%s': not found in components", ref)
                return dict(obj)
            return _deep_resolve(copy.deepcopy(target), components, seen | {ref}, max_depth, on_cycle)

        return {
            key: _deep_resolve(value, components, seen, max_depth, on_cycle)
            for key, value in obj.items()
        }

    if isinstance(obj, list):
        return [_deep_resolve(item, components, seen, max_depth, on_cycle) for item in obj]

    return obj
