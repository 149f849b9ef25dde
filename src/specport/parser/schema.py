"""Build empty scaffold instances from JSON-Schema-shaped request bodies.

The scaffold is what a user sees pre-filled in a JSON request body after an
import: the right keys, empty values. Only ``type`` and ``properties`` are
read. ``required``, enums, formats and the ``oneOf``/``anyOf``/``allOf``
combinators are not interpreted.
"""

from __future__ import annotations

from typing import Any


def scaffold_from_schema(schema: Any) -> Any:
    """Return an empty instance shaped like *schema*.

    * ``type: object`` -- a dict with one entry per declared property,
      each scaffolded recursively.
    * ``type: array`` -- an empty list.
    * anything else (including a missing type) -- an empty string.

    Example::

        scaffold_from_schema({
            "type": "object",
            "properties": {"id": {"type": "string"}, "tags": {"type": "array"}},
        })
        # -> {"id": "", "tags": []}
    """
    if not isinstance(schema, dict):
        return ""

    schema_type = schema.get("type")
    if schema_type == "object":
        properties = schema.get("properties") or {}
        if not isinstance(properties, dict):
            return {}
        return {name: scaffold_from_schema(prop) for name, prop in properties.items()}
    if schema_type == "array":
        return []
    # TODO: scaffold oneOf/anyOf/allOf schemas (first branch / merged properties).
    return ""
