"""Inspect command -- show the item tree a conversion would produce.

Runs the same import as ``specport convert`` and prints one row per item,
depth-first, with folder nesting shown by indentation. Useful for checking
folder grouping and URLs before writing a collection out.
"""

from __future__ import annotations

from typing import Optional

import typer

from specport.commands.convert import run_import, settings_from_options
from specport.models import FolderItem, Item
from specport.output import get_output


def _rows(items: list[Item], depth: int = 0) -> list[list[str]]:
    rows: list[list[str]] = []
    for item in items:
        indent = "  " * depth
        if isinstance(item, FolderItem):
            rows.append([f"{indent}{item.name}/", "", "", str(len(item.items))])
            rows.extend(_rows(item.items, depth + 1))
        else:
            request = item.request
            rows.append([
                f"{indent}{item.name}",
                request.method,
                request.url,
                request.body.mode.value,
            ])
    return rows


def inspect_command(
    source: str = typer.Argument(
        help="RAML/OpenAPI file path, http(s) URL, or '-' for stdin."
    ),
    media_type: Optional[str] = typer.Option(
        None, "--media-type", help="RAML body media type when the document declares none."
    ),
    exclude_keys: Optional[list[str]] = typer.Option(
        None, "--exclude-key", help="RAML key never treated as a resource (repeatable)."
    ),
) -> None:
    """List the folders and requests produced from SOURCE.

    Folder rows show the number of direct children in the last column;
    request rows show the body mode.

    Example::

        specport inspect api.raml
        specport --json inspect petstore.yaml
    """
    settings = settings_from_options(media_type, exclude_keys)
    collection = run_import(source, settings)

    get_output().print_table(
        ["Name", "Method", "URL", "Body/Items"],
        _rows(collection.items),
        title=f"{collection.name or source} -- Items",
    )
