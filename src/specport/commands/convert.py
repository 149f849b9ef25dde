"""Convert command -- turn a RAML or OpenAPI description into collection JSON.

``specport convert SOURCE`` runs the full import pipeline and writes the
collection (camelCase keys, every key present) to stdout, or atomically to
the file given with ``--output``. Import settings are resolved through
:func:`~specport.config.resolve_settings`; the options below are the
highest-precedence layer.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from specport.exceptions import SpecportError
from specport.models import Collection, ImportSettings
from specport.output import debug, error, get_output, success, warning


# --- Shared option handling (also used by ``inspect``) ---


def settings_from_options(
    media_type: Optional[str] = None,
    exclude_keys: Optional[list[str]] = None,
    on_ref_cycle: Optional[str] = None,
    max_ref_depth: Optional[int] = None,
) -> ImportSettings:
    """Resolve import settings, layering the given CLI options on top.

    Raises:
        typer.Exit: With the :class:`~specport.exceptions.ConfigError` exit
            code when the settings cannot be resolved.
    """
    from specport.config import resolve_settings

    overrides: dict[str, Any] = {
        "default_media_type": media_type,
        "raml_excluded_keys": exclude_keys or None,
        "on_ref_cycle": on_ref_cycle,
        "max_ref_depth": max_ref_depth,
    }
    try:
        return resolve_settings(overrides)
    except SpecportError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def run_import(source: str, settings: ImportSettings) -> Collection:
    """Import *source*, turning any failure into an error line and exit code."""
    from specport.assembler import import_collection

    debug(f"Importing {source}")
    try:
        return import_collection(source, settings)
    except SpecportError as exc:
        error(str(exc))
        if exc.__cause__ is not None:
            debug(f"Caused by: {exc.__cause__!r}")
        raise typer.Exit(code=exc.exit_code) from None


def convert_command(
    source: str = typer.Argument(
        help="RAML/OpenAPI file path, http(s) URL, or '-' for stdin."
    ),
    output_path: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the collection JSON to this file."
    ),
    media_type: Optional[str] = typer.Option(
        None, "--media-type", help="RAML body media type when the document declares none."
    ),
    exclude_keys: Optional[list[str]] = typer.Option(
        None, "--exclude-key", help="RAML key never treated as a resource (repeatable)."
    ),
    on_ref_cycle: Optional[str] = typer.Option(
        None, "--on-ref-cycle", help="What to do on a $ref cycle: truncate or error."
    ),
    max_ref_depth: Optional[int] = typer.Option(
        None, "--max-ref-depth", help="Longest $ref chain followed."
    ),
) -> None:
    """Convert an API description into a collection.

    Args:
        source: Input document location.
        output_path: Destination file; stdout when omitted.
        media_type: Overrides ``importer.default_media_type``.
        exclude_keys: Overrides ``importer.raml_excluded_keys``.
        on_ref_cycle: Overrides ``importer.on_ref_cycle``.
        max_ref_depth: Overrides ``importer.max_ref_depth``.

    Raises:
        typer.Exit: With the failing error's exit code.

    Example::

        specport convert api.raml
        specport convert petstore.yaml -o petstore.json
        curl -s https://example.com/openapi.yaml | specport convert -
    """
    settings = settings_from_options(media_type, exclude_keys, on_ref_cycle, max_ref_depth)
    collection = run_import(source, settings)
    if not collection.items:
        warning(f"No requests found in {source}")
    data = collection.to_dict()

    if output_path is not None:
        from specport.config import write_output_file

        write_output_file(
            output_path, json.dumps(data, indent=settings.json_indent, ensure_ascii=False)
        )
        success(f"Wrote collection '{collection.name}' to {output_path}")
    else:
        get_output().print_json(data, indent=settings.json_indent)
