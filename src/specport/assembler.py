"""Collection assembly and the public import entry points.

:func:`import_collection` runs the whole pipeline for one source::

    load -> detect format -> adapter.convert -> assemble -> post-process

and either returns the finished :class:`~specport.models.Collection` or raises
exactly one :class:`~specport.exceptions.CollectionImportError`. The import
fails as a whole: there is no partial collection and no per-item skipping.
The original exception is logged with its traceback and kept on the error as
``cause`` / ``__cause__``.

:func:`import_collection_async` is the same pipeline with an awaited read;
every stage after the read is synchronous.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from specport.adapters import get_adapter
from specport.exceptions import CollectionImportError, DocumentLoadError, ImportStage
from specport.models import Collection, ImportSettings, Item
from specport.parser.loader import SourceDocument, detect_format, load_document, load_document_async
from specport.pipeline import DEFAULT_PIPELINE, PostProcessor, run_pipeline

logger = logging.getLogger(__name__)


def assemble_collection(name: str, items: list[Item]) -> Collection:
    """Wrap *items* in a collection envelope with a fresh uid and version ``"1"``."""
    return Collection(name=name or "", version="1", items=list(items), environments=[])


def _failure(exc: BaseException, stage: ImportStage) -> CollectionImportError:
    logger.error("Import collection failed during %s stage", stage.value, exc_info=exc)
    return CollectionImportError(f"Import collection failed: {exc}", stage=stage, cause=exc)


def convert_document(
    document: SourceDocument,
    settings: Optional[ImportSettings] = None,
    pipeline: Optional[Sequence[PostProcessor]] = None,
) -> Collection:
    """Convert an already loaded document and run the post-processing pipeline.

    Args:
        document: The loaded source document.
        settings: Import settings. Defaults are used when omitted.
        pipeline: Post-processors to apply; :data:`~specport.pipeline.DEFAULT_PIPELINE`
            when ``None``. Pass ``()`` to get the raw assembled collection.

    Raises:
        CollectionImportError: On any failure, with ``stage`` set to
            ``parse`` (unrecognised format), ``convert`` (adapter) or
            ``postprocess`` (pipeline).
    """
    settings = settings or ImportSettings()

    try:
        fmt = detect_format(document)
    except Exception as exc:
        raise _failure(exc, ImportStage.PARSE) from exc

    adapter = get_adapter(fmt, settings)
    logger.debug("Converting %s as %s", document.source, adapter.display_name)
    try:
        collection = assemble_collection(
            adapter.title(document.data), adapter.convert(document.data)
        )
    except Exception as exc:
        logger.error("Error converting %s", document.source, exc_info=exc)
        raise CollectionImportError(
            f"An error occurred while parsing the {adapter.display_name} collection",
            stage=ImportStage.CONVERT,
            cause=exc,
        ) from exc

    try:
        return run_pipeline(collection, DEFAULT_PIPELINE if pipeline is None else pipeline)
    except Exception as exc:
        raise _failure(exc, ImportStage.POSTPROCESS) from exc


def _load_stage(exc: Exception) -> ImportStage:
    return exc.stage if isinstance(exc, DocumentLoadError) else ImportStage.READ


def import_collection(
    source: str,
    settings: Optional[ImportSettings] = None,
    pipeline: Optional[Sequence[PostProcessor]] = None,
) -> Collection:
    """Import a RAML or OpenAPI document into a collection.

    Args:
        source: File path, ``-`` for stdin, or an http(s) URL.
        settings: Import settings. Defaults are used when omitted.
        pipeline: Post-processors; see :func:`convert_document`.

    Returns:
        The finished collection.

    Raises:
        CollectionImportError: The single failure type, whatever went wrong.

    Example::

        collection = import_collection("petstore.yaml")
        print(json.dumps(collection.to_dict(), indent=2))
    """
    try:
        document = load_document(source, settings)
    except Exception as exc:
        raise _failure(exc, _load_stage(exc)) from exc
    return convert_document(document, settings, pipeline)


async def import_collection_async(
    source: str,
    settings: Optional[ImportSettings] = None,
    pipeline: Optional[Sequence[PostProcessor]] = None,
) -> Collection:
    """Awaitable :func:`import_collection`; only the read suspends."""
    try:
        document = await load_document_async(source, settings)
    except Exception as exc:
        raise _failure(exc, _load_stage(exc)) from exc
    return convert_document(document, settings, pipeline)
