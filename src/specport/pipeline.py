"""Post-processing stages applied to an assembled collection.

The importer hands its collection to a sequence of post-processors, each a
callable taking a :class:`~specport.models.Collection` and returning one (or
raising). Callers can supply their own sequence to
:func:`~specport.assembler.import_collection`; :data:`DEFAULT_PIPELINE` is
used otherwise.

Every stage here returns a new collection and leaves its input untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence

from specport.exceptions import PipelineError
from specport.models import Collection, FolderItem, Item

PostProcessor = Callable[[Collection], Collection]

UNTITLED = "Untitled"


def iter_items(items: list[Item]) -> Iterator[Item]:
    """Yield every item of a tree, depth-first, parents before children."""
    for item in items:
        yield item
        if isinstance(item, FolderItem):
            yield from iter_items(item.items)


def _renamed(items: list[Item]) -> list[Item]:
    renamed: list[Item] = []
    for item in items:
        update: dict = {"name": item.name.strip() or UNTITLED}
        if isinstance(item, FolderItem):
            update["items"] = _renamed(item.items)
        renamed.append(item.model_copy(update=update))
    return renamed


def transform_items(collection: Collection) -> Collection:
    """Trim item names; items left without a name are called ``Untitled``."""
    return collection.model_copy(update={"items": _renamed(collection.items)})


def _sequenced(items: list[Item]) -> list[Item]:
    sequenced: list[Item] = []
    for seq, item in enumerate(items, start=1):
        update: dict = {"seq": seq}
        if isinstance(item, FolderItem):
            update["items"] = _sequenced(item.items)
        sequenced.append(item.model_copy(update=update))
    return sequenced


def hydrate_seq(collection: Collection) -> Collection:
    """Number the items of every folder (and the root) 1, 2, 3... in order."""
    return collection.model_copy(update={"items": _sequenced(collection.items)})


def validate_collection(collection: Collection) -> Collection:
    """Re-validate the whole tree and check that uids are pairwise distinct.

    Raises:
        PipelineError: If the collection does not validate or reuses a uid.
    """
    try:
        validated = Collection.model_validate(collection.to_dict())
    except ValueError as exc:
        raise PipelineError(f"Collection failed validation: {exc}") from exc

    seen = {validated.uid}
    for item in iter_items(validated.items):
        uids = [item.uid]
        if not isinstance(item, FolderItem):
            request = item.request
            uids.extend(f.uid for f in request.headers)
            uids.extend(f.uid for f in request.params)
            uids.extend(v.uid for v in request.vars.req)
            uids.extend(f.uid for f in request.body.form_url_encoded)
            uids.extend(f.uid for f in request.body.multipart_form)
        for uid in uids:
            if uid in seen:
                raise PipelineError(f"Duplicate uid '{uid}' in item '{item.name}'")
            seen.add(uid)
    return validated


DEFAULT_PIPELINE: tuple[PostProcessor, ...] = (transform_items, hydrate_seq, validate_collection)


def run_pipeline(collection: Collection, pipeline: Sequence[PostProcessor]) -> Collection:
    """Thread *collection* through every stage of *pipeline*, in order."""
    for stage in pipeline:
        collection = stage(collection)
    return collection
