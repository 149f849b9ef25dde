"""Tests for specport.pipeline."""

from __future__ import annotations

import pytest

from specport.builder import build_folder, build_request_item, make_field
from specport.exceptions import PipelineError
from specport.models import Collection
from specport.pipeline import (
    DEFAULT_PIPELINE,
    hydrate_seq,
    iter_items,
    run_pipeline,
    transform_items,
    validate_collection,
)


def _collection() -> Collection:
    return Collection(
        name="API",
        items=[
            build_folder(
                "  pets ",
                [
                    build_request_item(" list ", "get", "u/pets"),
                    build_request_item("   ", "post", "u/pets"),
                ],
            ),
            build_request_item("ping", "get", "u/ping"),
        ],
    )


class TestIterItems:
    def test_depth_first(self) -> None:
        names = [item.name for item in iter_items(_collection().items)]
        assert names == ["  pets ", " list ", "   ", "ping"]


class TestTransformItems:
    def test_trims_and_names_blank(self) -> None:
        result = transform_items(_collection())
        assert [i.name for i in iter_items(result.items)] == ["pets", "list", "Untitled", "ping"]

    def test_input_untouched(self) -> None:
        original = _collection()
        transform_items(original)
        assert original.items[0].name == "  pets "


class TestHydrateSeq:
    def test_numbers_within_each_parent(self) -> None:
        result = hydrate_seq(_collection())
        assert [i.seq for i in result.items] == [1, 2]
        assert [i.seq for i in result.items[0].items] == [1, 2]

    def test_seq_unset_before(self) -> None:
        assert all(i.seq is None for i in iter_items(_collection().items))


class TestValidateCollection:
    def test_valid(self) -> None:
        collection = _collection()
        assert validate_collection(collection) == collection

    def test_duplicate_item_uid(self) -> None:
        a = build_request_item("a", "get", "u")
        b = a.model_copy(update={"name": "b"})
        with pytest.raises(PipelineError, match="Duplicate uid"):
            validate_collection(Collection(items=[a, b]))

    def test_duplicate_field_uid(self) -> None:
        field = make_field("X-Key")
        item = build_request_item("a", "get", "u", headers=[field], params=[field])
        with pytest.raises(PipelineError, match=field.uid):
            validate_collection(Collection(items=[item]))


class TestRunPipeline:
    def test_default_pipeline(self) -> None:
        result = run_pipeline(_collection(), DEFAULT_PIPELINE)
        assert result.items[0].name == "pets"
        assert result.items[0].items[1].name == "Untitled"
        assert result.items[1].seq == 2

    def test_custom_stage_order(self) -> None:
        seen: list[str] = []

        def record(collection: Collection) -> Collection:
            seen.append(collection.items[0].name)
            return collection

        run_pipeline(_collection(), [transform_items, record])
        assert seen == ["pets"]

    def test_empty_pipeline_is_identity(self) -> None:
        collection = _collection()
        assert run_pipeline(collection, ()) is collection
