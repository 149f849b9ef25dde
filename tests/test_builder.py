"""Tests for specport.builder."""

from __future__ import annotations

import datetime

import pytest

from specport.builder import (
    BODY_MODE_BY_MIME,
    as_text,
    body_mode_for_mime,
    build_api_name,
    build_folder,
    build_request_item,
    ensure_url,
    extract_uri_vars,
    make_field,
    mime_for_body_mode,
    select_media_type,
    template_path,
)
from specport.models import Body, BodyMode, FolderItem, RequestField


# ---------------------------------------------------------------------------
# Media type table
# ---------------------------------------------------------------------------


class TestMediaTypes:
    @pytest.mark.parametrize("mode", [m for m in BodyMode if m != BodyMode.NONE])
    def test_mode_round_trips_through_table(self, mode: BodyMode) -> None:
        mime = mime_for_body_mode(mode)
        assert mime is not None
        assert body_mode_for_mime(mime) == mode

    def test_body_payload_round_trip(self) -> None:
        body = Body.for_mode(BodyMode.XML, "<a/>")
        assert body_mode_for_mime(mime_for_body_mode(body.mode)) == body.mode

    def test_both_xml_types(self) -> None:
        assert BODY_MODE_BY_MIME["application/xml"] == BodyMode.XML
        assert BODY_MODE_BY_MIME["text/xml"] == BodyMode.XML

    def test_parameters_and_case_ignored(self) -> None:
        assert body_mode_for_mime("Application/JSON; charset=utf-8") == BodyMode.JSON
        declared = ["text/plain", "Application/JSON; charset=utf-8"]
        assert select_media_type(declared) == "Application/JSON; charset=utf-8"

    def test_unknown_mime(self) -> None:
        assert body_mode_for_mime("application/octet-stream") is None

    def test_table_order_wins_over_declared_order(self) -> None:
        declared = ["text/plain", "application/json", "multipart/form-data"]
        assert select_media_type(declared) == "multipart/form-data"

    def test_default_used_when_nothing_matches(self) -> None:
        assert select_media_type(["image/png"], "application/json") == "application/json"

    def test_unknown_default_ignored(self) -> None:
        assert select_media_type([], "image/png") is None


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------


class TestUrlHelpers:
    def test_collapses_duplicate_slashes(self) -> None:
        assert ensure_url("https://api.example.com//pets///{{id}}") == (
            "https://api.example.com/pets/{{id}}"
        )

    def test_placeholder_base(self) -> None:
        assert ensure_url("{{baseUri}}//pets") == "{{baseUri}}/pets"

    def test_template_path(self) -> None:
        assert template_path("/pets/{id}/photos/{photoId}") == "/pets/{{id}}/photos/{{photoId}}"

    def test_template_path_leaves_doubled_alone(self) -> None:
        assert template_path("/pets/{{id}}") == "/pets/{{id}}"

    def test_extract_uri_vars(self) -> None:
        uri_vars = extract_uri_vars("{{baseUri}}/pets/{{id}}/photos/{{photoId}}")
        assert [v.name for v in uri_vars] == ["{{id}}", "{{photoId}}"]
        assert all(v.enabled and not v.local and v.value == "" for v in uri_vars)

    def test_build_api_name(self) -> None:
        assert build_api_name("get", "/pets/{{id}}") == "GET pets id"


# ---------------------------------------------------------------------------
# Item builders
# ---------------------------------------------------------------------------


class TestItemBuilders:
    def test_as_text(self) -> None:
        assert as_text(None) == ""
        assert as_text("abc") == "abc"
        assert as_text(20) == "20"
        assert as_text(False) == "false"
        assert as_text({"a": 1}) == '{\n  "a": 1\n}'

    def test_as_text_dates_unquoted(self) -> None:
        assert as_text(datetime.date(2020, 1, 1)) == "2020-01-01"
        assert as_text(1.5) == "1.5"
        assert as_text(True) == "true"

    def test_make_field_coerces(self) -> None:
        field = make_field("limit", value=10, description=None, enabled=None)
        assert field == RequestField(
            uid=field.uid, name="limit", value="10", description="", enabled=False
        )

    def test_request_item_has_every_part(self) -> None:
        item = build_request_item("List", "get", "https://a.example//pets")
        request = item.model_dump(by_alias=True)["request"]
        assert set(request) == {"url", "method", "auth", "headers", "params", "vars", "body", "docs"}
        assert request["method"] == "GET"
        assert request["url"] == "https://a.example/pets"
        assert request["auth"]["mode"] == "none"
        assert request["body"]["mode"] == "none"
        assert item.type == "http-request"

    def test_build_folder(self) -> None:
        child = build_request_item("x", "get", "u")
        folder = build_folder("pets", [child])
        assert isinstance(folder, FolderItem)
        assert folder.items == [child]
        assert folder.uid != child.uid
