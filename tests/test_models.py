"""Tests for specport.models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from specport.models import (
    Auth,
    AuthMode,
    BasicAuth,
    BearerAuth,
    Body,
    BodyMode,
    Collection,
    FolderItem,
    RequestField,
    new_uid,
)
from specport.builder import build_request_item


class TestUid:
    def test_shape(self) -> None:
        uid = new_uid()
        assert len(uid) == 21
        assert uid.isalnum()

    def test_distinct(self) -> None:
        assert len({new_uid() for _ in range(500)}) == 500


class TestAuth:
    def test_default_is_none(self) -> None:
        auth = Auth()
        assert auth.mode == AuthMode.NONE
        assert (auth.basic, auth.bearer, auth.digest) == (None, None, None)

    def test_mode_requires_payload(self) -> None:
        with pytest.raises(ValidationError, match="requires a 'basic' payload"):
            Auth(mode=AuthMode.BASIC)

    def test_foreign_payload_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not carry"):
            Auth(mode=AuthMode.BASIC, basic=BasicAuth(username="u", password="p"), bearer=BearerAuth(token="t"))


class TestBody:
    @pytest.mark.parametrize(
        ("mode", "payload", "slot"),
        [
            (BodyMode.JSON, "{}", "json_"),
            (BodyMode.TEXT, "hi", "text"),
            (BodyMode.XML, "<a/>", "xml"),
            (BodyMode.FORM_URL_ENCODED, [RequestField(name="a")], "form_url_encoded"),
            (BodyMode.MULTIPART_FORM, [RequestField(name="f")], "multipart_form"),
        ],
    )
    def test_only_active_slot_populated(self, mode: BodyMode, payload, slot: str) -> None:
        body = Body.for_mode(mode, payload)
        defaults = Body()
        populated = [
            name
            for name in ("json_", "text", "xml", "form_url_encoded", "multipart_form")
            if getattr(body, name) != getattr(defaults, name)
        ]
        assert populated == [slot]
        assert body.payload == payload

    def test_none_mode(self) -> None:
        body = Body.for_mode(BodyMode.NONE, "ignored")
        assert body.payload is None
        assert body.json_ is None

    def test_serialises_with_target_keys(self) -> None:
        data = Body.for_mode(BodyMode.JSON, "{}").model_dump(mode="json", by_alias=True)
        assert data == {
            "mode": "json",
            "json": "{}",
            "text": None,
            "xml": None,
            "formUrlEncoded": [],
            "multipartForm": [],
        }


class TestCollection:
    def test_to_dict_round_trip(self) -> None:
        request = build_request_item("ping", "get", "{{baseUrl}}/ping")
        collection = Collection(name="API", items=[FolderItem(name="f", items=[request])])
        data = collection.to_dict()

        assert data["version"] == "1"
        assert data["environments"] == []
        folder = data["items"][0]
        assert folder["type"] == "folder"
        assert folder["seq"] is None
        assert folder["items"][0]["type"] == "http-request"

        assert Collection.model_validate(data) == collection

    def test_item_discriminator(self) -> None:
        collection = Collection.model_validate(
            {"items": [{"name": "f", "type": "folder", "items": [{"name": "g", "type": "folder"}]}]}
        )
        assert isinstance(collection.items[0], FolderItem)
        assert isinstance(collection.items[0].items[0], FolderItem)
