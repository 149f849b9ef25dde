"""Tests for specport.adapters.auth."""

from __future__ import annotations

from specport.adapters.auth import extract_security_schemes, is_supported, map_auth, select_scheme
from specport.models import AuthMode, ImportSettings, SecurityScheme

SCHEMES = extract_security_schemes(
    {
        "basic": {"type": "http", "scheme": "basic"},
        "bearer": {"type": "http", "scheme": "Bearer", "bearerFormat": "JWT"},
        "key": {"type": "apiKey", "in": "header", "name": "X-Key", "description": "Key"},
        "cookie": {"type": "apiKey", "in": "cookie", "name": "sid"},
        "oauth": {"type": "oauth2", "flows": {}},
        "broken": {"$ref": "external.yaml#/Scheme"},
    }
)


class TestExtractSecuritySchemes:
    def test_fields(self) -> None:
        key = SCHEMES["key"]
        assert (key.type, key.location, key.param_name) == ("apiKey", "header", "X-Key")
        assert SCHEMES["bearer"].bearer_format == "JWT"

    def test_entries_without_type_skipped(self) -> None:
        assert "broken" not in SCHEMES

    def test_non_mapping(self) -> None:
        assert extract_security_schemes(None) == {}


class TestIsSupported:
    def test_supported(self) -> None:
        assert all(is_supported(SCHEMES[n]) for n in ("basic", "bearer", "key"))

    def test_unsupported(self) -> None:
        assert not is_supported(SCHEMES["cookie"])
        assert not is_supported(SCHEMES["oauth"])


class TestSelectScheme:
    def test_operation_scheme_wins(self) -> None:
        scheme = select_scheme([{"basic": []}], SCHEMES, [{"bearer": []}])
        assert scheme is SCHEMES["basic"]

    def test_operation_unknown_scheme_gives_none(self) -> None:
        assert select_scheme([{"ghost": []}], SCHEMES, [{"bearer": []}]) is None

    def test_empty_operation_security_uses_default(self) -> None:
        assert select_scheme([], SCHEMES, [{"bearer": []}]) is SCHEMES["bearer"]
        assert select_scheme(None, SCHEMES, [{"bearer": []}]) is SCHEMES["bearer"]

    def test_anonymous_requirement_blocks_default(self) -> None:
        assert select_scheme([{}], SCHEMES, [{"bearer": []}]) is None

    def test_only_first_requirement_counts(self) -> None:
        assert select_scheme([{}, {"basic": []}], SCHEMES, [{"bearer": []}]) is None

    def test_default_skips_unsupported(self) -> None:
        assert select_scheme(None, SCHEMES, [{"oauth": []}, {"key": []}]) is SCHEMES["key"]

    def test_nothing_declared(self) -> None:
        assert select_scheme(None, SCHEMES, []) is None


class TestMapAuth:
    def test_basic(self) -> None:
        mapping = map_auth(SCHEMES["basic"])
        assert mapping.auth.mode == AuthMode.BASIC
        assert mapping.auth.basic.username == "{{username}}"
        assert mapping.headers == []

    def test_bearer_scheme_case_insensitive(self) -> None:
        mapping = map_auth(SCHEMES["bearer"])
        assert mapping.auth.mode == AuthMode.BEARER
        assert mapping.auth.bearer.token == "{{token}}"

    def test_api_key_header(self) -> None:
        mapping = map_auth(SCHEMES["key"])
        assert mapping.auth.mode == AuthMode.NONE
        header = mapping.headers[0]
        assert (header.name, header.value, header.description, header.enabled) == (
            "X-Key",
            "{{apiKey}}",
            "Key",
            True,
        )

    def test_custom_placeholders(self) -> None:
        settings = ImportSettings(token_variable="{{accessToken}}")
        assert map_auth(SCHEMES["bearer"], settings).auth.bearer.token == "{{accessToken}}"

    def test_soft_miss(self) -> None:
        for scheme in (SCHEMES["cookie"], SCHEMES["oauth"], None):
            mapping = map_auth(scheme)
            assert mapping.auth.mode == AuthMode.NONE
            assert mapping.headers == []

    def test_unknown_http_scheme(self) -> None:
        scheme = SecurityScheme(name="d", type="http", scheme="digest")
        assert map_auth(scheme).auth.mode == AuthMode.NONE
