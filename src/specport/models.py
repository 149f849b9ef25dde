"""Canonical Pydantic models shared across all specport modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Collection models** -- the normalized target representation produced by
every import, whatever the source format:
    :class:`Collection`, :class:`FolderItem`, :class:`RequestItem`,
    :class:`Request`, :class:`RequestField`, :class:`RequestVar`,
    :class:`RequestVars`, :class:`Auth`, :class:`Body` and their enums.

**Source models** -- intermediate shapes used while reading OpenAPI
documents:
    :class:`HTTPMethod`, :class:`DocumentFormat`, :class:`SecurityScheme`,
    :class:`OperationContext`, :class:`OperationDescriptor`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ImportSettings`, :class:`OutputConfig`, :class:`GlobalConfig`.

Collection models serialise with the camelCase keys of the target format
(``formUrlEncoded``, ``multipartForm``); use :meth:`Collection.to_dict` to get
that shape with every key present.
"""

from __future__ import annotations

import enum
import secrets
import string
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

_UID_ALPHABET = string.ascii_letters + string.digits
_UID_LENGTH = 21


def new_uid() -> str:
    """Return a fresh random identifier for a collection entity."""
    return "".join(secrets.choice(_UID_ALPHABET) for _ in range(_UID_LENGTH))


# --- Enums ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised as operations in both RAML and OpenAPI documents."""

    GET = "get"
    POST = "post"
    PUT = "put"
    PATCH = "patch"
    DELETE = "delete"
    HEAD = "head"
    OPTIONS = "options"
    TRACE = "trace"


class DocumentFormat(str, enum.Enum):
    """Source description formats understood by the importer."""

    RAML = "raml"
    OPENAPI = "openapi"


class AuthMode(str, enum.Enum):
    NONE = "none"
    BASIC = "basic"
    BEARER = "bearer"
    DIGEST = "digest"


class BodyMode(str, enum.Enum):
    """Request body modes. Each mode except ``NONE`` owns one payload slot on :class:`Body`."""

    NONE = "none"
    JSON = "json"
    TEXT = "text"
    XML = "xml"
    FORM_URL_ENCODED = "formUrlEncoded"
    MULTIPART_FORM = "multipartForm"


class RefCyclePolicy(str, enum.Enum):
    """What the ref resolver does when it meets a ``$ref`` cycle."""

    TRUNCATE = "truncate"
    ERROR = "error"


# --- Collection models ---


class RequestField(BaseModel):
    """A header, query parameter or form-body entry.

    ``enabled`` is seeded from the source's ``required`` flag. It is a default
    for the user to adjust, not a statement about what the server accepts.
    """

    uid: str = Field(default_factory=new_uid)
    name: str
    value: str = ""
    description: str = ""
    enabled: bool = False


class RequestVar(BaseModel):
    """A request-level variable, used for URI template parameters."""

    uid: str = Field(default_factory=new_uid)
    name: str
    value: str = ""
    local: bool = False
    enabled: bool = True


class RequestVars(BaseModel):
    req: list[RequestVar] = Field(default_factory=list)


class BasicAuth(BaseModel):
    username: str
    password: str


class BearerAuth(BaseModel):
    token: str


class Auth(BaseModel):
    """Request authentication.

    Exactly the payload matching :attr:`mode` is non-null; every other payload
    is ``None``. ``digest`` is never produced by the importers but is kept so
    the shape stays closed.
    """

    mode: AuthMode = AuthMode.NONE
    basic: Optional[BasicAuth] = None
    bearer: Optional[BearerAuth] = None
    digest: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def _check_payload_matches_mode(self) -> "Auth":
        payloads = {
            AuthMode.BASIC: self.basic,
            AuthMode.BEARER: self.bearer,
            AuthMode.DIGEST: self.digest,
        }
        for mode, payload in payloads.items():
            if mode == self.mode and payload is None:
                raise ValueError(f"auth mode '{mode.value}' requires a '{mode.value}' payload")
            if mode != self.mode and payload is not None:
                raise ValueError(
                    f"auth mode '{self.mode.value}' must not carry a '{mode.value}' payload"
                )
        return self


class Body(BaseModel):
    """Request body. Only the slot named by :attr:`mode` carries data."""

    model_config = ConfigDict(populate_by_name=True)

    mode: BodyMode = BodyMode.NONE
    json_: Optional[str] = Field(default=None, alias="json")
    text: Optional[str] = None
    xml: Optional[str] = None
    form_url_encoded: list[RequestField] = Field(
        default_factory=list, alias="formUrlEncoded"
    )
    multipart_form: list[RequestField] = Field(
        default_factory=list, alias="multipartForm"
    )

    @classmethod
    def for_mode(cls, mode: BodyMode, payload: Any = None) -> "Body":
        """Build a body with *payload* placed in the slot owned by *mode*.

        Form modes expect a list of :class:`RequestField`; the scalar modes
        expect a string (``None`` falls back to ``""``). ``BodyMode.NONE``
        ignores *payload*.
        """
        if mode == BodyMode.NONE:
            return cls()
        if mode in (BodyMode.FORM_URL_ENCODED, BodyMode.MULTIPART_FORM):
            return cls.model_validate({"mode": mode, mode.value: list(payload or [])})
        return cls.model_validate({"mode": mode, mode.value: payload if payload is not None else ""})

    @property
    def payload(self) -> Any:
        """The data in the active slot, or ``None`` when :attr:`mode` is ``NONE``."""
        if self.mode == BodyMode.NONE:
            return None
        return getattr(self, _BODY_SLOTS[self.mode])


_BODY_SLOTS = {
    BodyMode.JSON: "json_",
    BodyMode.TEXT: "text",
    BodyMode.XML: "xml",
    BodyMode.FORM_URL_ENCODED: "form_url_encoded",
    BodyMode.MULTIPART_FORM: "multipart_form",
}


class Request(BaseModel):
    url: str
    method: str
    auth: Auth = Field(default_factory=Auth)
    headers: list[RequestField] = Field(default_factory=list)
    params: list[RequestField] = Field(default_factory=list)
    vars: RequestVars = Field(default_factory=RequestVars)
    body: Body = Field(default_factory=Body)
    docs: str = ""


class RequestItem(BaseModel):
    uid: str = Field(default_factory=new_uid)
    name: str
    type: Literal["http-request"] = "http-request"
    seq: Optional[int] = None
    request: Request


class FolderItem(BaseModel):
    """A folder grouping requests and nested folders, to arbitrary depth."""

    uid: str = Field(default_factory=new_uid)
    name: str
    type: Literal["folder"] = "folder"
    seq: Optional[int] = None
    items: list["Item"] = Field(default_factory=list)


Item = Annotated[Union[FolderItem, RequestItem], Field(discriminator="type")]

FolderItem.model_rebuild()


class Collection(BaseModel):
    """Top-level envelope handed to the post-processing pipeline."""

    uid: str = Field(default_factory=new_uid)
    name: str = ""
    version: str = "1"
    items: list[Item] = Field(default_factory=list)
    environments: list[dict[str, Any]] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON-compatible target shape (camelCase keys, enum values)."""
        return self.model_dump(mode="json", by_alias=True)


# --- Source models (OpenAPI branch) ---


class SecurityScheme(BaseModel):
    """An OpenAPI *Security Scheme Object* from ``components.securitySchemes``.

    Only the fields the auth mapper reads are kept; ``type`` discriminates
    between ``apiKey``, ``http``, ``oauth2`` and ``openIdConnect``.
    """

    name: str
    type: str
    description: Optional[str] = None
    # apiKey
    param_name: Optional[str] = Field(default=None, alias="in_name")
    location: Optional[str] = Field(default=None, alias="in_location")
    # http
    scheme: Optional[str] = None
    bearer_format: Optional[str] = None

    model_config = {"populate_by_name": True}


class OperationContext(BaseModel):
    """Document-wide data shared by every operation of one OpenAPI import."""

    base_url: str
    security_schemes: dict[str, SecurityScheme] = Field(default_factory=dict)
    default_security: list[dict[str, Any]] = Field(default_factory=list)


class OperationDescriptor(BaseModel):
    """One path + HTTP method pair, with its ref-resolved raw operation object."""

    method: HTTPMethod
    path: str
    operation: dict[str, Any] = Field(default_factory=dict)
    parameters: list[dict[str, Any]] = Field(
        default_factory=list, description="Path-level and operation-level parameters, merged"
    )
    context: OperationContext

    @property
    def tags(self) -> list[str]:
        tags = self.operation.get("tags") or []
        return [str(t) for t in tags]


# --- Configuration models ---


class ImportSettings(BaseModel):
    """Knobs for the import pipeline, stored under ``importer`` in :class:`GlobalConfig`.

    The defaults reproduce the importer's stock behaviour; every field can be
    overridden from the config file, a ``SPECPORT_*`` environment variable or
    a CLI flag (see :func:`~specport.config.resolve_settings`).
    """

    allowed_extensions: list[str] = Field(
        default_factory=lambda: [".raml", ".yaml", ".yml"],
        description="File suffixes accepted by the loader",
    )
    default_media_type: Optional[str] = Field(
        default=None,
        description="RAML body media type used when the document declares no mediaType",
    )
    base_uri_placeholder: str = Field(
        default="{{baseUri}}", description="RAML base URI when the document has none"
    )
    base_url_placeholder: str = Field(
        default="{{baseUrl}}", description="OpenAPI base URL when no server is declared"
    )
    username_variable: str = "{{username}}"
    password_variable: str = "{{password}}"
    token_variable: str = "{{token}}"
    api_key_variable: str = "{{apiKey}}"
    raml_excluded_keys: list[str] = Field(
        default_factory=list,
        description="RAML keys (case-insensitive) never interpreted as resources or methods",
    )
    max_ref_depth: int = Field(default=64, ge=1, description="Longest $ref chain followed")
    on_ref_cycle: RefCyclePolicy = RefCyclePolicy.TRUNCATE
    json_indent: int = Field(default=2, ge=0)
    request_timeout: float = Field(default=30.0, gt=0, description="URL fetch timeout in seconds")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specport/config.json``.

    Loaded and saved by :func:`~specport.config.load_global_config` and
    :func:`~specport.config.save_global_config`. Fields here have the lowest
    precedence and can be overridden by project config, environment variables,
    or CLI flags.
    """

    importer: ImportSettings = Field(default_factory=ImportSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
