"""Map OpenAPI security schemes onto request auth.

Selection follows a simple precedence: the operation's own ``security``
requirement (when non-empty) names the scheme; otherwise the first
document-wide default that this module knows how to map is used; otherwise
the request gets no auth.

An operation whose first requirement is empty (``security: [{}]``) opts out
of auth and never falls back to the defaults. The default list, in turn, is
scanned past unsupported schemes: ``[oauth2, bearer]`` yields ``bearer``,
where a strict "first default" reading would give no auth at all.

Supported mappings:

=========  ==========  ===========  =====================================
type       scheme/in   mode         payload
=========  ==========  ===========  =====================================
http       basic       basic        ``{{username}}`` / ``{{password}}``
http       bearer      bearer       ``{{token}}``
apiKey     header      none         header ``<name>: {{apiKey}}``
=========  ==========  ===========  =====================================

Every other combination maps to ``mode: none`` with no header. That is a
soft miss, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from specport.builder import make_field
from specport.models import (
    Auth,
    AuthMode,
    BasicAuth,
    BearerAuth,
    ImportSettings,
    RequestField,
    SecurityScheme,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthMapping:
    """The auth block for a request plus any headers the scheme injects."""

    auth: Auth = field(default_factory=Auth)
    headers: list[RequestField] = field(default_factory=list)


def extract_security_schemes(raw_schemes: Any) -> dict[str, SecurityScheme]:
    """Build :class:`SecurityScheme` models from a resolved ``securitySchemes`` map.

    Entries that are not mappings (for instance unresolved external refs
    without a ``type``) are skipped.
    """
    schemes: dict[str, SecurityScheme] = {}
    if not isinstance(raw_schemes, dict):
        return schemes

    for name, scheme_data in raw_schemes.items():
        if not isinstance(scheme_data, dict) or "type" not in scheme_data:
            continue
        schemes[str(name)] = SecurityScheme(
            name=str(name),
            type=str(scheme_data.get("type", "")),
            description=scheme_data.get("description"),
            in_name=scheme_data.get("name"),
            in_location=scheme_data.get("in"),
            scheme=scheme_data.get("scheme"),
            bearer_format=scheme_data.get("bearerFormat"),
        )
    return schemes


def is_supported(scheme: SecurityScheme) -> bool:
    """Whether :func:`map_auth` produces anything for *scheme*."""
    if scheme.type == "http":
        return (scheme.scheme or "").lower() in ("basic", "bearer")
    if scheme.type == "apiKey":
        return scheme.location == "header" and bool(scheme.param_name)
    return False


def _first_scheme_name(requirements: Any) -> Optional[str]:
    """Return the scheme named by the first requirement of a ``security`` list.

    ``None`` means nothing was declared. An empty string means the first
    requirement names no scheme (``[{}]``, anonymous access).
    """
    if not isinstance(requirements, list) or not requirements:
        return None
    first = requirements[0]
    if isinstance(first, dict) and first:
        return str(next(iter(first)))
    return ""


def select_scheme(
    operation_security: Any,
    schemes: dict[str, SecurityScheme],
    default_security: Any,
) -> Optional[SecurityScheme]:
    """Pick the security scheme whose auth a request should carry.

    Args:
        operation_security: The operation's ``security`` list, or ``None``.
        schemes: Document-wide scheme index, keyed by scheme name.
        default_security: The document's top-level ``security`` list.

    Returns:
        The selected scheme, or ``None`` when the request gets no auth.
        An operation naming an unknown scheme, or whose first requirement
        is empty (``[{}]``), also yields ``None``.
    """
    own = _first_scheme_name(operation_security)
    if own is not None:
        if not own:
            return None
        scheme = schemes.get(own)
        if scheme is None:
            logger.debug("Security scheme '%s' is not declared in components", own)
        return scheme

    for requirement in default_security or []:
        if not isinstance(requirement, dict):
            continue
        for name in requirement:
            scheme = schemes.get(str(name))
            if scheme is not None and is_supported(scheme):
                return scheme
    return None


def map_auth(scheme: Optional[SecurityScheme], settings: Optional[ImportSettings] = None) -> AuthMapping:
    """Translate *scheme* into request auth, per the table in the module docstring."""
    settings = settings or ImportSettings()
    if scheme is None:
        return AuthMapping()

    if scheme.type == "http":
        http_scheme = (scheme.scheme or "").lower()
        if http_scheme == "basic":
            return AuthMapping(
                auth=Auth(
                    mode=AuthMode.BASIC,
                    basic=BasicAuth(
                        username=settings.username_variable,
                        password=settings.password_variable,
                    ),
                )
            )
        if http_scheme == "bearer":
            return AuthMapping(
                auth=Auth(mode=AuthMode.BEARER, bearer=BearerAuth(token=settings.token_variable))
            )

    if scheme.type == "apiKey" and scheme.location == "header" and scheme.param_name:
        header = make_field(
            scheme.param_name,
            value=settings.api_key_variable,
            description=scheme.description,
            enabled=True,
        )
        return AuthMapping(headers=[header])

    logger.debug("No auth mapping for scheme '%s' (type %s)", scheme.name, scheme.type)
    return AuthMapping()
