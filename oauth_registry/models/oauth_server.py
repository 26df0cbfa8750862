"""OAuth server definition as it appears in the gateway's JSON files.

The repository only looks at ``name`` and ``endpoints.token.upstream_url``.
Everything else is configuration the gateway passes through untouched, so
unknown keys are kept rather than rejected.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class _Definition(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)


class ProxyDefinition(_Definition):
    listen_path: str = ""
    upstream_url: str = ""
    strip_path: bool = False
    append_path: bool = False
    preserve_host: bool = False
    methods: tuple[str, ...] = ()


class Endpoints(_Definition):
    authorize: ProxyDefinition | None = None
    token: ProxyDefinition | None = None
    introspect: ProxyDefinition | None = None
    revoke: ProxyDefinition | None = None


class ClientEndpoints(_Definition):
    create: ProxyDefinition | None = None
    remove: ProxyDefinition | None = None


class TokenStrategy(_Definition):
    name: str = ""
    settings: Any = None


class OAuthServer(_Definition):
    name: str
    # The gateway writes these as oauth_endpoints / oauth_client_endpoints.
    endpoints: Endpoints = Field(
        default_factory=Endpoints,
        validation_alias=AliasChoices("oauth_endpoints", "endpoints"),
    )
    client_endpoints: ClientEndpoints = Field(
        default_factory=ClientEndpoints,
        validation_alias=AliasChoices("oauth_client_endpoints", "client_endpoints"),
    )
    allowed_access_types: tuple[str, ...] = ()
    allowed_authorize_types: tuple[str, ...] = ()
    auth_login_endpoint: str = ""
    token_strategy: TokenStrategy = Field(default_factory=TokenStrategy)
    access_rules: list[dict[str, Any]] = Field(default_factory=list)
    cors_meta: dict[str, Any] = Field(default_factory=dict)
    rate_limit: dict[str, Any] = Field(default_factory=dict)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must be non-empty")
        return value

    @property
    def token_upstream_url(self) -> str | None:
        """Upstream URL of the token endpoint, or None if it has none."""
        if self.endpoints.token is None:
            return None
        return self.endpoints.token.upstream_url
