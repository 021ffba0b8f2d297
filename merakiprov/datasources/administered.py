"""Data source for the identity behind the API key."""

from __future__ import annotations

from merakiprov.datasources.base import ObjectDataSource
from merakiprov.framework.schema import BoolAttribute, Schema, SingleNestedAttribute, StringAttribute
from merakiprov.registry import register_data_source


def _enabled(description: str) -> BoolAttribute:
    return BoolAttribute(computed=True, api_name="enabled", description=description)


IDENTITIES_ME_SCHEMA = Schema(
    description="Returns the identity of the current user",
    attributes={
        "id": StringAttribute(computed=True, description="Example identifier"),
        "name": StringAttribute(computed=True, api_name="name", description="Username"),
        "email": StringAttribute(computed=True, api_name="email", description="User email"),
        "last_used_dashboard_at": StringAttribute(
            computed=True, api_name="lastUsedDashboardAt", description="Last seen active on Dashboard UI"
        ),
        "authentication": SingleNestedAttribute(
            computed=True,
            api_name="authentication",
            description="Authentication info",
            attributes={
                "mode": StringAttribute(computed=True, api_name="mode", description="Authentication mode"),
                "saml": SingleNestedAttribute(
                    computed=True,
                    api_name="saml",
                    description="SAML authentication info",
                    attributes={"enabled": _enabled("If SAML authentication is enabled for this user")},
                ),
                "two_factor": SingleNestedAttribute(
                    computed=True,
                    api_name="twoFactor",
                    description="TwoFactor authentication info",
                    attributes={"enabled": _enabled("If twoFactor authentication is enabled for this user")},
                ),
                "api": SingleNestedAttribute(
                    computed=True,
                    api_name="api",
                    description="API authentication",
                    attributes={
                        "key": SingleNestedAttribute(
                            computed=True,
                            api_name="key",
                            description="API key",
                            attributes={
                                "created": BoolAttribute(
                                    computed=True, api_name="created", description="If API key is created for this user"
                                )
                            },
                        ),
                    },
                ),
            },
        ),
    },
)


@register_data_source("meraki_administered_identities_me")
class AdministeredIdentitiesMeDataSource(ObjectDataSource):
    group = "administered"
    operation = "get_administered_identities_me"

    @classmethod
    def schema(cls) -> Schema:
        return IDENTITIES_ME_SCHEMA
