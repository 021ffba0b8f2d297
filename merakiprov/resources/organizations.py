"""Organization-level resources: organizations, admins, SAML roles, SNMP, claims."""

from __future__ import annotations

from typing import Any

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.mapping import extract_path
from merakiprov.framework.planmodifiers import requires_replace, use_state_for_unknown
from merakiprov.framework.resource import Model
from merakiprov.framework.schema import (
    BoolAttribute,
    Int64Attribute,
    ListNestedAttribute,
    Schema,
    SetAttribute,
    SetNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import one_of
from merakiprov.framework.values import is_known
from merakiprov.registry import register_resource
from merakiprov.resources.base import (
    CollectionResource,
    MerakiResource,
    SettingsResource,
    id_attribute,
    organization_id_attribute,
)

ORG_ACCESS = ("full", "read-only", "enterprise", "none")
TAG_ACCESS = ("full", "read-only", "guest-ambassador", "monitor-only")
NETWORK_ACCESS = ("full", "read-only", "guest-ambassador", "monitor-only")


def _tags_attribute(description: str) -> SetNestedAttribute:
    return SetNestedAttribute(
        optional=True,
        computed=True,
        api_name="tags",
        description=description,
        attributes={
            "tag": StringAttribute(required=True, api_name="tag", description="The name of the tag"),
            "access": StringAttribute(
                required=True,
                api_name="access",
                description="The privilege of the tag",
                validators=[one_of(*TAG_ACCESS)],
            ),
        },
    )


def _networks_attribute(description: str) -> SetNestedAttribute:
    return SetNestedAttribute(
        optional=True,
        computed=True,
        api_name="networks",
        description=description,
        attributes={
            "id": StringAttribute(required=True, api_name="id", description="The network ID"),
            "access": StringAttribute(
                required=True,
                api_name="access",
                description="The privilege on the network",
                validators=[one_of(*NETWORK_ACCESS)],
            ),
        },
    )


# ── meraki_organization ───────────────────────────────────────────────

ORGANIZATION_SCHEMA = Schema(
    description="Manage the organizations that the user has privileges on",
    attributes={
        "id": id_attribute(),
        "organization_id": StringAttribute(
            computed=True,
            api_name="id",
            description="Organization ID",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "clone_organization_id": StringAttribute(
            optional=True,
            description="Create the new organization as a clone of this organization",
            plan_modifiers=[requires_replace()],
        ),
        "name": StringAttribute(required=True, api_name="name", description="Organization name"),
        "api_enabled": BoolAttribute(optional=True, computed=True, description="Enable API access"),
        "management_details_name": StringAttribute(optional=True, computed=True, description="Name of management data"),
        "management_details_value": StringAttribute(optional=True, computed=True, description="Value of management data"),
        "cloud_region_name": StringAttribute(computed=True, description="Name of region"),
        "licensing_model": StringAttribute(computed=True, description="Organization licensing model"),
        "url": StringAttribute(computed=True, api_name="url", description="Organization URL"),
    },
)


@register_resource("meraki_organization")
class OrganizationResource(CollectionResource):
    parent_keys = ()
    id_key = "organization_id"
    group = "organizations"
    create_operation = "create_organization"
    get_operation = "get_organization"
    update_operation = "update_organization"
    delete_operation = "delete_organization"

    @classmethod
    def schema(cls) -> Schema:
        return ORGANIZATION_SCHEMA

    def to_payload(self, model: Model) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": model["name"]}
        if is_known(model.get("api_enabled")):
            payload["api"] = {"enabled": model["api_enabled"]}
        if is_known(model.get("management_details_name")):
            payload["management"] = {
                "details": [{"name": model["management_details_name"], "value": model.get("management_details_value") or ""}]
            }
        return payload

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        model = super().from_response(model, data, overwrite)
        details = extract_path(data, "management", "details") or [{}]
        derived = {
            "api_enabled": extract_path(data, "api", "enabled"),
            "management_details_name": details[0].get("name"),
            "management_details_value": details[0].get("value"),
            "cloud_region_name": extract_path(data, "cloud", "region", "name"),
            "licensing_model": extract_path(data, "licensing", "model"),
        }
        for name, value in derived.items():
            if overwrite or not is_known(model.get(name)):
                model[name] = value
        return model

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        source = plan.get("clone_organization_id")
        if not is_known(source):
            return super().create(plan, diags)
        self.log.debug(f"clone organization {source} as {plan['name']!r}")
        ok, data = self._call(
            diags,
            "clone organization",
            self.client.organizations.clone_organization,
            source,
            {"name": plan["name"]},
            expected=201,
        )
        if not ok:
            return None
        model = self.from_response(plan, data, overwrite=False)
        if any(is_known(plan.get(k)) for k in ("api_enabled", "management_details_name")):
            # the clone exists even when the follow-up update fails
            return self.update(model, model, diags) or model
        return model


# ── meraki_organizations_admin ────────────────────────────────────────

ADMIN_SCHEMA = Schema(
    description="Manage the dashboard administrators in this organization",
    attributes={
        "id": id_attribute(),
        "organization_id": organization_id_attribute(),
        "admin_id": StringAttribute(
            computed=True,
            api_name="id",
            description="The ID of the dashboard administrator",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "name": StringAttribute(required=True, api_name="name", description="The name of the dashboard administrator"),
        "email": StringAttribute(
            required=True,
            api_name="email",
            description="The email of the dashboard administrator. This attribute can not be updated.",
            plan_modifiers=[requires_replace()],
        ),
        "org_access": StringAttribute(
            required=True,
            api_name="orgAccess",
            description="The privilege of the dashboard administrator on the organization",
            validators=[one_of(*ORG_ACCESS)],
        ),
        "authentication_method": StringAttribute(
            optional=True,
            computed=True,
            api_name="authenticationMethod",
            description="The method of authentication the user will use to sign in to the Meraki dashboard",
            validators=[one_of("Email", "Cisco SecureX Sign-On")],
            plan_modifiers=[requires_replace()],
        ),
        "tags": _tags_attribute("The list of tags that the dashboard administrator has privileges on"),
        "networks": _networks_attribute("The list of networks that the dashboard administrator has privileges on"),
        "account_status": StringAttribute(computed=True, api_name="accountStatus", description="Status of the admin's account"),
        "two_factor_auth_enabled": BoolAttribute(
            computed=True, api_name="twoFactorAuthEnabled", description="Indicates whether two-factor authentication is enabled"
        ),
        "has_api_key": BoolAttribute(computed=True, api_name="hasApiKey", description="Indicates whether the admin has an API key"),
        "last_active": StringAttribute(computed=True, api_name="lastActive", description="Time when the admin was last active"),
    },
)


@register_resource("meraki_organizations_admin")
class OrganizationsAdminResource(CollectionResource):
    parent_keys = ("organization_id",)
    id_key = "admin_id"
    group = "organizations"
    create_operation = "create_organization_admin"
    update_operation = "update_organization_admin"
    delete_operation = "delete_organization_admin"

    @classmethod
    def schema(cls) -> Schema:
        return ADMIN_SCHEMA

    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        # There is no single-admin GET; list the organization's admins and match by id.
        if not self._require(state, diags, "organization_id", "admin_id"):
            return None
        ok, admins = self._call(
            diags,
            "read organization admins",
            self.client.organizations.get_organization_admins,
            state["organization_id"],
            missing_ok=True,
        )
        if not ok or admins is None:
            return None
        for admin in admins:
            if str(admin.get("id")) == str(state["admin_id"]):
                return self.from_response(state, admin, overwrite=True)
        self.log.info(f"admin {state['admin_id']} no longer exists")
        return None

    def to_payload(self, model: Model) -> dict[str, Any]:
        payload = super().to_payload(model)
        if is_known(model.get("admin_id")):
            # email and authenticationMethod are create-only
            payload.pop("email", None)
            payload.pop("authenticationMethod", None)
        return payload


# ── meraki_organizations_saml_role ────────────────────────────────────

SAML_ROLE_SCHEMA = Schema(
    description="Manage the SAML roles in this organization",
    attributes={
        "id": id_attribute(),
        "organization_id": organization_id_attribute(),
        "role_id": StringAttribute(
            computed=True,
            api_name="id",
            description="The ID of the SAML role",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "role": StringAttribute(required=True, api_name="role", description="The role of the SAML administrator"),
        "org_access": StringAttribute(
            required=True,
            api_name="orgAccess",
            description="The privilege of the SAML administrator on the organization",
            validators=[one_of(*ORG_ACCESS)],
        ),
        "tags": _tags_attribute("The list of tags that the SAML administrator has privileges on"),
        "networks": _networks_attribute("The list of networks that the SAML administrator has privileges on"),
    },
)


@register_resource("meraki_organizations_saml_role")
class OrganizationsSamlRoleResource(CollectionResource):
    parent_keys = ("organization_id",)
    id_key = "role_id"
    group = "organizations"
    create_operation = "create_organization_saml_role"
    get_operation = "get_organization_saml_role"
    update_operation = "update_organization_saml_role"
    delete_operation = "delete_organization_saml_role"

    @classmethod
    def schema(cls) -> Schema:
        return SAML_ROLE_SCHEMA


# ── meraki_organizations_snmp ─────────────────────────────────────────

ORGANIZATION_SNMP_SCHEMA = Schema(
    description="Manage the SNMP settings for an organization",
    attributes={
        "id": id_attribute(),
        "organization_id": organization_id_attribute(),
        "v2c_enabled": BoolAttribute(
            optional=True, computed=True, api_name="v2cEnabled", description="Boolean indicating whether SNMP version 2c is enabled"
        ),
        "v3_enabled": BoolAttribute(
            optional=True, computed=True, api_name="v3Enabled", description="Boolean indicating whether SNMP version 3 is enabled"
        ),
        "v3_auth_mode": StringAttribute(
            optional=True,
            computed=True,
            api_name="v3AuthMode",
            description="The SNMP version 3 authentication mode",
            validators=[one_of("MD5", "SHA")],
        ),
        "v3_auth_pass": StringAttribute(
            optional=True,
            sensitive=True,
            api_name="v3AuthPass",
            description="The SNMP version 3 authentication password. Must be at least 8 characters if specified.",
        ),
        "v3_priv_mode": StringAttribute(
            optional=True,
            computed=True,
            api_name="v3PrivMode",
            description="The SNMP version 3 privacy mode",
            validators=[one_of("DES", "AES128")],
        ),
        "v3_priv_pass": StringAttribute(
            optional=True,
            sensitive=True,
            api_name="v3PrivPass",
            description="The SNMP version 3 privacy password. Must be at least 8 characters if specified.",
        ),
        "peer_ips": SetAttribute(
            optional=True,
            computed=True,
            api_name="peerIps",
            description="The list of IPv4 addresses that are allowed to access the SNMP server",
        ),
        "hostname": StringAttribute(computed=True, api_name="hostname", description="The hostname of the SNMP server"),
        "port": Int64Attribute(computed=True, api_name="port", description="The port of the SNMP server"),
        "v2_community_string": StringAttribute(
            computed=True, sensitive=True, api_name="v2CommunityString", description="The community string for SNMP version 2c"
        ),
        "v3_user": StringAttribute(computed=True, api_name="v3User", description="The user for SNMP version 3"),
    },
)


@register_resource("meraki_organizations_snmp")
class OrganizationsSnmpResource(SettingsResource):
    parent_keys = ("organization_id",)
    group = "organizations"
    get_operation = "get_organization_snmp"
    update_operation = "update_organization_snmp"

    @classmethod
    def schema(cls) -> Schema:
        return ORGANIZATION_SNMP_SCHEMA


# ── meraki_organizations_claim ────────────────────────────────────────

CLAIM_SCHEMA = Schema(
    description=(
        "Claim a list of devices, licenses, and/or orders into an organization. When claiming by order, "
        "all devices and licenses in the order will be claimed; licenses will be added to the organization "
        "and devices will be placed in the organization's inventory."
    ),
    attributes={
        "id": id_attribute(),
        "organization_id": organization_id_attribute(),
        "orders": SetAttribute(
            optional=True,
            computed=True,
            api_name="orders",
            description="The numbers of the orders that should be claimed",
            plan_modifiers=[requires_replace()],
        ),
        "serials": SetAttribute(
            optional=True,
            computed=True,
            api_name="serials",
            description="The serials of the devices that should be claimed",
            plan_modifiers=[requires_replace()],
        ),
        "licences": ListNestedAttribute(
            optional=True,
            computed=True,
            api_name="licenses",
            description="The licenses that should be claimed",
            plan_modifiers=[requires_replace()],
            attributes={
                "key": StringAttribute(required=True, api_name="key", description="The key of the license"),
                "mode": StringAttribute(
                    optional=True,
                    computed=True,
                    api_name="mode",
                    description=(
                        "Either 'renew' or 'addDevices'. 'addDevices' will increase the license limit, while "
                        "'renew' will extend the amount of time until expiration. Defaults to 'addDevices'."
                    ),
                    validators=[one_of("renew", "addDevices")],
                ),
            },
        ),
    },
)


@register_resource("meraki_organizations_claim")
class OrganizationsClaimResource(MerakiResource):
    """Claims are one-shot: there is nothing to read back or delete."""

    @classmethod
    def schema(cls) -> Schema:
        return CLAIM_SCHEMA

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, "organization_id"):
            return None
        attrs = CLAIM_SCHEMA.attributes
        payload = {
            attr.api_name: attr.to_api(plan[name])
            for name, attr in attrs.items()
            if attr.api_name and is_known(plan.get(name))
        }
        self.log.debug(f"claim into organization {plan['organization_id']}: {payload}")
        ok, data = self._call(
            diags,
            "claim into organization",
            self.client.organizations.claim_into_organization,
            plan["organization_id"],
            payload,
        )
        if not ok:
            return None
        model = {**plan}
        for name, attr in attrs.items():
            if attr.api_name and not is_known(model.get(name)):
                model[name] = attr.from_api((data or {}).get(attr.api_name)) or []
        model["id"] = plan["organization_id"]
        return model

    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        return dict(state)

    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        return self.create(plan, diags)

    def delete(self, state: Model, diags: Diagnostics) -> None:
        self.log.debug("claims cannot be undone; removing from state only")
