"""Network-level resources."""

from __future__ import annotations

from typing import Any

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.planmodifiers import requires_replace, use_state_for_unknown
from merakiprov.framework.resource import Model
from merakiprov.framework.retry import delete_with_polling
from merakiprov.framework.schema import (
    BoolAttribute,
    Int64Attribute,
    ListNestedAttribute,
    Schema,
    SetAttribute,
    SetNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import between, one_of, value_strings_are
from merakiprov.framework.values import is_known
from merakiprov.registry import register_resource
from merakiprov.resources.base import (
    CollectionResource,
    MerakiResource,
    SettingsResource,
    id_attribute,
    network_id_attribute,
)

PRODUCT_TYPES = (
    "appliance",
    "camera",
    "cellularGateway",
    "secureConnect",
    "sensor",
    "switch",
    "systemsManager",
    "wireless",
    "wirelessController",
)

# ── meraki_network ────────────────────────────────────────────────────

NETWORK_SCHEMA = Schema(
    description="Manage the networks that the user has privileges on in an organization",
    attributes={
        "id": id_attribute(),
        "network_id": StringAttribute(
            computed=True,
            api_name="id",
            description="Network ID",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "organization_id": StringAttribute(
            required=True,
            description="Organization ID",
            plan_modifiers=[requires_replace()],
        ),
        "name": StringAttribute(required=True, api_name="name", description="Network name"),
        "product_types": SetAttribute(
            required=True,
            api_name="productTypes",
            description="List of the product types that the network supports",
            validators=[value_strings_are(one_of(*PRODUCT_TYPES))],
            plan_modifiers=[requires_replace()],
        ),
        "tags": SetAttribute(optional=True, computed=True, api_name="tags", description="Network tags"),
        "timezone": StringAttribute(
            optional=True,
            computed=True,
            api_name="timeZone",
            description="Timezone of the network",
        ),
        "notes": StringAttribute(optional=True, computed=True, api_name="notes", description="Notes for the network"),
        "enrollment_string": StringAttribute(
            optional=True,
            computed=True,
            api_name="enrollmentString",
            description="Enrollment string for the network",
        ),
        "copy_from_network_id": StringAttribute(
            optional=True,
            api_name="copyFromNetworkId",
            description="The ID of the network to copy configuration from",
            plan_modifiers=[requires_replace()],
        ),
        "url": StringAttribute(computed=True, api_name="url", description="URL to the network Dashboard UI"),
        "is_bound_to_config_template": BoolAttribute(
            computed=True,
            api_name="isBoundToConfigTemplate",
            description="If the network is bound to a config template",
        ),
    },
)


@register_resource("meraki_network")
class NetworkResource(CollectionResource):
    parent_keys = ()
    id_key = "network_id"
    delete_attempts = 100

    @classmethod
    def schema(cls) -> Schema:
        return NETWORK_SCHEMA

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        copy_from = model.get("copy_from_network_id")
        model = super().from_response(model, data, overwrite)
        # never echoed back by the API
        model["copy_from_network_id"] = copy_from if is_known(copy_from) else None
        if not is_known(model.get("organization_id")) and isinstance(data, dict):
            model["organization_id"] = data.get("organizationId")
        return model

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, "organization_id"):
            return None
        self.log.debug(f"create network {plan.get('name')!r} in {plan['organization_id']}")
        ok, data = self._call(
            diags,
            "create network",
            self.client.organizations.create_organization_network,
            plan["organization_id"],
            self.to_payload(plan),
            expected=201,
        )
        if not ok:
            return None
        return self.from_response(plan, data, overwrite=False)

    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        if not self._require(state, diags, "network_id"):
            return None
        ok, data = self._call(
            diags, "read network", self.client.networks.get_network, state["network_id"], missing_ok=True
        )
        if not ok or data is None:
            return None
        return self.from_response(state, data, overwrite=True)

    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        network_id = plan.get("network_id") if is_known(plan.get("network_id")) else state.get("network_id")
        payload = self.to_payload(plan)
        for create_only in ("productTypes", "copyFromNetworkId"):
            payload.pop(create_only, None)
        ok, data = self._call(diags, "update network", self.client.networks.update_network, network_id, payload)
        if not ok:
            return None
        return self.from_response({**plan, "network_id": network_id}, data, overwrite=False)

    def delete(self, state: Model, diags: Diagnostics) -> None:
        if not self._require(state, diags, "network_id"):
            return
        network_id = state["network_id"]
        self.log.debug(f"delete network {network_id}")
        deleted = delete_with_polling(
            lambda: self.client.networks.delete_network(network_id)[1],
            attempts=self.delete_attempts,
        )
        if not deleted:
            diags.add_error(
                "Failed to delete resource",
                f"Network {network_id} was not deleted after {self.delete_attempts} attempts.",
            )

    def import_state(self, import_id: str, diags: Diagnostics) -> Model | None:
        parts = self._split_import_id(import_id, diags, "organization_id", "network_id")
        if parts is None:
            return None
        model = NETWORK_SCHEMA.empty_model()
        model["organization_id"], model["network_id"] = parts
        model["id"] = parts[1]
        return model


# ── meraki_networks_snmp ──────────────────────────────────────────────

NETWORK_SNMP_SCHEMA = Schema(
    description="Manage the SNMP settings for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "access": StringAttribute(
            optional=True,
            computed=True,
            api_name="access",
            description="The type of SNMP access. Can be one of 'none' (disabled), 'community' (V1/V2c), or 'users' (V3).",
            validators=[one_of("none", "community", "users")],
        ),
        "community_string": StringAttribute(
            optional=True,
            computed=True,
            sensitive=True,
            api_name="communityString",
            description="The SNMP community string. Only relevant if 'access' is set to 'community'.",
        ),
        "users": SetNestedAttribute(
            optional=True,
            computed=True,
            api_name="users",
            description="The list of SNMP users. Only relevant if 'access' is set to 'users'.",
            attributes={
                "username": StringAttribute(required=True, api_name="username", description="The username for the SNMP user"),
                "passphrase": StringAttribute(
                    required=True, sensitive=True, api_name="passphrase", description="The passphrase for the SNMP user"
                ),
            },
        ),
    },
)


@register_resource("meraki_networks_snmp")
class NetworksSnmpResource(SettingsResource):
    get_operation = "get_network_snmp"
    update_operation = "update_network_snmp"

    @classmethod
    def schema(cls) -> Schema:
        return NETWORK_SNMP_SCHEMA

    def reset_payload(self, state: Model) -> dict[str, Any] | None:
        return {"access": "none"}


# ── meraki_networks_syslog_servers ────────────────────────────────────

SYSLOG_SERVERS_SCHEMA = Schema(
    description="Manage the syslog servers for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "servers": SetNestedAttribute(
            required=True,
            api_name="servers",
            description="A list of the syslog servers for this network",
            attributes={
                "host": StringAttribute(required=True, api_name="host", description="The IP address of the syslog server"),
                "port": Int64Attribute(
                    required=True,
                    api_name="port",
                    description="The port of the syslog server",
                    validators=[between(1, 65535)],
                ),
                "roles": SetAttribute(
                    required=True,
                    api_name="roles",
                    description="A list of roles for the syslog server",
                ),
            },
        ),
    },
)


@register_resource("meraki_networks_syslog_servers")
class NetworksSyslogServersResource(SettingsResource):
    get_operation = "get_network_syslog_servers"
    update_operation = "update_network_syslog_servers"

    @classmethod
    def schema(cls) -> Schema:
        return SYSLOG_SERVERS_SCHEMA

    def reset_payload(self, state: Model) -> dict[str, Any] | None:
        return {"servers": []}


# ── meraki_networks_traffic_analysis ──────────────────────────────────

TRAFFIC_ANALYSIS_SCHEMA = Schema(
    description="Manage the traffic analysis settings for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "mode": StringAttribute(
            optional=True,
            computed=True,
            api_name="mode",
            description="The traffic analysis mode for the network",
            validators=[one_of("disabled", "basic", "detailed")],
        ),
        "custom_pie_chart_items": ListNestedAttribute(
            optional=True,
            computed=True,
            api_name="customPieChartItems",
            description="The list of items that make up the custom pie chart for traffic reporting",
            attributes={
                "name": StringAttribute(required=True, api_name="name", description="The name of the custom pie chart item"),
                "type": StringAttribute(
                    required=True,
                    api_name="type",
                    description="The signature type for the custom pie chart item",
                    validators=[one_of("host", "subnet", "ipRange")],
                ),
                "value": StringAttribute(
                    required=True, api_name="value", description="The value of the custom pie chart item"
                ),
            },
        ),
    },
)


@register_resource("meraki_networks_traffic_analysis")
class NetworksTrafficAnalysisResource(SettingsResource):
    get_operation = "get_network_traffic_analysis"
    update_operation = "update_network_traffic_analysis"

    @classmethod
    def schema(cls) -> Schema:
        return TRAFFIC_ANALYSIS_SCHEMA


# ── meraki_networks_storm_control ─────────────────────────────────────


def _threshold(api_name: str, description: str) -> Int64Attribute:
    return Int64Attribute(
        optional=True,
        computed=True,
        api_name=api_name,
        description=description,
        validators=[between(1, 99)],
    )


STORM_CONTROL_SCHEMA = Schema(
    description="Manage the storm control configuration for a switch network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "broadcast_threshold": _threshold(
            "broadcastThreshold", "Percentage (1 to 99) of total available port bandwidth for broadcast traffic type"
        ),
        "multicast_threshold": _threshold(
            "multicastThreshold", "Percentage (1 to 99) of total available port bandwidth for multicast traffic type"
        ),
        "unknown_unicast_threshold": _threshold(
            "unknownUnicastThreshold",
            "Percentage (1 to 99) of total available port bandwidth for unknown unicast (dlf-destination lookup failure) traffic type",
        ),
    },
)


@register_resource("meraki_networks_storm_control")
class NetworksStormControlResource(SettingsResource):
    group = "switch"
    get_operation = "get_network_switch_storm_control"
    update_operation = "update_network_switch_storm_control"

    @classmethod
    def schema(cls) -> Schema:
        return STORM_CONTROL_SCHEMA


# ── meraki_networks_devices_claim ─────────────────────────────────────

DEVICES_CLAIM_SCHEMA = Schema(
    description="Claim devices into a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "serials": SetAttribute(
            required=True,
            api_name="serials",
            description="A list of serials of devices to claim",
        ),
    },
)


@register_resource("meraki_networks_devices_claim")
class NetworksDevicesClaimResource(MerakiResource):
    """Keeps a set of device serials claimed into a network."""

    @classmethod
    def schema(cls) -> Schema:
        return DEVICES_CLAIM_SCHEMA

    def _claim(self, network_id: str, serials: list[str], diags: Diagnostics) -> bool:
        if not serials:
            return True
        ok, _ = self._call(
            diags,
            "claim network devices",
            self.client.networks.claim_network_devices,
            network_id,
            {"serials": serials},
        )
        return ok

    def _remove(self, network_id: str, serials: list[str], diags: Diagnostics) -> bool:
        for serial in serials:
            ok, _ = self._call(
                diags,
                f"remove device {serial}",
                self.client.networks.remove_network_devices,
                network_id,
                serial,
                expected=204,
            )
            if not ok:
                return False
        return True

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, "network_id", "serials"):
            return None
        if not self._claim(plan["network_id"], list(plan["serials"]), diags):
            return None
        return {**plan, "id": plan["network_id"]}

    def read(self, state: Model, diags: Diagnostics) -> Model | None:
        if not self._require(state, diags, "network_id"):
            return None
        ok, devices = self._call(
            diags,
            "read network devices",
            self.client.networks.get_network_devices,
            state["network_id"],
            missing_ok=True,
        )
        if not ok or devices is None:
            return None
        present = {d.get("serial") for d in devices}
        serials = state.get("serials")
        if serials is None:
            claimed = sorted(s for s in present if s)
        else:
            claimed = sorted(s for s in serials if s in present)
        return {**state, "serials": claimed, "id": state["network_id"]}

    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        wanted = set(plan.get("serials") or [])
        current = set(state.get("serials") or [])
        network_id = plan["network_id"]
        if not self._claim(network_id, sorted(wanted - current), diags):
            return None
        if not self._remove(network_id, sorted(current - wanted), diags):
            return None
        return {**plan, "id": network_id}

    def delete(self, state: Model, diags: Diagnostics) -> None:
        self._remove(state["network_id"], sorted(state.get("serials") or []), diags)

    def import_state(self, import_id: str, diags: Diagnostics) -> Model | None:
        parts = self._split_import_id(import_id, diags, "network_id")
        if parts is None:
            return None
        return {"id": parts[0], "network_id": parts[0], "serials": None}
