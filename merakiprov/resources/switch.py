"""Switch resources: ports, network switch settings, MTU and QoS rules."""

from __future__ import annotations

from typing import Any

from merakiprov.framework.planmodifiers import requires_replace, use_state_for_unknown
from merakiprov.framework.resource import Model
from merakiprov.framework.schema import (
    BoolAttribute,
    Int64Attribute,
    ListAttribute,
    ListNestedAttribute,
    Schema,
    SetAttribute,
    SingleNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import between, one_of
from merakiprov.registry import register_resource
from merakiprov.resources.base import (
    CollectionResource,
    SettingsResource,
    id_attribute,
    network_id_attribute,
    serial_attribute,
)

DEFAULT_MTU_SIZE = 9578

# ── meraki_devices_switch_port ────────────────────────────────────────

SWITCH_PORT_SCHEMA = Schema(
    description="Manage a switch port",
    attributes={
        "id": id_attribute(),
        "serial": serial_attribute(),
        "port_id": StringAttribute(
            required=True,
            description="The identifier of the switch port",
            plan_modifiers=[requires_replace()],
        ),
        "name": StringAttribute(optional=True, computed=True, api_name="name", description="The name of the switch port"),
        "tags": SetAttribute(optional=True, computed=True, api_name="tags", description="The list of tags of the switch port"),
        "enabled": BoolAttribute(optional=True, computed=True, api_name="enabled", description="The status of the switch port"),
        "poe_enabled": BoolAttribute(optional=True, computed=True, api_name="poeEnabled", description="The PoE status of the switch port"),
        "type": StringAttribute(
            optional=True,
            computed=True,
            api_name="type",
            description="The type of the switch port",
            validators=[one_of("trunk", "access", "stack", "routed")],
        ),
        "vlan": Int64Attribute(
            optional=True,
            computed=True,
            api_name="vlan",
            description="The VLAN of the switch port. For a trunk port, this is the native VLAN.",
            validators=[between(1, 4094)],
        ),
        "voice_vlan": Int64Attribute(
            optional=True,
            computed=True,
            api_name="voiceVlan",
            description="The voice VLAN of the switch port. Only applicable to access ports.",
            validators=[between(1, 4094)],
        ),
        "allowed_vlans": StringAttribute(
            optional=True, computed=True, api_name="allowedVlans", description="The VLANs allowed on the switch port. Only applicable to trunk ports."
        ),
        "isolation_enabled": BoolAttribute(
            optional=True, computed=True, api_name="isolationEnabled", description="The isolation status of the switch port"
        ),
        "rstp_enabled": BoolAttribute(optional=True, computed=True, api_name="rstpEnabled", description="The rapid spanning tree protocol status"),
        "stp_guard": StringAttribute(
            optional=True,
            computed=True,
            api_name="stpGuard",
            description="The state of the STP guard",
            validators=[one_of("disabled", "root guard", "bpdu guard", "loop guard")],
        ),
        "link_negotiation": StringAttribute(
            optional=True, computed=True, api_name="linkNegotiation", description="The link speed for the switch port"
        ),
        "link_negotiation_capabilities": ListAttribute(
            computed=True, api_name="linkNegotiationCapabilities", description="Available link speeds for the switch port"
        ),
        "port_schedule_id": StringAttribute(
            optional=True, computed=True, api_name="portScheduleId", description="The ID of the port schedule"
        ),
        "udld": StringAttribute(
            optional=True,
            computed=True,
            api_name="udld",
            description="The action to take when Unidirectional Link is detected",
            validators=[one_of("Alert only", "Enforce")],
        ),
        "access_policy_type": StringAttribute(
            optional=True,
            computed=True,
            api_name="accessPolicyType",
            description="The type of the access policy of the switch port. Only applicable to access ports.",
            validators=[one_of("Open", "Custom access policy", "MAC allow list", "Sticky MAC allow list")],
        ),
        "access_policy_number": Int64Attribute(
            optional=True, computed=True, api_name="accessPolicyNumber", description="The number of a custom access policy to configure on the switch port"
        ),
        "mac_allow_list": SetAttribute(
            optional=True, computed=True, api_name="macAllowList", description="Only devices with MAC addresses specified in this list will have access to this port"
        ),
        "sticky_mac_allow_list": SetAttribute(
            optional=True, computed=True, api_name="stickyMacAllowList", description="The initial list of MAC addresses for sticky Mac allow list"
        ),
        "sticky_mac_allow_list_limit": Int64Attribute(
            optional=True, computed=True, api_name="stickyMacAllowListLimit", description="The maximum number of MAC addresses for sticky MAC allow list"
        ),
        "storm_control_enabled": BoolAttribute(
            optional=True, computed=True, api_name="stormControlEnabled", description="The storm control status of the switch port"
        ),
        "flexible_stacking_enabled": BoolAttribute(
            optional=True, computed=True, api_name="flexibleStackingEnabled", description="For supported switches (e.g. MS420/MS425), whether or not the port has flexible stacking enabled"
        ),
        "dai_trusted": BoolAttribute(
            optional=True, computed=True, api_name="daiTrusted", description="If true, ARP packets for this port will be considered trusted"
        ),
        "adaptive_policy_group_id": StringAttribute(
            optional=True, computed=True, api_name="adaptivePolicyGroupId", description="The adaptive policy group ID that will be used to tag traffic through this switch port"
        ),
        "peer_sgt_capable": BoolAttribute(
            optional=True, computed=True, api_name="peerSgtCapable", description="If true, Peer SGT is enabled for traffic through this switch port"
        ),
        "profile": SingleNestedAttribute(
            optional=True,
            computed=True,
            api_name="profile",
            description="Profile attributes",
            attributes={
                "enabled": BoolAttribute(optional=True, computed=True, api_name="enabled", description="When enabled, override this port's configuration with a port profile"),
                "id": StringAttribute(optional=True, computed=True, api_name="id", description="When enabled, the ID of the port profile used to override the port's configuration"),
                "iname": StringAttribute(optional=True, computed=True, api_name="iname", description="When enabled, the IName of the profile"),
            },
        ),
    },
)


@register_resource("meraki_devices_switch_port")
class DevicesSwitchPortResource(SettingsResource):
    parent_keys = ("serial", "port_id")
    group = "switch"
    get_operation = "get_device_switch_port"
    update_operation = "update_device_switch_port"
    # freshly claimed switches answer 4xx until their ports are provisioned
    retries = 3

    @classmethod
    def schema(cls) -> Schema:
        return SWITCH_PORT_SCHEMA


# ── meraki_networks_switch_settings ───────────────────────────────────

SWITCH_SETTINGS_SCHEMA = Schema(
    description="Manage switch settings for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "vlan": Int64Attribute(
            optional=True, computed=True, api_name="vlan", description="Management VLAN", validators=[between(1, 4094)]
        ),
        "use_combined_power": BoolAttribute(
            optional=True,
            computed=True,
            api_name="useCombinedPower",
            description="The use Combined Power as the default behavior of secondary power supplies on supported devices",
        ),
        "power_exceptions": ListNestedAttribute(
            optional=True,
            computed=True,
            api_name="powerExceptions",
            description="Exceptions on a per switch basis to 'useCombinedPower'",
            attributes={
                "serial": StringAttribute(required=True, api_name="serial", description="Serial number of the switch"),
                "power_type": StringAttribute(
                    required=True,
                    api_name="powerType",
                    description="Per switch exception (combined, redundant, useNetworkSetting)",
                    validators=[one_of("combined", "redundant", "useNetworkSetting")],
                ),
            },
        ),
    },
)


@register_resource("meraki_networks_switch_settings")
class NetworksSwitchSettingsResource(SettingsResource):
    group = "switch"
    get_operation = "get_network_switch_settings"
    update_operation = "update_network_switch_settings"

    @classmethod
    def schema(cls) -> Schema:
        return SWITCH_SETTINGS_SCHEMA


# ── meraki_networks_switch_mtu ────────────────────────────────────────

SWITCH_MTU_SCHEMA = Schema(
    description="Manage the MTU configuration for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "default_mtu_size": Int64Attribute(
            optional=True,
            computed=True,
            api_name="defaultMtuSize",
            description="MTU size for the entire network. Default value is 9578.",
            validators=[between(1280, 9578)],
        ),
        "overrides": ListNestedAttribute(
            optional=True,
            computed=True,
            api_name="overrides",
            description="Override MTU size for individual switches or switch profiles",
            attributes={
                "switches": SetAttribute(optional=True, computed=True, api_name="switches", description="List of switch serials"),
                "switch_profiles": SetAttribute(
                    optional=True, computed=True, api_name="switchProfiles", description="List of switch profile IDs"
                ),
                "mtu_size": Int64Attribute(
                    required=True, api_name="mtuSize", description="MTU size for the switches or switch profiles", validators=[between(1280, 9578)]
                ),
            },
        ),
    },
)


@register_resource("meraki_networks_switch_mtu")
class NetworksSwitchMtuResource(SettingsResource):
    group = "switch"
    get_operation = "get_network_switch_mtu"
    update_operation = "update_network_switch_mtu"

    @classmethod
    def schema(cls) -> Schema:
        return SWITCH_MTU_SCHEMA

    def reset_payload(self, state: Model) -> dict[str, Any] | None:
        return {"defaultMtuSize": DEFAULT_MTU_SIZE, "overrides": []}


# ── meraki_networks_switch_qos_rule ───────────────────────────────────

QOS_RULE_SCHEMA = Schema(
    description="Manage the quality of service rules for a switch network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "qos_rule_id": StringAttribute(
            computed=True,
            api_name="id",
            description="The ID of the QoS rule",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "vlan": Int64Attribute(
            required=True, api_name="vlan", description="The VLAN of the incoming packet. A null value will match any VLAN.", validators=[between(1, 4094)]
        ),
        "protocol": StringAttribute(
            optional=True,
            computed=True,
            api_name="protocol",
            description="The protocol of the incoming packet",
            validators=[one_of("ANY", "TCP", "UDP")],
        ),
        "src_port": Int64Attribute(
            optional=True, computed=True, api_name="srcPort", description="The source port of the incoming packet. Applicable only if protocol is TCP or UDP.", validators=[between(1, 65535)]
        ),
        "src_port_range": StringAttribute(
            optional=True, computed=True, api_name="srcPortRange", description="The source port range of the incoming packet. Applicable only if protocol is set to TCP or UDP."
        ),
        "dst_port": Int64Attribute(
            optional=True, computed=True, api_name="dstPort", description="The destination port of the incoming packet. Applicable only if protocol is TCP or UDP.", validators=[between(1, 65535)]
        ),
        "dst_port_range": StringAttribute(
            optional=True, computed=True, api_name="dstPortRange", description="The destination port range of the incoming packet. Applicable only if protocol is set to TCP or UDP."
        ),
        "dscp": Int64Attribute(
            optional=True, computed=True, api_name="dscp", description="DSCP tag for the incoming packet. Set this to -1 to trust incoming DSCP. Default value is 0.", validators=[between(-1, 63)]
        ),
    },
)


@register_resource("meraki_networks_switch_qos_rule")
class NetworksSwitchQosRuleResource(CollectionResource):
    id_key = "qos_rule_id"
    group = "switch"
    create_operation = "create_network_switch_qos_rule"
    get_operation = "get_network_switch_qos_rule"
    update_operation = "update_network_switch_qos_rule"
    delete_operation = "delete_network_switch_qos_rule"

    @classmethod
    def schema(cls) -> Schema:
        return QOS_RULE_SCHEMA
