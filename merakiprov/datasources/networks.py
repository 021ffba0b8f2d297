"""Network, appliance and switch data sources."""

from __future__ import annotations

from merakiprov.datasources.base import (
    ListDataSource,
    ObjectDataSource,
    item_attributes,
    list_schema,
    object_schema,
    required_string,
)
from merakiprov.framework.schema import Schema, StringAttribute
from merakiprov.registry import register_data_source
from merakiprov.resources.appliance import L3_FIREWALL_RULES_SCHEMA, VLAN_SCHEMA, VLANS_SETTINGS_SCHEMA
from merakiprov.resources.devices import DEVICE_SCHEMA
from merakiprov.resources.switch import QOS_RULE_SCHEMA, SWITCH_MTU_SCHEMA

NETWORK_ARGUMENTS = {"network_id": required_string("Network ID")}

NETWORK_DEVICES_SCHEMA = list_schema(
    description="List the devices in a network",
    arguments=NETWORK_ARGUMENTS,
    items={
        **item_attributes(DEVICE_SCHEMA, exclude=("id", "serial", "move_map_marker")),
        "serial": StringAttribute(computed=True, api_name="serial", description="The serial of the device"),
    },
)


@register_data_source("meraki_network_devices")
class NetworkDevicesDataSource(ListDataSource):
    arg_keys = ("network_id",)
    group = "networks"
    operation = "get_network_devices"

    @classmethod
    def schema(cls) -> Schema:
        return NETWORK_DEVICES_SCHEMA


APPLIANCE_VLANS_SCHEMA = list_schema(
    description="List the VLANs for an MX network",
    arguments=NETWORK_ARGUMENTS,
    items=item_attributes(VLAN_SCHEMA, exclude=("id", "network_id")),
)


@register_data_source("meraki_networks_appliance_vlans")
class NetworksApplianceVlansDataSource(ListDataSource):
    arg_keys = ("network_id",)
    group = "appliance"
    operation = "get_network_appliance_vlans"

    @classmethod
    def schema(cls) -> Schema:
        return APPLIANCE_VLANS_SCHEMA


APPLIANCE_VLANS_SETTINGS_SCHEMA = object_schema(
    VLANS_SETTINGS_SCHEMA, NETWORK_ARGUMENTS, "Returns the enabled status of VLANs for the network"
)


@register_data_source("meraki_networks_appliance_vlans_settings")
class NetworksApplianceVlansSettingsDataSource(ObjectDataSource):
    arg_keys = ("network_id",)
    group = "appliance"
    operation = "get_network_appliance_vlans_settings"

    @classmethod
    def schema(cls) -> Schema:
        return APPLIANCE_VLANS_SETTINGS_SCHEMA


APPLIANCE_L3_FIREWALL_RULES_SCHEMA = object_schema(
    L3_FIREWALL_RULES_SCHEMA,
    NETWORK_ARGUMENTS,
    "Return the L3 firewall rules for an MX network, including the trailing default rule",
)


@register_data_source("meraki_networks_appliance_firewall_l3_firewall_rules")
class NetworksApplianceFirewallL3FirewallRulesDataSource(ObjectDataSource):
    arg_keys = ("network_id",)
    group = "appliance"
    operation = "get_network_appliance_firewall_l3_firewall_rules"

    @classmethod
    def schema(cls) -> Schema:
        return APPLIANCE_L3_FIREWALL_RULES_SCHEMA


NETWORK_SWITCH_MTU_SCHEMA = object_schema(SWITCH_MTU_SCHEMA, NETWORK_ARGUMENTS, "Return the MTU configuration")


@register_data_source("meraki_networks_switch_mtu")
class NetworksSwitchMtuDataSource(ObjectDataSource):
    arg_keys = ("network_id",)
    group = "switch"
    operation = "get_network_switch_mtu"

    @classmethod
    def schema(cls) -> Schema:
        return NETWORK_SWITCH_MTU_SCHEMA


SWITCH_QOS_RULES_SCHEMA = list_schema(
    description="List quality of service rules",
    arguments=NETWORK_ARGUMENTS,
    items=item_attributes(QOS_RULE_SCHEMA, exclude=("id", "network_id")),
)


@register_data_source("meraki_networks_switch_qos_rules")
class NetworksSwitchQosRulesDataSource(ListDataSource):
    arg_keys = ("network_id",)
    group = "switch"
    operation = "get_network_switch_qos_rules"

    @classmethod
    def schema(cls) -> Schema:
        return SWITCH_QOS_RULES_SCHEMA
