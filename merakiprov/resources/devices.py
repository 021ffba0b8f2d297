"""Device resources: device attributes and the management interface."""

from __future__ import annotations

from typing import Any

from merakiprov.framework.resource import Model
from merakiprov.framework.schema import (
    BoolAttribute,
    Float64Attribute,
    Int64Attribute,
    ListAttribute,
    Schema,
    SetAttribute,
    SingleNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import between, one_of
from merakiprov.registry import register_resource
from merakiprov.resources.base import SettingsResource, id_attribute, serial_attribute

# ── meraki_devices ────────────────────────────────────────────────────

DEVICE_SCHEMA = Schema(
    description="Manage the attributes of a single device",
    attributes={
        "id": id_attribute(),
        "serial": serial_attribute(),
        "name": StringAttribute(optional=True, computed=True, api_name="name", description="The name of a device"),
        "tags": SetAttribute(optional=True, computed=True, api_name="tags", description="The list of tags of a device"),
        "lat": Float64Attribute(
            optional=True, computed=True, api_name="lat", description="The latitude of a device", validators=[between(-90, 90)]
        ),
        "lng": Float64Attribute(
            optional=True, computed=True, api_name="lng", description="The longitude of a device", validators=[between(-180, 180)]
        ),
        "address": StringAttribute(optional=True, computed=True, api_name="address", description="The address of a device"),
        "notes": StringAttribute(optional=True, computed=True, api_name="notes", description="The notes for the device. String. Limited to 255 characters."),
        "move_map_marker": BoolAttribute(
            optional=True,
            sensitive=True,
            api_name="moveMapMarker",
            description="Whether or not to set the latitude and longitude of a device based on the new address",
        ),
        "switch_profile_id": StringAttribute(
            optional=True, computed=True, api_name="switchProfileId", description="The ID of a switch template to bind to the device"
        ),
        "floor_plan_id": StringAttribute(
            optional=True, computed=True, api_name="floorPlanId", description="The floor plan to associate to this device"
        ),
        "network_id": StringAttribute(computed=True, api_name="networkId", description="The network ID of the device"),
        "mac": StringAttribute(computed=True, api_name="mac", description="The mac address of a device"),
        "model": StringAttribute(computed=True, api_name="model", description="The model of a device"),
        "lan_ip": StringAttribute(computed=True, api_name="lanIp", description="The IP address of a device"),
        "firmware": StringAttribute(computed=True, api_name="firmware", description="The firmware version of a device"),
        "url": StringAttribute(computed=True, api_name="url", description="The url for the device"),
        "beacon_id_params": SingleNestedAttribute(
            computed=True,
            api_name="beaconIdParams",
            description="Beacon Id parameters with an identifier and major and minor versions",
            attributes={
                "uuid": StringAttribute(computed=True, api_name="uuid", description="The UUID to be used in the beacon identifier"),
                "major": Int64Attribute(computed=True, api_name="major", description="The major number to be used in the beacon identifier"),
                "minor": Int64Attribute(computed=True, api_name="minor", description="The minor number to be used in the beacon identifier"),
            },
        ),
    },
)


@register_resource("meraki_devices")
class DevicesResource(SettingsResource):
    parent_keys = ("serial",)
    group = "devices"
    get_operation = "get_device"
    update_operation = "update_device"

    @classmethod
    def schema(cls) -> Schema:
        return DEVICE_SCHEMA

    def reset_payload(self, state: Model) -> dict[str, Any] | None:
        return {
            "name": "",
            "tags": [],
            "lat": 0.0,
            "lng": 0.0,
            "address": "",
            "notes": "",
            "moveMapMarker": False,
        }


# ── meraki_devices_management_interface ───────────────────────────────


def _wan(api_name: str, description: str) -> SingleNestedAttribute:
    return SingleNestedAttribute(
        optional=True,
        computed=True,
        api_name=api_name,
        description=description,
        attributes={
            "wan_enabled": StringAttribute(
                optional=True,
                computed=True,
                api_name="wanEnabled",
                description="Enable or disable the interface (only for MX devices)",
                validators=[one_of("enabled", "disabled", "not configured")],
            ),
            "using_static_ip": BoolAttribute(
                optional=True, computed=True, api_name="usingStaticIp", description="Configure the interface to have static IP settings or use DHCP"
            ),
            "static_ip": StringAttribute(
                optional=True, computed=True, api_name="staticIp", description="The IP the device should use on the WAN"
            ),
            "static_subnet_mask": StringAttribute(
                optional=True, computed=True, api_name="staticSubnetMask", description="The subnet mask for the WAN"
            ),
            "static_gateway_ip": StringAttribute(
                optional=True, computed=True, api_name="staticGatewayIp", description="The IP of the gateway on the WAN"
            ),
            "static_dns": ListAttribute(
                optional=True, computed=True, api_name="staticDns", description="Up to two DNS IPs"
            ),
            "vlan": Int64Attribute(
                optional=True, computed=True, api_name="vlan", description="The VLAN that management traffic should be tagged with"
            ),
        },
    )


MANAGEMENT_INTERFACE_SCHEMA = Schema(
    description="Manage the management interface settings for a device",
    attributes={
        "id": id_attribute(),
        "serial": serial_attribute(),
        "wan1": _wan("wan1", "WAN 1 settings"),
        "wan2": _wan("wan2", "WAN 2 settings (only for MX devices)"),
        "ddns_hostnames": SingleNestedAttribute(
            computed=True,
            api_name="ddnsHostnames",
            description="Dynamic DNS hostnames",
            attributes={
                "active_ddns_hostname": StringAttribute(
                    computed=True, api_name="activeDdnsHostname", description="Active dynamic DNS hostname"
                ),
                "ddns_hostname_wan1": StringAttribute(
                    computed=True, api_name="ddnsHostnameWan1", description="WAN 1 dynamic DNS hostname"
                ),
                "ddns_hostname_wan2": StringAttribute(
                    computed=True, api_name="ddnsHostnameWan2", description="WAN 2 dynamic DNS hostname"
                ),
            },
        ),
    },
)


@register_resource("meraki_devices_management_interface")
class DevicesManagementInterfaceResource(SettingsResource):
    parent_keys = ("serial",)
    group = "devices"
    get_operation = "get_device_management_interface"
    update_operation = "update_device_management_interface"

    @classmethod
    def schema(cls) -> Schema:
        return MANAGEMENT_INTERFACE_SCHEMA
