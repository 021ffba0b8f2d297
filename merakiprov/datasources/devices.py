"""Device data sources."""

from __future__ import annotations

from typing import Any

from merakiprov.datasources.base import ListDataSource, list_schema, required_string
from merakiprov.framework.schema import (
    BoolAttribute,
    Float64Attribute,
    Int64Attribute,
    ListAttribute,
    Schema,
    SingleNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import between
from merakiprov.framework.values import is_known
from merakiprov.registry import register_data_source


def _traffic(api_name: str, description: str, value_type: type = Float64Attribute) -> SingleNestedAttribute:
    return SingleNestedAttribute(
        computed=True,
        api_name=api_name,
        description=description,
        attributes={
            "total": value_type(computed=True, api_name="total", description="The total amount"),
            "sent": value_type(computed=True, api_name="sent", description="The amount sent"),
            "recv": value_type(computed=True, api_name="recv", description="The amount received"),
        },
    )


def _neighbor(api_name: str, description: str) -> SingleNestedAttribute:
    return SingleNestedAttribute(
        computed=True,
        api_name=api_name,
        description=description,
        attributes={
            "system_name": StringAttribute(computed=True, api_name="systemName", description="The system name"),
            "device_id": StringAttribute(computed=True, api_name="deviceId", description="The device ID"),
            "port_id": StringAttribute(computed=True, api_name="portId", description="The port ID"),
            "address": StringAttribute(computed=True, api_name="address", description="The device's management address"),
            "management_address": StringAttribute(
                computed=True, api_name="managementAddress", description="The device's management IP"
            ),
        },
    )


SWITCH_PORTS_STATUSES_SCHEMA = list_schema(
    description="Return the status for all the ports of a switch",
    arguments={
        "serial": required_string("The device serial"),
        "t0": StringAttribute(optional=True, description="The beginning of the timespan for the data. The maximum lookback period is 31 days from today."),
        "timespan": Float64Attribute(
            optional=True,
            description="The timespan for which the information will be fetched. The value must be in seconds and be less than or equal to 31 days.",
            validators=[between(0, 2678400)],
        ),
    },
    items={
        "port_id": StringAttribute(computed=True, api_name="portId", description="The string identifier of this port on the switch"),
        "enabled": BoolAttribute(computed=True, api_name="enabled", description="Whether the port is configured to be enabled"),
        "status": StringAttribute(computed=True, api_name="status", description="The current connection status of the port"),
        "is_uplink": BoolAttribute(computed=True, api_name="isUplink", description="Whether the port is the switch's uplink"),
        "errors": ListAttribute(computed=True, api_name="errors", description="All errors present on the port"),
        "warnings": ListAttribute(computed=True, api_name="warnings", description="All warnings present on the port"),
        "speed": StringAttribute(computed=True, api_name="speed", description="The current data transfer rate which the port is operating at"),
        "duplex": StringAttribute(computed=True, api_name="duplex", description="The current duplex of a connected port"),
        "client_count": Int64Attribute(computed=True, api_name="clientCount", description="The number of clients connected through this port"),
        "power_usage_in_wh": Float64Attribute(
            computed=True, api_name="powerUsageInWh", description="How much power (in watt-hours) has been delivered by this port during the timespan"
        ),
        "usage_in_kb": _traffic("usageInKb", "A breakdown of how many kilobytes have passed through this port during the timespan", Int64Attribute),
        "traffic_in_kbps": _traffic("trafficInKbps", "A breakdown of the average speed of data that has passed through this port during the timespan"),
        "cdp": _neighbor("cdp", "The Cisco Discovery Protocol (CDP) information of the connected device"),
        "lldp": _neighbor("lldp", "The Link Layer Discovery Protocol (LLDP) information of the connected device"),
        "secure_port": SingleNestedAttribute(
            computed=True,
            api_name="securePort",
            description="The Secure Port status of the port",
            attributes={
                "enabled": BoolAttribute(computed=True, api_name="enabled", description="Whether Secure Port is turned on for this port"),
                "active": BoolAttribute(computed=True, api_name="active", description="Whether Secure Port is currently active for this port"),
                "authentication_status": StringAttribute(
                    computed=True, api_name="authenticationStatus", description="The current Secure Port status"
                ),
            },
        ),
    },
)


@register_data_source("meraki_devices_switch_ports_statuses")
class DevicesSwitchPortsStatusesDataSource(ListDataSource):
    arg_keys = ("serial",)
    group = "switch"
    operation = "get_device_switch_ports_statuses"

    @classmethod
    def schema(cls) -> Schema:
        return SWITCH_PORTS_STATUSES_SCHEMA

    def query_params(self, config: dict[str, Any]) -> dict[str, Any] | None:
        params: dict[str, Any] = {}
        if is_known(config.get("t0")):
            params["t0"] = config["t0"]
        if is_known(config.get("timespan")):
            params["timespan"] = config["timespan"]
        return params
