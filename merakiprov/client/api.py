"""Dashboard API endpoint groups.

Every method returns ``(data, response)``: the decoded JSON body and the raw
``requests.Response`` so callers can check the status code.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import requests

from merakiprov.client.base import BaseTransport
from merakiprov.client.configuration import ClientConfiguration
from merakiprov.client.transport import DashboardTransport

Result = tuple[Any, requests.Response]


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


class _EndpointGroup:
    def __init__(self, transport: BaseTransport):
        self._transport = transport

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Result:
        return self._transport.request("GET", path, params=params)

    def _post(self, path: str, body: Any = None) -> Result:
        return self._transport.request("POST", path, json=body)

    def _put(self, path: str, body: Any = None) -> Result:
        return self._transport.request("PUT", path, json=body)

    def _delete(self, path: str) -> Result:
        return self._transport.request("DELETE", path)


class OrganizationsAPI(_EndpointGroup):
    def get_organizations(self) -> Result:
        return self._transport.get_pages("/organizations")

    def get_organization(self, organization_id: str) -> Result:
        return self._get(f"/organizations/{_seg(organization_id)}")

    def create_organization(self, body: dict[str, Any]) -> Result:
        return self._post("/organizations", body)

    def clone_organization(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/organizations/{_seg(organization_id)}/clone", body)

    def update_organization(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/organizations/{_seg(organization_id)}", body)

    def delete_organization(self, organization_id: str) -> Result:
        return self._delete(f"/organizations/{_seg(organization_id)}")

    def get_organization_networks(self, organization_id: str, params: dict[str, Any] | None = None) -> Result:
        return self._transport.get_pages(f"/organizations/{_seg(organization_id)}/networks", params)

    def create_organization_network(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/organizations/{_seg(organization_id)}/networks", body)

    def get_organization_admins(self, organization_id: str) -> Result:
        return self._get(f"/organizations/{_seg(organization_id)}/admins")

    def create_organization_admin(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/organizations/{_seg(organization_id)}/admins", body)

    def update_organization_admin(self, organization_id: str, admin_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/organizations/{_seg(organization_id)}/admins/{_seg(admin_id)}", body)

    def delete_organization_admin(self, organization_id: str, admin_id: str) -> Result:
        return self._delete(f"/organizations/{_seg(organization_id)}/admins/{_seg(admin_id)}")

    def get_organization_saml_role(self, organization_id: str, role_id: str) -> Result:
        return self._get(f"/organizations/{_seg(organization_id)}/samlRoles/{_seg(role_id)}")

    def create_organization_saml_role(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/organizations/{_seg(organization_id)}/samlRoles", body)

    def update_organization_saml_role(self, organization_id: str, role_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/organizations/{_seg(organization_id)}/samlRoles/{_seg(role_id)}", body)

    def delete_organization_saml_role(self, organization_id: str, role_id: str) -> Result:
        return self._delete(f"/organizations/{_seg(organization_id)}/samlRoles/{_seg(role_id)}")

    def get_organization_snmp(self, organization_id: str) -> Result:
        return self._get(f"/organizations/{_seg(organization_id)}/snmp")

    def update_organization_snmp(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/organizations/{_seg(organization_id)}/snmp", body)

    def claim_into_organization(self, organization_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/organizations/{_seg(organization_id)}/claim", body)


class NetworksAPI(_EndpointGroup):
    def get_network(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}")

    def update_network(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}", body)

    def delete_network(self, network_id: str) -> Result:
        return self._delete(f"/networks/{_seg(network_id)}")

    def get_network_devices(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/devices")

    def claim_network_devices(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/networks/{_seg(network_id)}/devices/claim", body)

    def remove_network_devices(self, network_id: str, serial: str) -> Result:
        return self._post(f"/networks/{_seg(network_id)}/devices/remove", {"serial": serial})

    def get_network_snmp(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/snmp")

    def update_network_snmp(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/snmp", body)

    def get_network_syslog_servers(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/syslogServers")

    def update_network_syslog_servers(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/syslogServers", body)

    def get_network_traffic_analysis(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/trafficAnalysis")

    def update_network_traffic_analysis(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/trafficAnalysis", body)


class DevicesAPI(_EndpointGroup):
    def get_device(self, serial: str) -> Result:
        return self._get(f"/devices/{_seg(serial)}")

    def update_device(self, serial: str, body: dict[str, Any]) -> Result:
        return self._put(f"/devices/{_seg(serial)}", body)

    def get_device_management_interface(self, serial: str) -> Result:
        return self._get(f"/devices/{_seg(serial)}/managementInterface")

    def update_device_management_interface(self, serial: str, body: dict[str, Any]) -> Result:
        return self._put(f"/devices/{_seg(serial)}/managementInterface", body)


class ApplianceAPI(_EndpointGroup):
    def get_network_appliance_vlans(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/vlans")

    def get_network_appliance_vlan(self, network_id: str, vlan_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/vlans/{_seg(vlan_id)}")

    def create_network_appliance_vlan(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/networks/{_seg(network_id)}/appliance/vlans", body)

    def update_network_appliance_vlan(self, network_id: str, vlan_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/appliance/vlans/{_seg(vlan_id)}", body)

    def delete_network_appliance_vlan(self, network_id: str, vlan_id: str) -> Result:
        return self._delete(f"/networks/{_seg(network_id)}/appliance/vlans/{_seg(vlan_id)}")

    def get_network_appliance_vlans_settings(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/vlans/settings")

    def update_network_appliance_vlans_settings(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/appliance/vlans/settings", body)

    def get_network_appliance_firewall_l3_firewall_rules(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/firewall/l3FirewallRules")

    def update_network_appliance_firewall_l3_firewall_rules(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/appliance/firewall/l3FirewallRules", body)

    def get_network_appliance_static_route(self, network_id: str, route_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/staticRoutes/{_seg(route_id)}")

    def create_network_appliance_static_route(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/networks/{_seg(network_id)}/appliance/staticRoutes", body)

    def update_network_appliance_static_route(self, network_id: str, route_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/appliance/staticRoutes/{_seg(route_id)}", body)

    def delete_network_appliance_static_route(self, network_id: str, route_id: str) -> Result:
        return self._delete(f"/networks/{_seg(network_id)}/appliance/staticRoutes/{_seg(route_id)}")

    def get_network_appliance_settings(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/settings")

    def update_network_appliance_settings(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/appliance/settings", body)

    def get_network_appliance_firewall_settings(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/appliance/firewall/settings")

    def update_network_appliance_firewall_settings(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/appliance/firewall/settings", body)


class SwitchAPI(_EndpointGroup):
    def get_device_switch_port(self, serial: str, port_id: str) -> Result:
        return self._get(f"/devices/{_seg(serial)}/switch/ports/{_seg(port_id)}")

    def update_device_switch_port(self, serial: str, port_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/devices/{_seg(serial)}/switch/ports/{_seg(port_id)}", body)

    def get_device_switch_ports_statuses(self, serial: str, params: dict[str, Any] | None = None) -> Result:
        return self._get(f"/devices/{_seg(serial)}/switch/ports/statuses", params)

    def get_network_switch_settings(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/switch/settings")

    def update_network_switch_settings(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/switch/settings", body)

    def get_network_switch_mtu(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/switch/mtu")

    def update_network_switch_mtu(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/switch/mtu", body)

    def get_network_switch_qos_rules(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/switch/qosRules")

    def get_network_switch_qos_rule(self, network_id: str, rule_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/switch/qosRules/{_seg(rule_id)}")

    def create_network_switch_qos_rule(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._post(f"/networks/{_seg(network_id)}/switch/qosRules", body)

    def update_network_switch_qos_rule(self, network_id: str, rule_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/switch/qosRules/{_seg(rule_id)}", body)

    def delete_network_switch_qos_rule(self, network_id: str, rule_id: str) -> Result:
        return self._delete(f"/networks/{_seg(network_id)}/switch/qosRules/{_seg(rule_id)}")

    def get_network_switch_storm_control(self, network_id: str) -> Result:
        return self._get(f"/networks/{_seg(network_id)}/switch/stormControl")

    def update_network_switch_storm_control(self, network_id: str, body: dict[str, Any]) -> Result:
        return self._put(f"/networks/{_seg(network_id)}/switch/stormControl", body)


class AdministeredAPI(_EndpointGroup):
    def get_administered_identities_me(self) -> Result:
        return self._get("/administered/identities/me")


class DashboardAPI:
    """Dashboard API client grouping endpoints the way the Dashboard docs do.

    Usage::

        with DashboardAPI.from_config(ClientConfiguration(api_key="...")) as api:
            orgs, _ = api.organizations.get_organizations()
    """

    def __init__(self, transport: BaseTransport):
        self.transport = transport
        self.organizations = OrganizationsAPI(transport)
        self.networks = NetworksAPI(transport)
        self.devices = DevicesAPI(transport)
        self.appliance = ApplianceAPI(transport)
        self.switch = SwitchAPI(transport)
        self.administered = AdministeredAPI(transport)

    @classmethod
    def from_config(cls, config: ClientConfiguration) -> DashboardAPI:
        transport = DashboardTransport(config)
        transport.connect()
        return cls(transport)

    def close(self) -> None:
        self.transport.disconnect()

    def __enter__(self) -> DashboardAPI:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
