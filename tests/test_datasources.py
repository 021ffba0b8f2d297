"""Tests for data sources."""

from __future__ import annotations

from merakiprov.datasources.administered import AdministeredIdentitiesMeDataSource
from merakiprov.datasources.devices import DevicesSwitchPortsStatusesDataSource
from merakiprov.datasources.networks import (
    APPLIANCE_VLANS_SETTINGS_SCHEMA,
    NetworkDevicesDataSource,
    NetworksApplianceFirewallL3FirewallRulesDataSource,
    NetworksApplianceVlansDataSource,
    NetworksSwitchQosRulesDataSource,
)
from merakiprov.datasources.organizations import (
    OrganizationsAdminsDataSource,
    OrganizationsDataSource,
    OrganizationsNetworksDataSource,
)
from merakiprov.exceptions import APIError


class TestDataSourceSchemas:
    """Test the data-source schema conversions."""

    def test_object_schema_keeps_only_arguments_settable(self):
        attrs = APPLIANCE_VLANS_SETTINGS_SCHEMA.attributes
        assert attrs["network_id"].required
        assert attrs["vlans_enabled"].computed_only
        assert attrs["id"].computed_only

    def test_list_items_are_computed(self):
        items = OrganizationsAdminsDataSource.schema().attributes["list"].attributes
        assert "organization_id" not in items
        assert all(attr.computed_only for attr in items.values())
        assert items["tags"].attributes["tag"].computed_only


class TestOrganizationDataSources:
    """Test meraki_organizations, meraki_organizations_networks and meraki_organizations_admins."""

    def test_organizations_flatten_nested_fields(self, configured, mock_client, ok, diags):
        mock_client.organizations.get_organizations.return_value = ok(
            [
                {
                    "id": "O_1",
                    "name": "acme",
                    "url": "https://n1.meraki.com/o/acme",
                    "api": {"enabled": True},
                    "licensing": {"model": "co-term"},
                    "cloud": {"region": {"name": "North America"}},
                }
            ]
        )
        model = configured(OrganizationsDataSource).read({}, diags)
        assert model["id"] == "meraki_organizations"
        assert model["list"] == [
            {
                "organization_id": "O_1",
                "name": "acme",
                "url": "https://n1.meraki.com/o/acme",
                "api_enabled": True,
                "licensing_model": "co-term",
                "cloud_region_name": "North America",
            }
        ]

    def test_networks_query_parameters(self, configured, mock_client, ok, diags):
        """Optional filters become query parameters next to the page size."""
        mock_client.organizations.get_organization_networks.return_value = ok(
            [{"id": "L_1", "organizationId": "O_1", "name": "lab", "productTypes": ["switch"], "tags": ["a"]}]
        )
        config = {"organization_id": "O_1", "tags": ["a"], "is_bound_to_config_template": False}
        model = configured(OrganizationsNetworksDataSource).read(config, diags)

        mock_client.organizations.get_organization_networks.assert_called_once_with(
            "O_1", {"perPage": 100000, "isBoundToConfigTemplate": "false", "tags[]": ["a"]}
        )
        assert model["id"] == "O_1"
        assert model["list"][0]["network_id"] == "L_1"
        assert model["list"][0]["organization_id"] == "O_1"
        assert model["tags"] == ["a"]

    def test_read_failure(self, configured, mock_client, diags):
        mock_client.organizations.get_organization_admins.side_effect = APIError("forbidden", status_code=403)
        assert configured(OrganizationsAdminsDataSource).read({"organization_id": "O_1"}, diags) is None
        assert diags.errors()[0].summary == "HTTP Client Failure: read meraki_organizations_admins"


class TestNetworkDataSources:
    """Test the network, appliance and switch data sources."""

    def test_network_devices(self, configured, mock_client, ok, diags):
        mock_client.networks.get_network_devices.return_value = ok(
            [{"serial": "Q2XX", "name": "core", "model": "MS120-8", "lat": 52, "networkId": "N_1"}]
        )
        model = configured(NetworkDevicesDataSource).read({"network_id": "N_1"}, diags)
        device = model["list"][0]
        assert device["serial"] == "Q2XX"
        assert device["lat"] == 52.0
        assert "move_map_marker" not in device

    def test_vlans_list(self, configured, mock_client, ok, diags):
        mock_client.appliance.get_network_appliance_vlans.return_value = ok(
            [{"id": 10, "name": "lan", "subnet": "10.0.10.0/24"}, {"id": 20, "name": "guest"}]
        )
        model = configured(NetworksApplianceVlansDataSource).read({"network_id": "N_1"}, diags)
        assert [v["vlan_id"] for v in model["list"]] == [10, 20]
        assert model["list"][1]["subnet"] is None

    def test_l3_rules_include_default_rule(self, configured, mock_client, ok, diags):
        """Unlike the resource, the data source reports the trailing default rule."""
        mock_client.appliance.get_network_appliance_firewall_l3_firewall_rules.return_value = ok(
            {
                "rules": [
                    {"comment": "dns", "policy": "allow", "protocol": "udp", "destPort": "53", "srcCidr": "Any", "destCidr": "Any"},
                    {"comment": "Default rule", "policy": "allow", "protocol": "Any", "srcCidr": "Any", "destCidr": "Any"},
                ]
            }
        )
        model = configured(NetworksApplianceFirewallL3FirewallRulesDataSource).read({"network_id": "N_1"}, diags)
        assert [r["comment"] for r in model["rules"]] == ["dns", "Default rule"]
        assert model["network_id"] == "N_1"
        assert model["id"] == "N_1"

    def test_qos_rules(self, configured, mock_client, ok, diags):
        mock_client.switch.get_network_switch_qos_rules.return_value = ok([{"id": "7", "vlan": 100, "dscp": -1}])
        model = configured(NetworksSwitchQosRulesDataSource).read({"network_id": "N_1"}, diags)
        assert model["list"] == [
            {
                "qos_rule_id": "7",
                "vlan": 100,
                "protocol": None,
                "src_port": None,
                "src_port_range": None,
                "dst_port": None,
                "dst_port_range": None,
                "dscp": -1,
            }
        ]


class TestSwitchPortsStatusesDataSource:
    """Test meraki_devices_switch_ports_statuses."""

    def test_timespan_is_passed_as_query(self, configured, mock_client, ok, diags):
        mock_client.switch.get_device_switch_ports_statuses.return_value = ok(
            [
                {
                    "portId": "1",
                    "enabled": True,
                    "status": "Connected",
                    "isUplink": False,
                    "errors": [],
                    "warnings": ["SecurePort authentication in progress"],
                    "speed": "1 Gbps",
                    "duplex": "full",
                    "usageInKb": {"total": 40867.0, "sent": 23008.0, "recv": 17859.0},
                    "trafficInKbps": {"total": 2.2, "sent": 1.2, "recv": 1.0},
                    "lldp": {"systemName": "MS120", "portId": "port 2"},
                }
            ]
        )
        config = {"serial": "Q2XX", "timespan": 3600.0}
        model = configured(DevicesSwitchPortsStatusesDataSource).read(config, diags)

        mock_client.switch.get_device_switch_ports_statuses.assert_called_once_with("Q2XX", {"timespan": 3600.0})
        port = model["list"][0]
        assert port["usage_in_kb"] == {"total": 40867, "sent": 23008, "recv": 17859}
        assert port["traffic_in_kbps"]["total"] == 2.2
        assert port["lldp"]["system_name"] == "MS120"
        assert port["cdp"] is None
        assert model["id"] == "Q2XX"

    def test_without_filters(self, configured, mock_client, ok, diags):
        mock_client.switch.get_device_switch_ports_statuses.return_value = ok([])
        model = configured(DevicesSwitchPortsStatusesDataSource).read({"serial": "Q2XX"}, diags)
        mock_client.switch.get_device_switch_ports_statuses.assert_called_once_with("Q2XX", {})
        assert model["list"] == []


class TestIdentitiesMeDataSource:
    """Test meraki_administered_identities_me."""

    def test_nested_authentication(self, configured, mock_client, ok, diags):
        mock_client.administered.get_administered_identities_me.return_value = ok(
            {
                "name": "Miles Meraki",
                "email": "miles@meraki.com",
                "lastUsedDashboardAt": "2018-02-11T00:00:00.090210Z",
                "authentication": {
                    "mode": "email",
                    "api": {"key": {"created": True}},
                    "twoFactor": {"enabled": False},
                    "saml": {"enabled": False},
                },
            }
        )
        model = configured(AdministeredIdentitiesMeDataSource).read({}, diags)
        assert model["email"] == "miles@meraki.com"
        assert model["authentication"]["api"]["key"]["created"] is True
        assert model["authentication"]["two_factor"]["enabled"] is False
        assert model["id"] == "meraki_administered_identities_me"


class TestUnconfiguredDataSource:
    """Test reads on a data source that never received a client."""

    def test_read_without_client(self, diags):
        assert OrganizationsDataSource().read({}, diags) is None
        assert diags.errors()[0].summary == "Unconfigured API Client"
