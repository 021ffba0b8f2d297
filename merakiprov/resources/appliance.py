"""Security appliance resources: VLANs, L3 firewall, static routes, settings."""

from __future__ import annotations

from typing import Any

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.mapping import extract_path
from merakiprov.framework.planmodifiers import requires_replace, use_state_for_unknown
from merakiprov.framework.resource import Model
from merakiprov.framework.schema import (
    BoolAttribute,
    Int64Attribute,
    ListAttribute,
    ListNestedAttribute,
    MapNestedAttribute,
    Schema,
    SetAttribute,
    SingleNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import between, one_of
from merakiprov.framework.values import is_known
from merakiprov.registry import register_resource
from merakiprov.resources.base import CollectionResource, SettingsResource, id_attribute, network_id_attribute

DHCP_HANDLING = ("Run a DHCP server", "Relay DHCP to another server", "Do not respond to DHCP requests")
DHCP_LEASE_TIMES = ("30 minutes", "1 hour", "4 hours", "12 hours", "1 day", "1 week")
DEFAULT_RULE_COMMENT = "Default rule"


def _reserved_ip_ranges() -> ListNestedAttribute:
    return ListNestedAttribute(
        optional=True,
        computed=True,
        api_name="reservedIpRanges",
        description="The DHCP reserved IP ranges",
        attributes={
            "start": StringAttribute(required=True, api_name="start", description="The first IP in the reserved range"),
            "end": StringAttribute(required=True, api_name="end", description="The last IP in the reserved range"),
            "comment": StringAttribute(required=True, api_name="comment", description="A text comment for the reserved range"),
        },
    )


def _fixed_ip_assignments() -> MapNestedAttribute:
    return MapNestedAttribute(
        optional=True,
        computed=True,
        api_name="fixedIpAssignments",
        description="The DHCP fixed IP assignments, keyed by client MAC address",
        attributes={
            "ip": StringAttribute(required=True, api_name="ip", description="The IP address to assign to the client"),
            "name": StringAttribute(optional=True, computed=True, api_name="name", description="The client name"),
        },
    )


# ── meraki_networks_appliance_vlan ────────────────────────────────────

VLAN_SCHEMA = Schema(
    description="Manage the VLANs for an MX network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "vlan_id": Int64Attribute(
            required=True,
            api_name="id",
            description="The VLAN ID of the new VLAN (must be between 1 and 4094)",
            validators=[between(1, 4094)],
            plan_modifiers=[requires_replace()],
        ),
        "interface_id": StringAttribute(
            computed=True,
            api_name="interfaceId",
            description="The interface ID of the VLAN",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "name": StringAttribute(required=True, api_name="name", description="The name of the new VLAN"),
        "subnet": StringAttribute(optional=True, computed=True, api_name="subnet", description="The subnet of the VLAN"),
        "appliance_ip": StringAttribute(
            optional=True, computed=True, api_name="applianceIp", description="The local IP of the appliance on the VLAN"
        ),
        "group_policy_id": StringAttribute(
            optional=True, computed=True, api_name="groupPolicyId", description="The id of the desired group policy to apply to the VLAN"
        ),
        "template_vlan_type": StringAttribute(
            optional=True,
            computed=True,
            api_name="templateVlanType",
            description="Type of subnetting of the VLAN. Applicable only for template network.",
            validators=[one_of("same", "unique")],
        ),
        "cidr": StringAttribute(
            optional=True, computed=True, api_name="cidr", description="CIDR of the pool of subnets. Applicable only for template network."
        ),
        "mask": Int64Attribute(
            optional=True, computed=True, api_name="mask", description="Mask used for the subnet of all bound to the template networks"
        ),
        "dhcp_relay_server_ips": ListAttribute(
            optional=True, computed=True, api_name="dhcpRelayServerIps", description="The IPs of the DHCP servers that DHCP requests should be relayed to"
        ),
        "dhcp_handling": StringAttribute(
            optional=True,
            computed=True,
            api_name="dhcpHandling",
            description="The appliance's handling of DHCP requests on this VLAN",
            validators=[one_of(*DHCP_HANDLING)],
        ),
        "dhcp_lease_time": StringAttribute(
            optional=True,
            computed=True,
            api_name="dhcpLeaseTime",
            description="The term of DHCP leases if the appliance is running a DHCP server on this VLAN",
            validators=[one_of(*DHCP_LEASE_TIMES)],
        ),
        "dhcp_boot_options_enabled": BoolAttribute(
            optional=True, computed=True, api_name="dhcpBootOptionsEnabled", description="Use DHCP boot options specified in other properties"
        ),
        "dhcp_boot_next_server": StringAttribute(
            optional=True, computed=True, api_name="dhcpBootNextServer", description="DHCP boot option to direct boot clients to the server to load the boot file from"
        ),
        "dhcp_boot_filename": StringAttribute(
            optional=True, computed=True, api_name="dhcpBootFilename", description="DHCP boot option for boot filename"
        ),
        "fixed_ip_assignments": _fixed_ip_assignments(),
        "reserved_ip_ranges": _reserved_ip_ranges(),
        "dns_nameservers": StringAttribute(
            optional=True,
            computed=True,
            api_name="dnsNameservers",
            description="The DNS nameservers used for DHCP responses, either 'upstream_dns', 'google_dns', 'opendns', or a newline separated string of IP addresses or domain names",
        ),
        "dhcp_options": ListNestedAttribute(
            optional=True,
            computed=True,
            api_name="dhcpOptions",
            description="The list of DHCP options that will be included in DHCP responses",
            attributes={
                "code": StringAttribute(required=True, api_name="code", description="The code for the DHCP option. This should be an integer between 2 and 254."),
                "type": StringAttribute(
                    required=True,
                    api_name="type",
                    description="The type for the DHCP option",
                    validators=[one_of("text", "ip", "hex", "integer")],
                ),
                "value": StringAttribute(required=True, api_name="value", description="The value for the DHCP option"),
            },
        ),
        "vpn_nat_subnet": StringAttribute(
            optional=True, computed=True, api_name="vpnNatSubnet", description="The translated VPN subnet if VPN and VPN subnet translation are enabled on the VLAN"
        ),
        "mandatory_dhcp": SingleNestedAttribute(
            optional=True,
            computed=True,
            api_name="mandatoryDhcp",
            description="Mandatory DHCP will enforce that clients connecting to this VLAN must use the IP address assigned by the DHCP server",
            attributes={
                "enabled": BoolAttribute(optional=True, computed=True, api_name="enabled", description="Enable Mandatory DHCP on VLAN"),
            },
        ),
        "ipv6": SingleNestedAttribute(
            optional=True,
            computed=True,
            api_name="ipv6",
            description="IPv6 configuration on the VLAN",
            attributes={
                "enabled": BoolAttribute(optional=True, computed=True, api_name="enabled", description="Enable IPv6 on VLAN"),
                "prefix_assignments": ListNestedAttribute(
                    optional=True,
                    computed=True,
                    api_name="prefixAssignments",
                    description="Prefix assignments on the VLAN",
                    attributes={
                        "autonomous": BoolAttribute(
                            optional=True, computed=True, api_name="autonomous", description="Auto assign a /64 prefix from the origin to the VLAN"
                        ),
                        "static_prefix": StringAttribute(
                            optional=True, computed=True, api_name="staticPrefix", description="Manual configuration of a /64 prefix on the VLAN"
                        ),
                        "static_appliance_ip6": StringAttribute(
                            optional=True, computed=True, api_name="staticApplianceIp6", description="Manual configuration of the IPv6 Appliance IP"
                        ),
                        "origin": SingleNestedAttribute(
                            optional=True,
                            computed=True,
                            api_name="origin",
                            description="The origin of the prefix",
                            attributes={
                                "type": StringAttribute(
                                    optional=True,
                                    computed=True,
                                    api_name="type",
                                    description="Type of the origin",
                                    validators=[one_of("independent", "internet")],
                                ),
                                "interfaces": SetAttribute(
                                    optional=True, computed=True, api_name="interfaces", description="Interfaces associated with the prefix"
                                ),
                            },
                        ),
                    },
                ),
            },
        ),
    },
)

# POST only accepts these; everything else goes through the follow-up PUT.
VLAN_CREATE_FIELDS = (
    "id",
    "name",
    "subnet",
    "applianceIp",
    "groupPolicyId",
    "templateVlanType",
    "cidr",
    "mask",
    "ipv6",
    "mandatoryDhcp",
)


@register_resource("meraki_networks_appliance_vlan")
class NetworksApplianceVlanResource(CollectionResource):
    id_key = "vlan_id"
    group = "appliance"
    create_operation = "create_network_appliance_vlan"
    get_operation = "get_network_appliance_vlan"
    update_operation = "update_network_appliance_vlan"
    delete_operation = "delete_network_appliance_vlan"

    @classmethod
    def schema(cls) -> Schema:
        return VLAN_SCHEMA

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        model = super().from_response(model, data, overwrite)
        model["id"] = f"{model['network_id']},{model['vlan_id']}"
        return model

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, "network_id", "vlan_id"):
            return None
        payload = self.to_payload(plan)
        create_payload = {k: v for k, v in payload.items() if k in VLAN_CREATE_FIELDS}
        create_payload["id"] = str(plan["vlan_id"])
        self.log.debug(f"create VLAN {plan['vlan_id']} in {plan['network_id']}")
        ok, data = self._call(
            diags,
            "create appliance VLAN",
            self.client.appliance.create_network_appliance_vlan,
            plan["network_id"],
            create_payload,
            expected=201,
        )
        if not ok:
            return None
        model = self.from_response(plan, data, overwrite=False)

        update_payload = {k: v for k, v in payload.items() if k != "id"}
        ok, data = self._call(
            diags,
            "update appliance VLAN after create",
            self.client.appliance.update_network_appliance_vlan,
            plan["network_id"],
            str(plan["vlan_id"]),
            update_payload,
        )
        if not ok:
            # the VLAN exists; keep it in state so the next plan can fix it
            return model
        return self.from_response(model, data, overwrite=False)

    def to_payload(self, model: Model) -> dict[str, Any]:
        payload = super().to_payload(model)
        if "id" in payload:
            payload["id"] = str(payload["id"])
        return payload

    def update(self, plan: Model, state: Model, diags: Diagnostics) -> Model | None:
        if not self._require(plan, diags, "network_id", "vlan_id"):
            return None
        payload = self.to_payload(plan)
        payload.pop("id", None)
        ok, data = self._call(
            diags,
            "update appliance VLAN",
            self.client.appliance.update_network_appliance_vlan,
            plan["network_id"],
            str(plan["vlan_id"]),
            payload,
        )
        if not ok:
            return None
        return self.from_response(plan, data, overwrite=False)

    def import_state(self, import_id: str, diags: Diagnostics) -> Model | None:
        model = super().import_state(import_id, diags)
        if model is None:
            return None
        try:
            model["vlan_id"] = int(model["vlan_id"])
        except ValueError:
            diags.add_error("Unexpected Import Identifier", f"VLAN id must be an integer, got {model['vlan_id']!r}")
            return None
        model["id"] = import_id
        return model


# ── meraki_networks_appliance_vlans_settings ──────────────────────────

VLANS_SETTINGS_SCHEMA = Schema(
    description="Enable/Disable VLANs for the given network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "vlans_enabled": BoolAttribute(
            optional=True, computed=True, api_name="vlansEnabled", description="Boolean indicating whether to enable (true) or disable (false) VLANs for the network"
        ),
    },
)


@register_resource("meraki_networks_appliance_vlans_settings")
class NetworksApplianceVlansSettingsResource(SettingsResource):
    group = "appliance"
    get_operation = "get_network_appliance_vlans_settings"
    update_operation = "update_network_appliance_vlans_settings"

    @classmethod
    def schema(cls) -> Schema:
        return VLANS_SETTINGS_SCHEMA


# ── meraki_networks_appliance_firewall_l3_firewall_rules ──────────────

L3_FIREWALL_RULES_SCHEMA = Schema(
    description="Manage the L3 firewall rules for an MX network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "syslog_default_rule": BoolAttribute(
            optional=True,
            computed=True,
            api_name="syslogDefaultRule",
            description="Log the special default rule (boolean value - enable only if you've configured a syslog server)",
        ),
        "rules": ListNestedAttribute(
            optional=True,
            computed=True,
            api_name="rules",
            description="An ordered array of the firewall rules (not including the default rule)",
            attributes={
                "comment": StringAttribute(optional=True, computed=True, api_name="comment", description="Description of the rule"),
                "policy": StringAttribute(
                    required=True, api_name="policy", description="'allow' or 'deny' traffic specified by this rule", validators=[one_of("allow", "deny")]
                ),
                "protocol": StringAttribute(
                    required=True,
                    api_name="protocol",
                    description="The type of protocol",
                    validators=[one_of("tcp", "udp", "icmp", "icmp6", "any")],
                ),
                "src_port": StringAttribute(
                    optional=True, computed=True, api_name="srcPort", description="Comma-separated list of source port(s), or 'any'"
                ),
                "src_cidr": StringAttribute(
                    required=True, api_name="srcCidr", description="Comma-separated list of source IP address(es), or 'any'"
                ),
                "dest_port": StringAttribute(
                    optional=True, computed=True, api_name="destPort", description="Comma-separated list of destination port(s), or 'any'"
                ),
                "dest_cidr": StringAttribute(
                    required=True, api_name="destCidr", description="Comma-separated list of destination IP address(es), or 'any'"
                ),
                "syslog_enabled": BoolAttribute(
                    optional=True, computed=True, api_name="syslogEnabled", description="Log this rule to syslog"
                ),
            },
        ),
    },
)


def strip_default_rule(data: Any) -> Any:
    """Drop the API's trailing implicit "Default rule" from a rules response."""
    if not isinstance(data, dict) or not isinstance(data.get("rules"), list):
        return data
    rules = [r for r in data["rules"] if r.get("comment") != DEFAULT_RULE_COMMENT]
    return {**data, "rules": rules}


@register_resource("meraki_networks_appliance_firewall_l3_firewall_rules")
class NetworksApplianceFirewallL3FirewallRulesResource(SettingsResource):
    group = "appliance"
    get_operation = "get_network_appliance_firewall_l3_firewall_rules"
    update_operation = "update_network_appliance_firewall_l3_firewall_rules"

    @classmethod
    def schema(cls) -> Schema:
        return L3_FIREWALL_RULES_SCHEMA

    def to_payload(self, model: Model) -> dict[str, Any]:
        return strip_default_rule(super().to_payload(model))

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        return super().from_response(model, strip_default_rule(data), overwrite)

    def reset_payload(self, state: Model) -> dict[str, Any] | None:
        return {"rules": []}


# ── meraki_networks_appliance_static_routes ───────────────────────────

STATIC_ROUTE_SCHEMA = Schema(
    description="Manage the static routes for an MX or teleworker network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "static_route_id": StringAttribute(
            computed=True,
            api_name="id",
            description="The ID of the static route",
            plan_modifiers=[use_state_for_unknown()],
        ),
        "name": StringAttribute(required=True, api_name="name", description="The name of the new static route"),
        "subnet": StringAttribute(required=True, api_name="subnet", description="The subnet of the static route"),
        "gateway_ip": StringAttribute(
            optional=True, computed=True, api_name="gatewayIp", description="The gateway IP (next hop) of the static route"
        ),
        "gateway_vlan_id": StringAttribute(
            optional=True, computed=True, api_name="gatewayVlanId", description="The gateway IP (next hop) VLAN ID of the static route"
        ),
        "enabled": BoolAttribute(optional=True, computed=True, api_name="enabled", description="Whether the route is enabled or not"),
        "fixed_ip_assignments": _fixed_ip_assignments(),
        "reserved_ip_ranges": _reserved_ip_ranges(),
    },
)

STATIC_ROUTE_CREATE_FIELDS = ("name", "subnet", "gatewayIp", "gatewayVlanId")


@register_resource("meraki_networks_appliance_static_routes")
class NetworksApplianceStaticRoutesResource(CollectionResource):
    id_key = "static_route_id"
    group = "appliance"
    create_operation = "create_network_appliance_static_route"
    get_operation = "get_network_appliance_static_route"
    update_operation = "update_network_appliance_static_route"
    delete_operation = "delete_network_appliance_static_route"

    @classmethod
    def schema(cls) -> Schema:
        return STATIC_ROUTE_SCHEMA

    def create(self, plan: Model, diags: Diagnostics) -> Model | None:
        payload = super().to_payload(plan)
        extra = {k: v for k, v in payload.items() if k not in STATIC_ROUTE_CREATE_FIELDS}
        model = super().create(plan, diags)
        if model is None or not extra:
            return model
        return super().update(model, model, diags) or model

    def to_payload(self, model: Model) -> dict[str, Any]:
        payload = super().to_payload(model)
        if not is_known(model.get(self.id_key)):
            return {k: v for k, v in payload.items() if k in STATIC_ROUTE_CREATE_FIELDS}
        return payload


# ── meraki_networks_appliance_settings ────────────────────────────────

APPLIANCE_SETTINGS_SCHEMA = Schema(
    description="Manage the appliance settings for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "client_tracking_method": StringAttribute(
            optional=True,
            computed=True,
            api_name="clientTrackingMethod",
            description="Client tracking method of a network",
            validators=[one_of("IP address", "MAC address", "Unique client identifier")],
        ),
        "deployment_mode": StringAttribute(
            optional=True,
            computed=True,
            api_name="deploymentMode",
            description="Deployment mode of a network",
            validators=[one_of("routed", "passthrough")],
        ),
        "dynamic_dns_prefix": StringAttribute(
            optional=True, computed=True, description="Dynamic DNS url prefix. DDNS must be enabled to update"
        ),
        "dynamic_dns_enabled": BoolAttribute(optional=True, computed=True, description="Dynamic DNS enabled"),
        "dynamic_dns_url": StringAttribute(computed=True, description="Dynamic DNS url. DDNS must be enabled to update"),
    },
)


@register_resource("meraki_networks_appliance_settings")
class NetworksApplianceSettingsResource(SettingsResource):
    group = "appliance"
    get_operation = "get_network_appliance_settings"
    update_operation = "update_network_appliance_settings"

    @classmethod
    def schema(cls) -> Schema:
        return APPLIANCE_SETTINGS_SCHEMA

    def to_payload(self, model: Model) -> dict[str, Any]:
        payload = super().to_payload(model)
        dynamic_dns = {}
        if is_known(model.get("dynamic_dns_prefix")):
            dynamic_dns["prefix"] = model["dynamic_dns_prefix"]
        if is_known(model.get("dynamic_dns_enabled")):
            dynamic_dns["enabled"] = model["dynamic_dns_enabled"]
        if dynamic_dns:
            payload["dynamicDns"] = dynamic_dns
        return payload

    def from_response(self, model: Model, data: Any, overwrite: bool) -> Model:
        model = super().from_response(model, data, overwrite)
        derived = {
            "dynamic_dns_prefix": extract_path(data, "dynamicDns", "prefix"),
            "dynamic_dns_enabled": extract_path(data, "dynamicDns", "enabled"),
            "dynamic_dns_url": extract_path(data, "dynamicDns", "url"),
        }
        for name, value in derived.items():
            if overwrite or not is_known(model.get(name)):
                model[name] = value
        return model


# ── meraki_networks_appliance_firewall_settings ───────────────────────

FIREWALL_SETTINGS_SCHEMA = Schema(
    description="Manage the firewall settings for a network",
    attributes={
        "id": id_attribute(),
        "network_id": network_id_attribute(),
        "spoofing_protection": SingleNestedAttribute(
            optional=True,
            computed=True,
            api_name="spoofingProtection",
            description="Spoofing protection settings",
            attributes={
                "ip_source_guard": SingleNestedAttribute(
                    optional=True,
                    computed=True,
                    api_name="ipSourceGuard",
                    description="IP source address spoofing settings",
                    attributes={
                        "mode": StringAttribute(
                            optional=True,
                            computed=True,
                            api_name="mode",
                            description="Mode of protection",
                            validators=[one_of("block", "log")],
                        ),
                    },
                ),
            },
        ),
    },
)


@register_resource("meraki_networks_appliance_firewall_settings")
class NetworksApplianceFirewallSettingsResource(SettingsResource):
    group = "appliance"
    get_operation = "get_network_appliance_firewall_settings"
    update_operation = "update_network_appliance_firewall_settings"

    @classmethod
    def schema(cls) -> Schema:
        return FIREWALL_SETTINGS_SCHEMA
