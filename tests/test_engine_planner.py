"""Tests for plan computation."""

import pytest

from merakiprov.engine.config import DATA, MANAGED, Address, parse_config
from merakiprov.engine.planner import Action, Plan, Planner, ResourceChange, plan_resource
from merakiprov.engine.state import ResourceInstance, StateFile
from merakiprov.exceptions import APIError, NotFoundError
from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.planmodifiers import requires_replace, use_state_for_unknown
from merakiprov.framework.schema import Int64Attribute, Schema, SingleNestedAttribute, StringAttribute
from merakiprov.framework.values import UNKNOWN

SCHEMA = Schema(
    attributes={
        "id": StringAttribute(computed=True, plan_modifiers=[use_state_for_unknown()]),
        "name": StringAttribute(required=True),
        "region": StringAttribute(optional=True, plan_modifiers=[requires_replace()]),
        "size": Int64Attribute(optional=True, computed=True, default=10),
        "status": StringAttribute(computed=True),
        "options": SingleNestedAttribute(
            optional=True,
            attributes={
                "mode": StringAttribute(optional=True),
                "applied_at": StringAttribute(computed=True),
            },
        ),
    }
)

PRIOR = {"id": "x", "name": "a", "region": "eu", "size": 10, "status": "up", "options": None}

NETWORK = Address(MANAGED, "meraki_network", "lab")
SYSLOG = Address(MANAGED, "meraki_networks_syslog_servers", "lab")
ORGS = Address(DATA, "meraki_organizations", "all")


class TestPlanResource:
    """Test plan_resource classification and planned values."""

    def test_create(self):
        """Computed attributes are unknown on create, defaults are filled in."""
        action, planned, replace_paths = plan_resource(SCHEMA, {"name": "a", "options": {"mode": "fast"}}, None)
        assert action == Action.CREATE
        assert planned == {
            "id": UNKNOWN,
            "name": "a",
            "region": None,
            "size": 10,
            "status": UNKNOWN,
            "options": {"mode": "fast", "applied_at": UNKNOWN},
        }
        assert replace_paths == []

    def test_no_changes(self):
        action, planned, _ = plan_resource(SCHEMA, {"name": "a", "region": "eu"}, dict(PRIOR))
        assert action == Action.NOOP
        assert planned == PRIOR

    def test_update_in_place(self):
        """Computed values may change on update, except those kept from state."""
        action, planned, replace_paths = plan_resource(SCHEMA, {"name": "b", "region": "eu"}, dict(PRIOR))
        assert action == Action.UPDATE
        assert planned["name"] == "b"
        assert planned["id"] == "x"
        assert planned["status"] is UNKNOWN
        assert replace_paths == []

    def test_replace(self):
        action, planned, replace_paths = plan_resource(SCHEMA, {"name": "a", "region": "us"}, dict(PRIOR))
        assert action == Action.REPLACE
        assert replace_paths == ["region"]
        assert planned["id"] is UNKNOWN
        assert planned["region"] == "us"

    def test_unknown_config_does_not_force_replace(self):
        action, planned, replace_paths = plan_resource(SCHEMA, {"name": "b", "region": UNKNOWN}, dict(PRIOR))
        assert action == Action.UPDATE
        assert planned["region"] is UNKNOWN
        assert replace_paths == []


class TestPlan:
    """Test Plan bookkeeping."""

    def test_summary_counts_replace_twice(self):
        plan = Plan(
            changes=[
                ResourceChange(NETWORK, Action.CREATE),
                ResourceChange(SYSLOG, Action.REPLACE),
                ResourceChange(Address(MANAGED, "meraki_devices", "core"), Action.NOOP),
                ResourceChange(ORGS, Action.READ),
            ]
        )
        assert plan.summary() == {"add": 2, "change": 0, "destroy": 1}
        assert len(plan.pending()) == 3
        assert plan.has_changes()
        assert plan.get(SYSLOG).action == Action.REPLACE

    def test_reads_alone_are_no_changes(self):
        assert not Plan(changes=[ResourceChange(ORGS, Action.READ)]).has_changes()


@pytest.fixture()
def workspace_config():
    return parse_config(
        {
            "resource": {
                "meraki_networks_syslog_servers": {
                    "lab": {
                        "network_id": "${meraki_network.lab.network_id}",
                        "servers": [{"host": "10.0.0.5", "port": 514, "roles": ["Flows"]}],
                    }
                },
                "meraki_network": {
                    "lab": {
                        "organization_id": "${data.meraki_organizations.all.list.0.organization_id}",
                        "name": "lab",
                        "product_types": ["switch"],
                    }
                },
            },
            "data": {"meraki_organizations": {"all": {}}},
        }
    )


class TestPlanner:
    """Test Planner against a mocked Dashboard client."""

    def test_plan_from_empty_state(self, provider, mock_client, ok, workspace_config):
        """Data sources are read at plan time and feed the resources that reference them."""
        mock_client.organizations.get_organizations.return_value = ok([{"id": "O_1", "name": "acme"}])
        diags = Diagnostics()
        plan = Planner(provider, workspace_config, StateFile()).plan(diags)

        assert not diags.has_error()
        assert [(c.address, c.action) for c in plan.changes] == [(NETWORK, Action.CREATE), (SYSLOG, Action.CREATE)]
        network = plan.get(NETWORK)
        assert network.after["organization_id"] == "O_1"
        assert network.after["network_id"] is UNKNOWN
        assert network.dependencies == [ORGS]
        assert plan.get(SYSLOG).after["network_id"] is UNKNOWN
        assert plan.data[ORGS]["list"][0]["organization_id"] == "O_1"

    def test_deferred_data_source(self, provider):
        """A data source whose arguments are not known yet is read during apply."""
        config = parse_config(
            {
                "resource": {"meraki_network": {"lab": {"organization_id": "O_1", "name": "lab", "product_types": ["switch"]}}},
                "data": {"meraki_networks_appliance_vlans": {"lab": {"network_id": "${meraki_network.lab.network_id}"}}},
            }
        )
        plan = Planner(provider, config, StateFile()).plan(Diagnostics())
        read = plan.get(Address(DATA, "meraki_networks_appliance_vlans", "lab"))
        assert read.action == Action.READ
        assert read.after["network_id"] is UNKNOWN
        assert read.after["list"] is UNKNOWN
        provider.client.appliance.get_network_appliance_vlans.assert_not_called()

    def test_orphans_are_deleted(self, provider):
        state = StateFile()
        state.put(ResourceInstance(type="meraki_network", name="old", attributes={"network_id": "L_0"}))
        plan = Planner(provider, parse_config({}), state).plan(Diagnostics(), refresh=False)
        assert [(str(c.address), c.action) for c in plan.changes] == [("meraki_network.old", Action.DELETE)]
        assert plan.changes[0].before == {"network_id": "L_0"}

    def test_refresh_drops_vanished_instances(self, provider, mock_client):
        mock_client.networks.get_network.side_effect = NotFoundError("gone", status_code=404)
        state = StateFile()
        state.put(
            ResourceInstance(
                type="meraki_network", name="old", attributes={"network_id": "L_0", "organization_id": "O_1"}
            )
        )
        diags = Diagnostics()
        plan = Planner(provider, parse_config({}), state).plan(diags)
        assert not diags.has_error()
        assert state.resources == []
        assert plan.changes == []

    def test_refresh_error_stops_plan(self, provider, mock_client):
        mock_client.networks.get_network.side_effect = APIError("boom", status_code=500)
        state = StateFile()
        state.put(ResourceInstance(type="meraki_network", name="old", attributes={"network_id": "L_0"}))
        diags = Diagnostics()
        plan = Planner(provider, parse_config({}), state).plan(diags)
        assert diags.has_error()
        assert plan.changes == []
        assert len(state.resources) == 1
