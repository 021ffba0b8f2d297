"""Tests for organization-level resources."""

from __future__ import annotations

import pytest

from merakiprov.exceptions import APIError
from merakiprov.framework.values import UNKNOWN
from merakiprov.resources.organizations import (
    ADMIN_SCHEMA,
    ORGANIZATION_SCHEMA,
    ORGANIZATION_SNMP_SCHEMA,
    OrganizationResource,
    OrganizationsAdminResource,
    OrganizationsClaimResource,
    OrganizationsSnmpResource,
)

ORG_RESPONSE = {
    "id": "O_1",
    "name": "acme",
    "url": "https://n1.meraki.com/o/acme",
    "api": {"enabled": True},
    "management": {"details": [{"name": "MSP ID", "value": "123"}]},
    "cloud": {"region": {"name": "North America"}},
    "licensing": {"model": "co-term"},
}


def _planned(schema, **values):
    """Build a create-time plan: computed attributes unknown, the rest from ``values``."""
    model = {name: UNKNOWN for name, attr in schema.attributes.items() if attr.computed}
    model.update(values)
    return schema.normalize(model)


class TestOrganizationResource:
    """Test meraki_organization."""

    def test_create_flattens_nested_settings(self, configured, mock_client, ok, diags):
        """api and management details travel as nested JSON objects."""
        mock_client.organizations.create_organization.return_value = ok(ORG_RESPONSE, 201)
        plan = _planned(
            ORGANIZATION_SCHEMA,
            name="acme",
            api_enabled=True,
            management_details_name="MSP ID",
            management_details_value="123",
        )
        model = configured(OrganizationResource).create(plan, diags)

        assert not diags.has_error()
        mock_client.organizations.create_organization.assert_called_once_with(
            {
                "name": "acme",
                "api": {"enabled": True},
                "management": {"details": [{"name": "MSP ID", "value": "123"}]},
            }
        )
        assert model["organization_id"] == "O_1"
        assert model["id"] == "O_1"
        assert model["cloud_region_name"] == "North America"
        assert model["licensing_model"] == "co-term"

    def test_create_as_clone(self, configured, mock_client, ok, diags):
        """With clone_organization_id set the clone endpoint is used instead."""
        mock_client.organizations.clone_organization.return_value = ok(ORG_RESPONSE, 201)
        plan = _planned(ORGANIZATION_SCHEMA, name="acme", clone_organization_id="O_0")
        model = configured(OrganizationResource).create(plan, diags)

        mock_client.organizations.clone_organization.assert_called_once_with("O_0", {"name": "acme"})
        mock_client.organizations.create_organization.assert_not_called()
        mock_client.organizations.update_organization.assert_not_called()
        assert model["api_enabled"] is True

    def test_clone_kept_when_follow_up_update_fails(self, configured, mock_client, ok, diags):
        """The clone exists remotely, so it is returned together with the error."""
        mock_client.organizations.clone_organization.return_value = ok(ORG_RESPONSE, 201)
        mock_client.organizations.update_organization.side_effect = APIError("bad", status_code=400)
        plan = _planned(ORGANIZATION_SCHEMA, name="acme", clone_organization_id="O_0", api_enabled=False)
        model = configured(OrganizationResource).create(plan, diags)

        mock_client.organizations.update_organization.assert_called_once()
        assert diags.has_error()
        assert model is not None
        assert model["organization_id"] == "O_1"

    def test_read_and_delete(self, configured, mock_client, ok, diags):
        mock_client.organizations.get_organization.return_value = ok({**ORG_RESPONSE, "name": "renamed"})
        mock_client.organizations.delete_organization.return_value = ok(None, 204)
        resource = configured(OrganizationResource)
        state = resource.import_state("O_1", diags)

        model = resource.read(state, diags)
        resource.delete(model, diags)

        assert model["name"] == "renamed"
        assert model["management_details_value"] == "123"
        mock_client.organizations.delete_organization.assert_called_once_with("O_1")
        assert not diags.has_error()

    def test_delete_expects_no_content(self, configured, mock_client, ok, diags):
        mock_client.organizations.delete_organization.return_value = ok(None, 200)
        configured(OrganizationResource).delete({"organization_id": "O_1"}, diags)
        assert diags.errors()[0].summary == "Unexpected HTTP Response Status Code"


class TestOrganizationsAdminResource:
    """Test meraki_organizations_admin."""

    def test_create_sends_email(self, configured, mock_client, ok, diags):
        mock_client.organizations.create_organization_admin.return_value = ok(
            {"id": "212406", "name": "Jane", "email": "jane@example.com", "orgAccess": "full", "accountStatus": "ok"},
            201,
        )
        plan = _planned(ADMIN_SCHEMA, organization_id="O_1", name="Jane", email="jane@example.com", org_access="full")
        model = configured(OrganizationsAdminResource).create(plan, diags)

        _, payload = mock_client.organizations.create_organization_admin.call_args[0]
        assert payload == {"name": "Jane", "email": "jane@example.com", "orgAccess": "full"}
        assert model["admin_id"] == "212406"
        assert model["id"] == "212406"
        assert model["account_status"] == "ok"

    def test_read_matches_admin_in_list(self, configured, mock_client, ok, diags):
        """There is no single-admin GET; the list is searched by id."""
        mock_client.organizations.get_organization_admins.return_value = ok(
            [
                {"id": "1", "name": "Other", "email": "o@example.com", "orgAccess": "none"},
                {"id": "2", "name": "Jane", "email": "jane@example.com", "orgAccess": "read-only"},
            ]
        )
        state = ADMIN_SCHEMA.normalize({"organization_id": "O_1", "admin_id": "2", "name": "Jane"})
        model = configured(OrganizationsAdminResource).read(state, diags)
        assert model["org_access"] == "read-only"

    def test_read_removed_admin(self, configured, mock_client, ok, diags):
        mock_client.organizations.get_organization_admins.return_value = ok([{"id": "1"}])
        state = ADMIN_SCHEMA.normalize({"organization_id": "O_1", "admin_id": "2"})
        assert configured(OrganizationsAdminResource).read(state, diags) is None
        assert not diags.has_error()

    def test_update_omits_create_only_fields(self, configured, mock_client, ok, diags):
        mock_client.organizations.update_organization_admin.return_value = ok(
            {"id": "2", "name": "Janet", "email": "jane@example.com", "orgAccess": "full"}
        )
        plan = ADMIN_SCHEMA.normalize(
            {
                "organization_id": "O_1",
                "admin_id": "2",
                "name": "Janet",
                "email": "jane@example.com",
                "org_access": "full",
                "authentication_method": "Email",
            }
        )
        configured(OrganizationsAdminResource).update(plan, plan, diags)
        org_id, admin_id, payload = mock_client.organizations.update_organization_admin.call_args[0]
        assert (org_id, admin_id) == ("O_1", "2")
        assert payload == {"name": "Janet", "orgAccess": "full"}

    def test_import(self, configured, diags):
        model = configured(OrganizationsAdminResource).import_state("O_1,2", diags)
        assert model["organization_id"] == "O_1"
        assert model["admin_id"] == "2"
        assert model["id"] == "2"


class TestOrganizationsSnmpResource:
    """Test meraki_organizations_snmp."""

    def test_create_puts_settings_and_keeps_passwords(self, configured, mock_client, ok, diags):
        mock_client.organizations.update_organization_snmp.return_value = ok(
            {"v2cEnabled": False, "v3Enabled": True, "v3AuthMode": "SHA", "hostname": "snmp.meraki.com", "port": 16100}
        )
        plan = _planned(
            ORGANIZATION_SNMP_SCHEMA,
            organization_id="O_1",
            v2c_enabled=False,
            v3_enabled=True,
            v3_auth_mode="SHA",
            v3_auth_pass="authpass1",
        )
        model = configured(OrganizationsSnmpResource).create(plan, diags)

        _, payload = mock_client.organizations.update_organization_snmp.call_args[0]
        assert payload == {"v2cEnabled": False, "v3Enabled": True, "v3AuthMode": "SHA", "v3AuthPass": "authpass1"}
        assert model["v3_auth_pass"] == "authpass1"
        assert model["port"] == 16100
        assert model["id"] == "O_1"

    def test_delete_leaves_remote_settings(self, configured, mock_client, diags):
        configured(OrganizationsSnmpResource).delete({"organization_id": "O_1"}, diags)
        mock_client.organizations.update_organization_snmp.assert_not_called()


class TestOrganizationsClaimResource:
    """Test meraki_organizations_claim."""

    @pytest.fixture()
    def claim_plan(self):
        return {"id": UNKNOWN, "organization_id": "O_1", "serials": ["Q2XX"], "orders": UNKNOWN, "licences": UNKNOWN}

    def test_create_sends_only_known_lists(self, configured, mock_client, ok, diags, claim_plan):
        mock_client.organizations.claim_into_organization.return_value = ok(
            {"serials": ["Q2XX"], "orders": [], "licenses": []}
        )
        model = configured(OrganizationsClaimResource).create(claim_plan, diags)

        mock_client.organizations.claim_into_organization.assert_called_once_with("O_1", {"serials": ["Q2XX"]})
        assert model["orders"] == []
        assert model["licences"] == []
        assert model["id"] == "O_1"

    def test_read_and_delete_are_local(self, configured, mock_client, diags):
        """A claim cannot be read back or undone."""
        resource = configured(OrganizationsClaimResource)
        state = {"id": "O_1", "organization_id": "O_1", "serials": ["Q2XX"], "orders": [], "licences": []}
        assert resource.read(state, diags) == state
        resource.delete(state, diags)
        assert mock_client.organizations.method_calls == []
        assert not diags.has_error()
