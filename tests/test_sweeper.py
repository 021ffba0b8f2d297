"""Tests for the acceptance-test sweeper."""

from unittest.mock import MagicMock

import pytest

from merakiprov.exceptions import APIError, NotFoundError
from merakiprov.sweeper import NETWORK_DELETE_RETRIES, Sweeper, SweepReport


@pytest.fixture()
def sleep():
    return MagicMock()


@pytest.fixture()
def sweeper(mock_client, sleep):
    return Sweeper(mock_client, sleep=sleep)


class TestDeleteNetwork:
    """Test Sweeper.delete_network."""

    def test_success(self, sweeper, mock_client, ok, sleep):
        mock_client.networks.delete_network.return_value = ok(None, 204)
        assert sweeper.delete_network({"id": "L_1", "name": "test_acc_lab"})
        sleep.assert_not_called()

    def test_retries_with_growing_wait(self, sweeper, mock_client, ok, sleep):
        """A network still in use is retried, waiting one second longer each time."""
        mock_client.networks.delete_network.side_effect = [
            APIError("in use", status_code=400),
            ok(None, 400),
            ok(None, 204),
        ]
        assert sweeper.delete_network({"id": "L_1"})
        assert [c.args[0] for c in sleep.call_args_list] == [1, 2]

    def test_already_deleted_network(self, sweeper, mock_client, sleep):
        mock_client.networks.delete_network.side_effect = NotFoundError("gone", status_code=404)
        assert sweeper.delete_network({"id": "L_1"})
        mock_client.networks.delete_network.assert_called_once_with("L_1")
        sleep.assert_not_called()

    def test_gives_up(self, sweeper, mock_client, sleep):
        mock_client.networks.delete_network.side_effect = APIError("in use", status_code=400)
        assert not sweeper.delete_network({"id": "L_1"})
        assert mock_client.networks.delete_network.call_count == NETWORK_DELETE_RETRIES
        assert sleep.call_count == NETWORK_DELETE_RETRIES - 1


class TestSweep:
    """Test the per-organization sweeps."""

    def test_sweep_networks_matches_prefix(self, sweeper, mock_client, ok):
        mock_client.organizations.get_organization_networks.return_value = ok(
            [{"id": "L_1", "name": "test_acc_lab"}, {"id": "L_2", "name": "production"}]
        )
        mock_client.networks.delete_network.return_value = ok(None, 204)

        report = sweeper.sweep_networks("O_1")

        mock_client.organizations.get_organization_networks.assert_called_once_with("O_1", {"perPage": 100000})
        mock_client.networks.delete_network.assert_called_once_with("L_1")
        assert report.deleted == ["network test_acc_lab (L_1)"]
        assert report.failed == []

    def test_sweep_admins_by_email_or_name(self, sweeper, mock_client, ok):
        mock_client.organizations.get_organization_admins.return_value = ok(
            [
                {"id": "1", "name": "Jane", "email": "test_acc_jane@example.com"},
                {"id": "2", "name": "test_acc_bot", "email": "bot@example.com"},
                {"id": "3", "name": "Miles", "email": "miles@example.com"},
            ]
        )
        mock_client.organizations.delete_organization_admin.side_effect = [
            ok(None, 204),
            APIError("forbidden", status_code=403),
        ]

        report = sweeper.sweep_admins("O_1")

        assert report.deleted == ["admin test_acc_jane@example.com (1)"]
        assert report.failed == ["admin bot@example.com (2)"]

    def test_listing_failure_is_reported(self, sweeper, mock_client):
        mock_client.organizations.get_organization_admins.side_effect = APIError("boom", status_code=500)
        report = sweeper.sweep_admins("O_1")
        assert report.failed == ["organization O_1 admins"]

    def test_organizations_are_emptied_then_deleted(self, sweeper, mock_client, ok):
        mock_client.organizations.get_organizations.return_value = ok(
            [{"id": "O_9", "name": "test_acc_org"}, {"id": "O_1", "name": "acme"}]
        )
        mock_client.organizations.get_organization_networks.return_value = ok([])
        mock_client.organizations.get_organization_admins.return_value = ok([])
        mock_client.organizations.delete_organization.return_value = ok(None, 204)

        report = sweeper.sweep_organizations()

        mock_client.organizations.get_organization_networks.assert_called_once_with("O_9", {"perPage": 100000})
        mock_client.organizations.delete_organization.assert_called_once_with("O_9")
        assert report.deleted == ["organization test_acc_org (O_9)"]

    def test_run_skips_organizations(self, mock_client, ok, sleep):
        mock_client.organizations.get_organization_networks.return_value = ok([])
        mock_client.organizations.get_organization_admins.return_value = ok([])
        report = Sweeper(mock_client, prefix="tmp_", sleep=sleep).run(["O_1"], include_organizations=False)
        mock_client.organizations.get_organizations.assert_not_called()
        assert report.deleted == [] and report.failed == []


class TestSweepReport:
    """Test SweepReport.merge."""

    def test_merge(self):
        report = SweepReport(deleted=["a"])
        report.merge(SweepReport(deleted=["b"], failed=["c"]))
        assert report.deleted == ["a", "b"]
        assert report.failed == ["c"]
