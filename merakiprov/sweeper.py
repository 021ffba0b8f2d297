"""Removal of objects left behind by acceptance test runs.

Networks and admins whose name (or email) starts with the prefix are deleted
inside an organization; organizations with the prefix are emptied first and
then deleted. Failures are logged and the sweep moves on.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable

from loguru import logger

from merakiprov.client.api import DashboardAPI
from merakiprov.exceptions import APIError
from merakiprov.framework.retry import delete_with_polling

DEFAULT_PREFIX = "test_acc"
NETWORK_DELETE_RETRIES = 3


@dataclass
class SweepReport:
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def merge(self, other: SweepReport) -> None:
        self.deleted.extend(other.deleted)
        self.failed.extend(other.failed)


class Sweeper:
    def __init__(
        self,
        client: DashboardAPI,
        prefix: str = DEFAULT_PREFIX,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.prefix = prefix
        self.sleep = sleep
        self.log = logger.bind(classname=self.__class__.__name__)

    def _matches(self, value: Any) -> bool:
        return isinstance(value, str) and value.startswith(self.prefix)

    def delete_network(self, network: dict[str, Any]) -> bool:
        """Delete one network, retrying with a linearly growing wait."""
        deleted = delete_with_polling(
            lambda: self.client.networks.delete_network(network["id"])[1],
            attempts=NETWORK_DELETE_RETRIES,
            sleep=self.sleep,
        )
        if deleted:
            self.log.info(f"deleted network {network.get('name')} ({network['id']})")
        else:
            self.log.error(f"failed to delete network {network.get('name')} ({network['id']})")
        return deleted

    def sweep_networks(self, organization_id: str) -> SweepReport:
        report = SweepReport()
        self.log.info(f"sweeping networks in organization {organization_id}")
        try:
            networks, _ = self.client.organizations.get_organization_networks(organization_id, {"perPage": 100000})
        except APIError as e:
            self.log.error(f"listing networks of {organization_id}: {e}")
            report.failed.append(f"organization {organization_id} networks")
            return report
        for network in networks or []:
            if not self._matches(network.get("name")):
                continue
            target = f"network {network.get('name')} ({network['id']})"
            (report.deleted if self.delete_network(network) else report.failed).append(target)
        return report

    def sweep_admins(self, organization_id: str) -> SweepReport:
        report = SweepReport()
        self.log.info(f"sweeping admins in organization {organization_id}")
        try:
            admins, _ = self.client.organizations.get_organization_admins(organization_id)
        except APIError as e:
            self.log.error(f"listing admins of {organization_id}: {e}")
            report.failed.append(f"organization {organization_id} admins")
            return report
        for admin in admins or []:
            if not (self._matches(admin.get("email")) or self._matches(admin.get("name"))):
                continue
            target = f"admin {admin.get('email')} ({admin['id']})"
            try:
                _, resp = self.client.organizations.delete_organization_admin(organization_id, admin["id"])
            except APIError as e:
                self.log.error(f"deleting {target}: {e}")
                report.failed.append(target)
                continue
            if resp.status_code == 204:
                self.log.info(f"deleted {target}")
                report.deleted.append(target)
            else:
                self.log.error(f"deleting {target}: unexpected status {resp.status_code}")
                report.failed.append(target)
        return report

    def sweep_organizations(self) -> SweepReport:
        """Delete every organization with the prefix, after emptying it."""
        report = SweepReport()
        try:
            organizations, _ = self.client.organizations.get_organizations()
        except APIError as e:
            self.log.error(f"listing organizations: {e}")
            report.failed.append("organizations")
            return report
        for org in organizations or []:
            if not self._matches(org.get("name")):
                continue
            report.merge(self.sweep_networks(org["id"]))
            report.merge(self.sweep_admins(org["id"]))
            target = f"organization {org.get('name')} ({org['id']})"
            try:
                _, resp = self.client.organizations.delete_organization(org["id"])
            except APIError as e:
                self.log.error(f"deleting {target}: {e}")
                report.failed.append(target)
                continue
            if resp.status_code == 204:
                self.log.info(f"deleted {target}")
                report.deleted.append(target)
            else:
                report.failed.append(target)
        return report

    def run(self, organization_ids: list[str], include_organizations: bool = True) -> SweepReport:
        report = SweepReport()
        for organization_id in organization_ids:
            report.merge(self.sweep_networks(organization_id))
            report.merge(self.sweep_admins(organization_id))
        if include_organizations:
            report.merge(self.sweep_organizations())
        self.log.info(f"sweep finished: {len(report.deleted)} deleted, {len(report.failed)} failed")
        return report
