"""Organization data sources."""

from __future__ import annotations

from typing import Any

from merakiprov.datasources.base import ListDataSource, item_attributes, list_schema, required_string
from merakiprov.framework.mapping import extract_path
from merakiprov.framework.schema import BoolAttribute, Schema, SetAttribute, StringAttribute
from merakiprov.framework.validators import length_between, one_of
from merakiprov.framework.values import is_known
from merakiprov.registry import register_data_source
from merakiprov.resources.networks import NETWORK_SCHEMA
from merakiprov.resources.organizations import ADMIN_SCHEMA

ORGANIZATIONS_SCHEMA = list_schema(
    description="List the organizations that the user has privileges on",
    arguments={},
    items={
        "organization_id": StringAttribute(computed=True, api_name="id", description="Organization ID"),
        "name": StringAttribute(computed=True, api_name="name", description="Organization name"),
        "url": StringAttribute(computed=True, api_name="url", description="Organization URL"),
        "api_enabled": BoolAttribute(computed=True, api_name="apiEnabled", description="Enable API access"),
        "licensing_model": StringAttribute(computed=True, api_name="licensingModel", description="Organization licensing model"),
        "cloud_region_name": StringAttribute(computed=True, api_name="cloudRegionName", description="Name of region"),
    },
)


@register_data_source("meraki_organizations")
class OrganizationsDataSource(ListDataSource):
    group = "organizations"
    operation = "get_organizations"

    @classmethod
    def schema(cls) -> Schema:
        return ORGANIZATIONS_SCHEMA

    def transform(self, items: list[Any]) -> list[Any]:
        return [
            {
                **org,
                "apiEnabled": extract_path(org, "api", "enabled"),
                "licensingModel": extract_path(org, "licensing", "model"),
                "cloudRegionName": extract_path(org, "cloud", "region", "name"),
            }
            for org in items
        ]


ORGANIZATIONS_NETWORKS_SCHEMA = list_schema(
    description="List the networks that the user has privileges on in an organization",
    arguments={
        "organization_id": StringAttribute(
            required=True, description="Organization ID", validators=[length_between(1, 31)]
        ),
        "config_template_id": StringAttribute(
            optional=True, description="An optional parameter that is the ID of a config template. Will return all networks bound to that template."
        ),
        "is_bound_to_config_template": BoolAttribute(
            optional=True, description="An optional parameter to filter config template bound networks"
        ),
        "tags": SetAttribute(
            optional=True, description="An optional parameter to filter networks by tags"
        ),
        "tags_filter_type": StringAttribute(
            optional=True,
            description="An optional parameter of value 'withAnyTags' or 'withAllTags' to indicate whether to return networks which contain ANY or ALL of the included tags",
            validators=[one_of("withAnyTags", "withAllTags")],
        ),
    },
    items={
        **item_attributes(NETWORK_SCHEMA, exclude=("id", "copy_from_network_id", "organization_id")),
        "organization_id": StringAttribute(computed=True, api_name="organizationId", description="Organization ID"),
    },
)


@register_data_source("meraki_organizations_networks")
class OrganizationsNetworksDataSource(ListDataSource):
    arg_keys = ("organization_id",)
    group = "organizations"
    operation = "get_organization_networks"

    @classmethod
    def schema(cls) -> Schema:
        return ORGANIZATIONS_NETWORKS_SCHEMA

    def query_params(self, config: dict[str, Any]) -> dict[str, Any] | None:
        params: dict[str, Any] = {"perPage": 100000}
        if is_known(config.get("config_template_id")):
            params["configTemplateId"] = config["config_template_id"]
        if is_known(config.get("is_bound_to_config_template")):
            params["isBoundToConfigTemplate"] = str(config["is_bound_to_config_template"]).lower()
        if is_known(config.get("tags")):
            params["tags[]"] = list(config["tags"])
        if is_known(config.get("tags_filter_type")):
            params["tagsFilterType"] = config["tags_filter_type"]
        return params


ORGANIZATIONS_ADMINS_SCHEMA = list_schema(
    description="List the dashboard administrators in this organization",
    arguments={"organization_id": required_string("Organization ID")},
    items=item_attributes(ADMIN_SCHEMA, exclude=("id", "organization_id")),
)


@register_data_source("meraki_organizations_admins")
class OrganizationsAdminsDataSource(ListDataSource):
    arg_keys = ("organization_id",)
    group = "organizations"
    operation = "get_organization_admins"

    @classmethod
    def schema(cls) -> Schema:
        return ORGANIZATIONS_ADMINS_SCHEMA
