"""Tests for schema validation and the payload/response mapping."""

from __future__ import annotations

import pytest

from merakiprov.framework.diagnostics import Diagnostics
from merakiprov.framework.mapping import (
    apply_response,
    build_payload,
    extract_bool,
    extract_int,
    extract_path,
    extract_string_list,
    split_import_id,
)
from merakiprov.framework.schema import (
    BoolAttribute,
    Float64Attribute,
    Int64Attribute,
    ListAttribute,
    ListNestedAttribute,
    MapAttribute,
    MapNestedAttribute,
    Schema,
    SetAttribute,
    SetNestedAttribute,
    SingleNestedAttribute,
    StringAttribute,
)
from merakiprov.framework.validators import one_of
from merakiprov.framework.values import UNKNOWN


@pytest.fixture()
def vlan_schema():
    return Schema(
        attributes={
            "id": StringAttribute(computed=True),
            "network_id": StringAttribute(required=True),
            "vlan_id": Int64Attribute(required=True, api_name="id"),
            "name": StringAttribute(optional=True, computed=True, api_name="name"),
            "subnet": StringAttribute(optional=True, api_name="subnet"),
            "interface_id": StringAttribute(computed=True, api_name="interfaceId"),
            "dns": SetAttribute(optional=True, api_name="dnsNameservers"),
            "secret": StringAttribute(optional=True, sensitive=True, api_name="secret"),
            "handling": StringAttribute(optional=True, api_name="dhcpHandling", validators=[one_of("a", "b")]),
            "reserved": ListNestedAttribute(
                optional=True,
                api_name="reservedIpRanges",
                attributes={
                    "start": StringAttribute(required=True, api_name="start"),
                    "end": StringAttribute(required=True, api_name="end"),
                    "comment": StringAttribute(optional=True, computed=True, api_name="comment"),
                },
            ),
            "fixed": MapNestedAttribute(
                optional=True,
                api_name="fixedIpAssignments",
                attributes={
                    "ip": StringAttribute(required=True, api_name="ip"),
                    "name": StringAttribute(optional=True, api_name="name"),
                },
            ),
            "ipv6": SingleNestedAttribute(
                optional=True,
                computed=True,
                api_name="ipv6",
                attributes={
                    "enabled": BoolAttribute(optional=True, api_name="enabled"),
                    "origin": StringAttribute(computed=True, api_name="origin"),
                },
            ),
        }
    )


class TestAttributeDeclaration:
    """Test attribute mode checks and data-source conversion."""

    def test_required_cannot_be_optional(self):
        with pytest.raises(ValueError):
            StringAttribute(required=True, optional=True)

    def test_needs_a_mode(self):
        with pytest.raises(ValueError):
            StringAttribute()

    def test_as_data_source_is_computed_only(self):
        attr = StringAttribute(required=True, api_name="name", default="x")
        clone = attr.as_data_source()
        assert clone.computed_only
        assert clone.default is None
        assert attr.required


class TestValidateConfig:
    """Test Schema.validate_config error reporting."""

    def test_valid_config(self, vlan_schema):
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": "N_1", "vlan_id": 10, "handling": "a"}, diags)
        assert not diags.has_error()

    def test_missing_required(self, vlan_schema):
        """A missing required argument is reported at its own path."""
        diags = Diagnostics()
        vlan_schema.validate_config({"vlan_id": 10}, diags)
        assert [d.summary for d in diags.errors()] == ["Missing required argument"]
        assert diags.errors()[0].path == "network_id"

    def test_unsupported_argument(self, vlan_schema):
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": "N_1", "vlan_id": 10, "bogus": 1}, diags)
        assert diags.errors()[0].summary == "Unsupported argument"

    def test_read_only_attribute(self, vlan_schema):
        """Computed-only attributes cannot be configured."""
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": "N_1", "vlan_id": 10, "interface_id": "x"}, diags)
        assert diags.errors()[0].summary == "Invalid Configuration for Read-Only Attribute"

    def test_wrong_type(self, vlan_schema):
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": "N_1", "vlan_id": "ten"}, diags)
        assert diags.errors()[0].summary == "Incorrect attribute value type"

    def test_bool_is_not_an_int(self, vlan_schema):
        """True must not pass as an int64 value."""
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": "N_1", "vlan_id": True}, diags)
        assert diags.has_error()

    def test_unknown_values_skip_validation(self, vlan_schema):
        """Values known only after apply are not validated yet."""
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": UNKNOWN, "vlan_id": 10, "handling": UNKNOWN}, diags)
        assert not diags.has_error()

    def test_nested_errors_carry_path(self, vlan_schema):
        diags = Diagnostics()
        vlan_schema.validate_config(
            {"network_id": "N_1", "vlan_id": 10, "reserved": [{"start": "10.0.0.1"}]}, diags
        )
        assert diags.errors()[0].path == "reserved[0].end"

    def test_validator_runs(self, vlan_schema):
        diags = Diagnostics()
        vlan_schema.validate_config({"network_id": "N_1", "vlan_id": 10, "handling": "z"}, diags)
        assert diags.errors()[0].summary == "Invalid Attribute Value Match"


class TestNormalize:
    """Test canonical state forms."""

    def test_sets_are_sorted_and_deduplicated(self):
        assert SetAttribute(optional=True).normalize(["b", "a", "b"]) == ["a", "b"]

    def test_set_with_unknown_element_keeps_order(self):
        assert SetAttribute(optional=True).normalize(["b", UNKNOWN]) == ["b", UNKNOWN]

    def test_nested_fills_missing_keys(self, vlan_schema):
        model = vlan_schema.normalize({"reserved": [{"start": "a", "end": "b"}]})
        assert model["reserved"] == [{"start": "a", "end": "b", "comment": None}]
        assert set(model) == set(vlan_schema.attributes)

    def test_primitive_coercion(self):
        assert Int64Attribute(optional=True).normalize("10") == 10
        assert Float64Attribute(optional=True).normalize(3) == 3.0


class TestBuildPayload:
    """Test JSON payload construction from a model."""

    def test_skips_null_unknown_computed_and_path_params(self, vlan_schema):
        """Only known, settable attributes with an api_name reach the payload."""
        model = vlan_schema.normalize(
            {
                "id": "N_1,10",
                "network_id": "N_1",
                "vlan_id": 10,
                "name": UNKNOWN,
                "subnet": None,
                "interface_id": "123",
                "dns": ["8.8.8.8", "1.1.1.1"],
            }
        )
        assert build_payload(vlan_schema.attributes, model) == {"id": 10, "dnsNameservers": ["1.1.1.1", "8.8.8.8"]}

    def test_nested_payloads(self, vlan_schema):
        model = vlan_schema.normalize(
            {
                "vlan_id": 10,
                "reserved": [{"start": "10.0.0.2", "end": "10.0.0.9", "comment": None}],
                "fixed": {"aa:bb": {"ip": "10.0.0.3", "name": "printer"}},
                "ipv6": {"enabled": True, "origin": UNKNOWN},
            }
        )
        payload = build_payload(vlan_schema.attributes, model)
        assert payload["reservedIpRanges"] == [{"start": "10.0.0.2", "end": "10.0.0.9"}]
        assert payload["fixedIpAssignments"] == {"aa:bb": {"ip": "10.0.0.3", "name": "printer"}}
        assert payload["ipv6"] == {"enabled": True}


class TestApplyResponse:
    """Test filling a model from an API response."""

    def test_known_planned_values_win_on_create(self, vlan_schema):
        """On create, configured values stay and unknowns take the response."""
        planned = vlan_schema.normalize({"network_id": "N_1", "vlan_id": 10, "name": "lan", "interface_id": UNKNOWN})
        data = {"id": "10", "name": "LAN", "interfaceId": "99", "subnet": "10.0.0.0/24"}
        model = apply_response(vlan_schema.attributes, planned, data)
        assert model["name"] == "lan"
        assert model["interface_id"] == "99"
        assert model["subnet"] == "10.0.0.0/24"
        assert model["vlan_id"] == 10
        assert model["network_id"] == "N_1"

    def test_overwrite_on_read(self, vlan_schema):
        """On read the response wins, path parameters are copied through."""
        state = vlan_schema.normalize({"network_id": "N_1", "vlan_id": 10, "name": "lan"})
        model = apply_response(vlan_schema.attributes, state, {"id": 10, "name": "renamed"}, overwrite=True)
        assert model["name"] == "renamed"
        assert model["subnet"] is None
        assert model["network_id"] == "N_1"

    def test_sensitive_value_kept_when_not_echoed(self, vlan_schema):
        """Secrets the API never returns stay in state."""
        state = vlan_schema.normalize({"network_id": "N_1", "vlan_id": 10, "secret": "s3cret"})
        model = apply_response(vlan_schema.attributes, state, {"id": 10}, overwrite=True)
        assert model["secret"] == "s3cret"

    def test_nested_unknown_children_filled(self, vlan_schema):
        planned = vlan_schema.normalize({"ipv6": {"enabled": True, "origin": UNKNOWN}})
        model = apply_response(vlan_schema.attributes, planned, {"ipv6": {"enabled": False, "origin": "auto"}})
        assert model["ipv6"] == {"enabled": True, "origin": "auto"}

    def test_missing_response_turns_unknown_into_null(self, vlan_schema):
        planned = vlan_schema.normalize({"interface_id": UNKNOWN})
        assert apply_response(vlan_schema.attributes, planned, None)["interface_id"] is None

    def test_collections_from_api(self):
        assert ListAttribute(computed=True).from_api([1, "a"]) == ["1", "a"]
        assert MapAttribute(computed=True).from_api({"a": 1}) == {"a": "1"}
        assert SetAttribute(computed=True).from_api("oops") is None


@pytest.fixture()
def servers():
    return SetNestedAttribute(
        required=True,
        api_name="servers",
        attributes={
            "host": StringAttribute(required=True, api_name="host"),
            "port": Int64Attribute(required=True, api_name="port"),
            "comment": StringAttribute(optional=True, computed=True, api_name="comment"),
        },
    )


class TestSetNestedAttribute:
    """Test element order and pairing for sets of objects."""

    def test_normalize_ignores_order(self, servers):
        first = servers.normalize([{"host": "10.0.0.9", "port": 514}, {"host": "10.0.0.1", "port": 514}])
        second = servers.normalize([{"host": "10.0.0.1", "port": 514}, {"host": "10.0.0.9", "port": 514}])
        assert first == second
        assert [item["host"] for item in first] == ["10.0.0.1", "10.0.0.9"]

    def test_normalize_deduplicates(self, servers):
        items = servers.normalize([{"host": "10.0.0.1", "port": 514}, {"host": "10.0.0.1", "port": 514}])
        assert items == [{"host": "10.0.0.1", "port": 514, "comment": None}]

    def test_from_api_ignores_order(self, servers):
        """The API may list the same elements in any order."""
        raw = [{"host": "10.0.0.9", "port": 514}, {"host": "10.0.0.1", "port": "514"}]
        assert servers.from_api(raw) == servers.from_api(list(reversed(raw)))
        assert servers.from_api(raw) == servers.normalize(raw)

    def test_unknown_element_keeps_order(self, servers):
        items = servers.normalize([{"host": "10.0.0.9", "port": UNKNOWN}, {"host": "10.0.0.1", "port": 514}])
        assert [item["host"] for item in items] == ["10.0.0.9", "10.0.0.1"]

    def test_merge_pairs_elements_by_content(self, servers):
        """Computed children come from the answer element with the same content, not the same position."""
        planned = [
            {"host": "10.0.0.9", "port": 514, "comment": UNKNOWN},
            {"host": "10.0.0.1", "port": 514, "comment": UNKNOWN},
        ]
        raw = [
            {"host": "10.0.0.1", "port": 514, "comment": "one"},
            {"host": "10.0.0.9", "port": 514, "comment": "nine"},
        ]
        merged = servers.merge_known(planned, raw)
        assert {item["host"]: item["comment"] for item in merged} == {"10.0.0.1": "one", "10.0.0.9": "nine"}
        assert merged == servers.normalize(merged)

    def test_match_element(self, servers):
        candidates = [{"host": "10.0.0.1", "port": 514}, {"host": "10.0.0.9", "port": 514}]
        assert servers.match_element({"host": "10.0.0.9", "port": 514, "comment": None}, candidates) == 1
        assert servers.match_element({"host": "10.0.0.5", "port": 514}, candidates) is None


class TestMappingHelpers:
    """Test the extract_* helpers and import id splitting."""

    def test_extract_path(self):
        assert extract_path({"a": {"b": {"c": 1}}}, "a", "b", "c") == 1
        assert extract_path({"a": 1}, "a", "b") is None

    def test_extract_coercions(self):
        assert extract_int({"n": "42"}, "n") == 42
        assert extract_int({"n": 4.0}, "n") == 4
        assert extract_bool({"b": "true"}, "b") is True
        assert extract_string_list({"t": ["b", "a", "b"]}, "t", as_set=True) == ["a", "b"]
        assert extract_string_list(None, "t") is None

    @pytest.mark.parametrize(
        "import_id,expected",
        [
            ("N_1,10", ["N_1", "10"]),
            (" N_1 , 10 ", ["N_1", "10"]),
            ("N_1", None),
            ("N_1,", None),
            ("a,b,c", None),
        ],
    )
    def test_split_import_id(self, import_id, expected):
        """Wrong part counts and empty parts are rejected."""
        assert split_import_id(import_id, "network_id", "vlan_id") == expected
