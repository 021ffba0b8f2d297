"""Tests for workspace configuration loading."""

import pytest

from merakiprov.engine.config import DATA, MANAGED, Address, load_config, parse_config
from merakiprov.exceptions import ConfigurationError

WORKSPACE_YAML = """\
provider:
  meraki:
    base_url: https://api.meraki.com
resource:
  meraki_network:
    lab:
      organization_id: "123456"
      name: lab
      product_types: [appliance, switch]
  meraki_networks_syslog_servers:
    lab:
      network_id: "${meraki_network.lab.network_id}"
      depends_on: [meraki_network.lab]
data:
  meraki_organizations:
    all: {}
"""


class TestAddress:
    """Test Address parsing and formatting."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("meraki_network.lab", Address(MANAGED, "meraki_network", "lab")),
            ("data.meraki_organizations.all", Address(DATA, "meraki_organizations", "all")),
        ],
    )
    def test_round_trip(self, text, expected):
        assert Address.parse(text) == expected
        assert str(expected) == text

    @pytest.mark.parametrize("text", ["meraki_network", "meraki_network.", "a.b.c", "data.x.y.z"])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError, match="Invalid address"):
            Address.parse(text)


class TestParseConfig:
    """Test parse_config on in-memory documents."""

    def test_blocks_and_provider(self):
        config = parse_config(
            {
                "provider": {"meraki": {"api_key": "k"}},
                "resource": {"meraki_network": {"lab": {"name": "lab"}}},
                "data": {"meraki_organizations": {"all": None}},
            }
        )
        assert config.provider == {"api_key": "k"}
        assert [b.address for b in config.resources()] == [Address(MANAGED, "meraki_network", "lab")]
        data = config.data_sources()[0]
        assert data.address == Address(DATA, "meraki_organizations", "all")
        assert data.body == {}

    def test_empty_document(self):
        config = parse_config(None)
        assert config.provider == {}
        assert config.blocks == {}

    def test_depends_on_is_split_off(self):
        config = parse_config(
            {"resource": {"meraki_devices": {"core": {"serial": "Q2XX", "depends_on": ["meraki_network.lab"]}}}}
        )
        block = config.get(Address(MANAGED, "meraki_devices", "core"))
        assert block.body == {"serial": "Q2XX"}
        assert block.depends_on == [Address(MANAGED, "meraki_network", "lab")]

    @pytest.mark.parametrize(
        "document, message",
        [
            ({"variable": {}}, "Unsupported top-level keys: variable"),
            ({"provider": {"aws": {}}}, "Unsupported provider 'aws'"),
            ({"resource": {"meraki_network": ["lab"]}}, "resource.meraki_network must be a mapping"),
            ({"resource": {"meraki_network": {"lab": {"depends_on": "x.y"}}}}, "depends_on must be a list"),
            ("just a string", "configuration must be a mapping"),
        ],
    )
    def test_malformed(self, document, message):
        with pytest.raises(ConfigurationError, match=message):
            parse_config(document)


class TestLoadConfig:
    """Test load_config on files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "main.yaml"
        path.write_text(WORKSPACE_YAML)
        config = load_config(path)
        assert config.source == str(path)
        assert config.provider == {"base_url": "https://api.meraki.com"}
        assert len(config.resources()) == 2
        syslog = config.get(Address(MANAGED, "meraki_networks_syslog_servers", "lab"))
        assert syslog.body == {"network_id": "${meraki_network.lab.network_id}"}

    def test_load_json(self, tmp_path):
        """JSON documents load through the YAML parser."""
        path = tmp_path / "main.tf.json"
        path.write_text('{"resource": {"meraki_network": {"lab": {"name": "lab"}}}}')
        assert load_config(path).resources()[0].body == {"name": "lab"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("resource: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Could not parse"):
            load_config(path)
