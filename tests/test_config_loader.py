"""
Tests for intelligence config loading.
"""

from pathlib import Path

import pytest
import yaml

from modules.intelligence.config_loader import IntelligenceConfig, IntelligenceConfigLoader
from modules.intelligence.core.exceptions import ConfigurationException

SHIPPED_CONFIG = Path(__file__).parent.parent / "config" / "intelligence"


def write_yaml(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data))


def test_shipped_defaults_match_built_in_defaults():
    config = IntelligenceConfigLoader(SHIPPED_CONFIG).get_config()

    assert config == IntelligenceConfig()


def test_shipped_example_tenant():
    config = IntelligenceConfigLoader(SHIPPED_CONFIG).get_config("example-agency")

    assert config.cache_ttl_seconds == 1800
    assert config.disabled_rules == ["automation_opportunity"]
    assert config.thresholds.overdue_immediate_amount == 20000
    # Untouched thresholds keep their defaults
    assert config.thresholds.stale_leads_min == 3


def test_missing_directory_uses_built_in_defaults(tmp_path, caplog):
    config = IntelligenceConfigLoader(tmp_path / "nowhere").get_config("ws-1")

    assert config == IntelligenceConfig()
    assert "Using built-in defaults" in caplog.text


def test_tenant_override_deep_merges(tmp_path):
    write_yaml(tmp_path / "default.yaml", {"max_insights": 8, "thresholds": {"busy_day_events": 6}})
    write_yaml(tmp_path / "tenants" / "ws-1.yaml", {"thresholds": {"overdue_tasks_min": 5}})
    loader = IntelligenceConfigLoader(tmp_path)

    tenant = loader.get_config("ws-1")
    other = loader.get_config("ws-2")

    assert tenant.max_insights == 8
    assert tenant.thresholds.busy_day_events == 6
    assert tenant.thresholds.overdue_tasks_min == 5
    assert other.thresholds.overdue_tasks_min == 3


def test_loader_caches_until_reload(tmp_path):
    write_yaml(tmp_path / "default.yaml", {"max_insights": 8})
    loader = IntelligenceConfigLoader(tmp_path)
    assert loader.get_config().max_insights == 8

    write_yaml(tmp_path / "default.yaml", {"max_insights": 4})
    assert loader.get_config().max_insights == 8

    loader.reload()
    assert loader.get_config().max_insights == 4


@pytest.mark.parametrize("data", [
    {"cache_ttl_seconds": 60},
    {"cache_ttl_seconds": 3600},
    {"min_confidence": 1.5},
    {"thresholds": {"no_such_threshold": 1}},
    {"weights": {"revenue": 0.9}},
    {"unknown_key": True},
])
def test_invalid_values_raise(tmp_path, data):
    write_yaml(tmp_path / "default.yaml", data)

    with pytest.raises(ConfigurationException):
        IntelligenceConfigLoader(tmp_path).get_config()


def test_malformed_yaml_raises(tmp_path):
    (tmp_path / "default.yaml").write_text("thresholds: [unclosed")

    with pytest.raises(ConfigurationException, match="Invalid YAML"):
        IntelligenceConfigLoader(tmp_path).get_config()


def test_non_mapping_file_raises(tmp_path):
    write_yaml(tmp_path / "default.yaml", ["just", "a", "list"])

    with pytest.raises(ConfigurationException, match="mapping"):
        IntelligenceConfigLoader(tmp_path).get_config()


@pytest.mark.parametrize("tenant_id", ["../default", "ws/1", "org:42", "acme@example.com", "Acme Corp"])
def test_tenant_id_that_cannot_name_a_file_gets_defaults(tmp_path, tenant_id):
    write_yaml(tmp_path / "default.yaml", {"max_insights": 8})

    config = IntelligenceConfigLoader(tmp_path).get_config(tenant_id)

    assert config.max_insights == 8
