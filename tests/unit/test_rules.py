"""
Rules loading and validation tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from resource_tracking.components.tracking import DEFAULT_CONFIG
from resource_tracking.rules.loader import load_rules
from resource_tracking.rules.models import Rules


def write_rules(tmp_path: Path, rules: dict[str, Any], name: str = "rules.yaml") -> Path:
    path = tmp_path / name
    path.write_text(yaml.dump(rules))
    return path


MINIMAL = {"project": {"slug": "resource-tracking", "rules_version": "1"}}


class TestRulesLoading:
    """Rules file loading."""

    def test_load_actual_rules_file(self, rules: Rules) -> None:
        assert rules.project.slug == "resource-tracking"
        assert rules.to_tracking_config() == DEFAULT_CONFIG

    def test_minimal_rules_use_defaults(self, tmp_path: Path) -> None:
        rules = load_rules(write_rules(tmp_path, MINIMAL))

        assert rules.heartbeat.interval_seconds == 10.0
        assert rules.analytics_api.base_url == "http://localhost:8000/api"
        assert rules.to_tracking_config() == DEFAULT_CONFIG

    def test_overrides_map_into_config(self, tmp_path: Path) -> None:
        data = {
            **MINIMAL,
            "sanity_ceiling_seconds": 20,
            "heartbeat": {"interval_seconds": 5},
            "native": {"report_interval_seconds": 8, "position_threshold_seconds": 4},
            "external": {"flush_interval_seconds": 60, "max_delta_seconds": 65},
        }

        config = load_rules(write_rules(tmp_path, data)).to_tracking_config()

        assert config.sanity_ceiling_seconds == 20
        assert config.heartbeat_interval_seconds == 5
        assert config.report_interval_seconds == 8
        assert config.position_threshold_seconds == 4
        assert config.completion_tolerance_seconds == 1.0
        assert config.external_flush_interval_seconds == 60
        assert config.external_max_delta_seconds == 65

    def test_markdown_fenced_rules(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.md"
        path.write_text(
            "# Tracking rules\n\nSome prose.\n\n```yaml\n" + yaml.dump(MINIMAL) + "```\n\nMore prose.\n"
        )

        assert load_rules(path).project.rules_version == "1"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("project: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)


class TestRulesValidation:
    """Schema constraints."""

    def test_missing_project_section(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(write_rules(tmp_path, {"heartbeat": {"interval_seconds": 10}}))

    def test_non_positive_interval(self, tmp_path: Path) -> None:
        data = {**MINIMAL, "heartbeat": {"interval_seconds": 0}}

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(write_rules(tmp_path, data))

    def test_external_ceiling_must_cover_flush_window(self, tmp_path: Path) -> None:
        data = {**MINIMAL, "external": {"flush_interval_seconds": 30, "max_delta_seconds": 15}}

        with pytest.raises(ValueError, match="max_delta_seconds"):
            load_rules(write_rules(tmp_path, data))
