"""Tests for configuration loading."""

from decimal import Decimal
from pathlib import Path

import pytest

from ledger_analytics.config import (
    AnalyticsConfig,
    Config,
    ConfigError,
    OutputConfig,
    load_config,
    load_settings,
    load_yaml_file,
)


def write_settings(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadConfig:
    """Tests for load_config and load_settings."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test that a missing settings file is not an error."""
        config = load_config(config_dir=tmp_path)

        assert config == Config()
        assert config.analytics.user_efficiency_scale == Decimal("10000")
        assert config.analytics.department_efficiency_scale == Decimal("50000")
        assert config.output.format == "json"

    def test_values_from_file(self, tmp_path: Path) -> None:
        """Test reading every section from settings.yaml."""
        write_settings(
            tmp_path,
            """
analytics:
  unknown_label: "(none)"
  user_efficiency_scale: 2000
  zero_fill_months: true
output:
  format: CSV
  decimal_places: 3
logging:
  level: DEBUG
  file: analytics.log
""",
        )

        config = load_config(config_dir=tmp_path)

        assert config.analytics.unknown_label == "(none)"
        assert config.analytics.user_efficiency_scale == Decimal("2000")
        assert config.analytics.department_efficiency_scale == Decimal("50000")
        assert config.analytics.zero_fill_months is True
        assert config.output.format == "csv"
        assert config.output.decimal_places == 3
        assert config.logging.level == "DEBUG"
        assert config.logging.file == "analytics.log"

    def test_explicit_settings_path(self, tmp_path: Path) -> None:
        """Test that settings_path takes precedence over config_dir."""
        path = tmp_path / "custom.yaml"
        path.write_text("output:\n  json_indent: 4\n", encoding="utf-8")

        config = load_config(settings_path=path, config_dir=tmp_path / "unused")

        assert config.output.json_indent == 4

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test that an empty settings file gives defaults."""
        path = write_settings(tmp_path, "")

        assert load_settings(path) == Config()


class TestConfigErrors:
    """Tests for invalid configuration."""

    def test_unsupported_format(self, tmp_path: Path) -> None:
        """Test that an unknown output format is rejected."""
        path = write_settings(tmp_path, "output:\n  format: pdf\n")

        with pytest.raises(ConfigError, match="pdf"):
            load_settings(path)

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        """Test that a list in place of a section is rejected."""
        path = write_settings(tmp_path, "analytics:\n  - 1\n  - 2\n")

        with pytest.raises(ConfigError, match="'analytics' must be a mapping"):
            load_settings(path)

    @pytest.mark.parametrize(
        "content",
        [
            "analytics:\n  user_efficiency_scale: 0\n",
            "analytics:\n  department_efficiency_scale: -1\n",
            "analytics:\n  days_per_month: 0\n",
        ],
    )
    def test_non_positive_values(self, tmp_path: Path, content: str) -> None:
        """Test that scales and month length must be positive."""
        path = write_settings(tmp_path, content)

        with pytest.raises(ConfigError):
            load_settings(path)

    def test_non_numeric_value(self, tmp_path: Path) -> None:
        """Test that a non-numeric scale is reported as a ConfigError."""
        path = write_settings(tmp_path, "analytics:\n  user_efficiency_scale: lots\n")

        with pytest.raises(ConfigError, match="Invalid value"):
            load_settings(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        """Test that malformed YAML is a ConfigError."""
        path = write_settings(tmp_path, "output: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml_file(path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        """Test that a scalar document is rejected."""
        path = write_settings(tmp_path, "just a string\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_yaml_file(path)

    def test_missing_yaml_file(self, tmp_path: Path) -> None:
        """Test that load_yaml_file reports a missing file."""
        with pytest.raises(FileNotFoundError):
            load_yaml_file(tmp_path / "absent.yaml")


class TestFromDict:
    """Tests for the section dataclasses."""

    def test_analytics_defaults(self) -> None:
        """Test that an empty section gives default values."""
        assert AnalyticsConfig.from_dict({}) == AnalyticsConfig()

    def test_output_format_case_insensitive(self) -> None:
        """Test that formats are normalized to lower case."""
        assert OutputConfig.from_dict({"format": "XLSX"}).format == "xlsx"


class TestAnalyticsConfigValidation:
    """Tests for checks on directly constructed AnalyticsConfig."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"user_efficiency_scale": Decimal("0")},
            {"department_efficiency_scale": Decimal("-5")},
            {"days_per_month": 0},
        ],
    )
    def test_non_positive_values_rejected(self, kwargs: dict) -> None:
        """Test that invalid values fail at construction, not during ranking."""
        with pytest.raises(ConfigError):
            AnalyticsConfig(**kwargs)

    def test_positive_values_accepted(self) -> None:
        config = AnalyticsConfig(user_efficiency_scale=Decimal("1"), days_per_month=7)

        assert config.days_per_month == 7
