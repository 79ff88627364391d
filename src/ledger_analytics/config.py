"""Configuration loading and validation for the analytics engine."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

import yaml

from ledger_analytics.models.transaction import UNKNOWN
from ledger_analytics.utils.logging_config import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


SUPPORTED_FORMATS = ("json", "csv", "xlsx")


@dataclass
class AnalyticsConfig:
    """Tunable constants of the analytics engine.

    Attributes:
        unknown_label: Name used when a reference cannot be resolved.
        user_efficiency_scale: Divisor applied to a user's average
            transaction amount in the efficiency score.
        department_efficiency_scale: Same divisor for departments.
        days_per_month: Days per month when counting elapsed months.
        zero_fill_months: Emit every month of the filtered range in the
            monthly series, including months without transactions.
    """

    unknown_label: str = UNKNOWN
    user_efficiency_scale: Decimal = field(default_factory=lambda: Decimal("10000"))
    department_efficiency_scale: Decimal = field(default_factory=lambda: Decimal("50000"))
    days_per_month: int = 30
    zero_fill_months: bool = False

    def __post_init__(self) -> None:
        if self.user_efficiency_scale <= 0 or self.department_efficiency_scale <= 0:
            raise ConfigError("Efficiency scales must be positive")
        if self.days_per_month <= 0:
            raise ConfigError("days_per_month must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "AnalyticsConfig":
        """Create from dictionary."""
        return cls(
            unknown_label=str(data.get("unknown_label", UNKNOWN)),
            user_efficiency_scale=Decimal(str(data.get("user_efficiency_scale", "10000"))),
            department_efficiency_scale=Decimal(
                str(data.get("department_efficiency_scale", "50000"))
            ),
            days_per_month=int(data.get("days_per_month", 30)),  # type: ignore[arg-type]
            zero_fill_months=bool(data.get("zero_fill_months", False)),
        )


@dataclass
class OutputConfig:
    """Configuration for report export.

    Attributes:
        format: Default export format (json, csv or xlsx).
        json_indent: Indentation of the JSON export.
        decimal_places: Decimal places for exported amounts and percentages.
    """

    format: str = "json"
    json_indent: int = 2
    decimal_places: int = 2

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OutputConfig":
        """Create from dictionary."""
        fmt = str(data.get("format", "json")).lower()
        if fmt not in SUPPORTED_FORMATS:
            raise ConfigError(
                f"Unsupported output format '{fmt}', expected one of {', '.join(SUPPORTED_FORMATS)}"
            )
        return cls(
            format=fmt,
            json_indent=int(data.get("json_indent", 2)),  # type: ignore[arg-type]
            decimal_places=int(data.get("decimal_places", 2)),  # type: ignore[arg-type]
        )


@dataclass
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Path to log file.
    """

    level: str = "INFO"
    file: str = "ledger_analytics.log"

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "LoggingConfig":
        """Create from dictionary."""
        return cls(
            level=str(data.get("level", "INFO")),
            file=str(data.get("file", "ledger_analytics.log")),
        )


@dataclass
class Config:
    """Main configuration container."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_yaml_file(path: Path) -> dict[str, object]:
    """Load a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        try:
            content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(content).__name__}")
    return content


def _section(data: dict[str, object], name: str) -> dict[str, object]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}")
    return value


def load_settings(path: Path) -> Config:
    """Load settings from settings.yaml.

    Args:
        path: Path to settings.yaml.

    Returns:
        Config built from the file; absent sections keep their defaults.
    """
    data = load_yaml_file(path)

    try:
        return Config(
            analytics=AnalyticsConfig.from_dict(_section(data, "analytics")),
            output=OutputConfig.from_dict(_section(data, "output")),
            logging=LoggingConfig.from_dict(_section(data, "logging")),
        )
    except (TypeError, ValueError, ArithmeticError) as e:
        raise ConfigError(f"Invalid value in {path}: {e}") from e


def load_config(
    settings_path: Optional[Path] = None,
    config_dir: Optional[Path] = None,
) -> Config:
    """Load the complete configuration.

    Args:
        settings_path: Path to settings.yaml (or None to use default).
        config_dir: Base config directory (default: ./config).

    Returns:
        Complete Config object. Defaults are used when no settings file exists.
    """
    if config_dir is None:
        config_dir = Path("config")
    if settings_path is None:
        settings_path = config_dir / "settings.yaml"

    if settings_path.exists():
        config = load_settings(settings_path)
        logger.info(f"Loaded settings from {settings_path}")
    else:
        config = Config()
        logger.warning(f"Settings file not found: {settings_path}, using defaults")

    return config
