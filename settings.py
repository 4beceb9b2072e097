"""
Tank Board Settings v1.2.0
Centralized configuration from environment variables

Every threshold used by the classifier, the grouping engine and the subgroup
display policy lives here so that policy changes never touch service code.
Values come from the environment (optionally a .env file) and can be
overridden per deployment through a YAML policy file (tank_policy.yaml).
"""

import logging
import math
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def _get_env(key: str, default: str = "", required: bool = False) -> str:
    """Get environment variable with optional requirement enforcement."""
    value = os.getenv(key, default)
    if required and not value:
        raise ValueError(f"Required environment variable {key} is not set!")
    return value


def _get_env_int(key: str, default: int) -> int:
    """Get integer environment variable."""
    return int(os.getenv(key, str(default)))


def _get_env_float(key: str, default: float) -> float:
    """Get float environment variable."""
    return float(os.getenv(key, str(default)))


def _get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable."""
    return os.getenv(key, str(default)).lower() in ("true", "1", "yes")


def _get_env_list(key: str, default: str = "", separator: str = ",") -> List[str]:
    """Get list from comma-separated environment variable."""
    value = os.getenv(key, default)
    return [item.strip() for item in value.split(separator) if item.strip()]


# =============================================================================
# CLASSIFICATION SETTINGS
# =============================================================================
@dataclass
class ClassificationSettings:
    """
    Tank urgency thresholds.

    A tank is critical when either signal crosses its critical threshold and
    low when either crosses its low threshold. Boundaries are inclusive.
    """

    critical_percent: float = field(
        default_factory=lambda: _get_env_float("TANK_CRITICAL_PCT", 10.0)
    )
    low_percent: float = field(
        default_factory=lambda: _get_env_float("TANK_LOW_PCT", 20.0)
    )
    critical_days: float = field(
        default_factory=lambda: _get_env_float("TANK_CRITICAL_DAYS", 1.5)
    )
    low_days: float = field(
        default_factory=lambda: _get_env_float("TANK_LOW_DAYS", 2.5)
    )

    # Dips older than this are flagged on the board (informational only)
    dip_stale_days: float = field(
        default_factory=lambda: _get_env_float("TANK_DIP_STALE_DAYS", 4.0)
    )


# =============================================================================
# GROUPING SETTINGS
# =============================================================================
@dataclass
class GroupingSettings:
    """Group bucketing and ordering."""

    # Shown first on the board, everything else alphabetical
    pinned_group: Optional[str] = field(
        default_factory=lambda: _get_env("TANK_PINNED_GROUP", "Swan Transit") or None
    )
    ungrouped_name: str = field(
        default_factory=lambda: _get_env("TANK_UNGROUPED_NAME", "Other")
    )
    no_subgroup_name: str = field(
        default_factory=lambda: _get_env("TANK_NO_SUBGROUP_NAME", "No Subgroup")
    )


# =============================================================================
# SUBGROUP DISPLAY POLICY SETTINGS
# =============================================================================
@dataclass
class DisplayPolicySettings:
    """
    Constants of the nest-or-flatten decision table.

    The numbers mirror what operations asked for on the live board; they are
    policy, not physics.
    """

    # Groups whose name contains one of these always keep nested subgroups
    always_nest_substrings: List[str] = field(
        default_factory=lambda: _get_env_list(
            "TANK_ALWAYS_NEST_GROUPS", "kalgoorlie"
        )
    )
    large_group_total_tanks: int = field(
        default_factory=lambda: _get_env_int("TANK_LARGE_GROUP_TOTAL", 20)
    )
    # Rule 2 nests when tanks > large_group_total_tanks AND
    # subgroups > large_group_subgroups_over (both exclusive)
    large_group_subgroups_over: int = field(
        default_factory=lambda: _get_env_int("TANK_LARGE_GROUP_SUBGROUPS", 1)
    )
    large_subgroup_tanks: int = field(
        default_factory=lambda: _get_env_int("TANK_LARGE_SUBGROUP", 10)
    )
    nest_substrings: List[str] = field(
        default_factory=lambda: _get_env_list("TANK_NEST_GROUPS", "gsf")
    )


# =============================================================================
# DATABASE SETTINGS
# =============================================================================
@dataclass
class DatabaseSettings:
    """MySQL database configuration - ALL from environment."""

    host: str = field(default_factory=lambda: _get_env("MYSQL_HOST", "localhost"))
    port: int = field(default_factory=lambda: _get_env_int("MYSQL_PORT", 3306))
    user: str = field(default_factory=lambda: _get_env("MYSQL_USER", "tank_reader"))
    password: str = field(default_factory=lambda: _get_env("MYSQL_PASSWORD", ""))
    database: str = field(
        default_factory=lambda: _get_env("MYSQL_DATABASE", "fuel_tanks")
    )
    charset: str = "utf8mb4"

    # View exposing one row per tank with group names already joined
    tanks_view: str = field(
        default_factory=lambda: _get_env("TANKS_VIEW", "tanks_with_rolling_avg")
    )
    connect_timeout: int = field(
        default_factory=lambda: _get_env_int("MYSQL_CONNECT_TIMEOUT", 10)
    )

    def get_connection_dict(self) -> Dict:
        """Return connection dictionary for pymysql."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
            "charset": self.charset,
            "connect_timeout": self.connect_timeout,
        }


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================
@dataclass
class AppSettings:
    """General application settings."""

    name: str = "Tank Board API"
    debug: bool = field(default_factory=lambda: _get_env_bool("DEBUG", False))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    version: str = "1.2.0"

    cors_origins: List[str] = field(
        default_factory=lambda: _get_env_list("CORS_ORIGINS", "http://localhost:5173")
    )
    policy_file: Path = field(
        default_factory=lambda: Path(
            _get_env(
                "TANK_POLICY_FILE", str(Path(__file__).parent / "tank_policy.yaml")
            )
        )
    )


# =============================================================================
# POLICY FILE
# =============================================================================
def _coerce(field_type: Any, value: Any) -> Any:
    """
    Cast a YAML value to the declared type of a settings field.

    Raises:
        ValueError: value cannot be read as that type
    """
    args = getattr(field_type, "__args__", ())

    if value is None:
        if type(None) in args:
            return None
        raise ValueError("null is not allowed")

    if getattr(field_type, "__origin__", None) is list:
        # A single substring written as a scalar
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError("expected a string or a list of strings")
        return [v.strip() for v in value if v.strip()]

    if field_type in (int, float):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValueError("expected a number")
        number = float(value)
        if not math.isfinite(number):
            raise ValueError("expected a finite number")
        if field_type is int:
            if not number.is_integer():
                raise ValueError("expected a whole number")
            return int(number)
        return number

    if isinstance(value, (dict, list)):
        raise ValueError("expected a string")
    text = str(value).strip()
    if text:
        return text
    if type(None) in args:
        return None
    raise ValueError("expected a non-empty string")


def _override(section: Any, values: Optional[Dict[str, Any]], label: str) -> Any:
    """
    Return a copy of a settings section with known keys from the YAML applied.

    Each value is cast to the type of the field it replaces. A value that
    cannot be cast is logged and the current value is kept.
    """
    if not values:
        return section
    if not isinstance(values, dict):
        logger.warning(f"⚠️ Ignoring '{label}' in policy file: expected a mapping")
        return section

    known = {f.name: f for f in fields(section)}
    unknown = sorted(set(values) - set(known))
    if unknown:
        logger.warning(f"⚠️ Unknown keys in '{label}' policy section: {unknown}")

    changes = {}
    for key, value in values.items():
        f = known.get(key)
        if f is None:
            continue
        try:
            changes[key] = _coerce(f.type, value)
        except (TypeError, ValueError) as e:
            logger.warning(
                f"⚠️ Ignoring {label}.{key}={value!r} in policy file: {e}"
            )

    return replace(section, **changes)


def load_policy_file(path: Path) -> Dict[str, Any]:
    """
    Read the YAML policy file.

    Returns an empty dict when the file is missing or unreadable so the
    environment defaults stay in force.
    """
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            policy = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"⚠️ Could not load policy file {path}: {e}")
        return {}

    if not isinstance(policy, dict):
        logger.warning(f"⚠️ Policy file {path} is not a mapping, ignoring it")
        return {}

    logger.info(f"✅ Loaded tank policy overrides from {path}")
    return policy


# =============================================================================
# GLOBAL SETTINGS INSTANCE
# =============================================================================
class Settings:
    """Global settings container - singleton pattern."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        """Initialize all settings."""
        self.app = AppSettings()
        self.database = DatabaseSettings()

        policy = load_policy_file(self.app.policy_file)
        self.classification = _override(
            ClassificationSettings(), policy.get("classification"), "classification"
        )
        self.grouping = _override(
            GroupingSettings(), policy.get("grouping"), "grouping"
        )
        self.display_policy = _override(
            DisplayPolicySettings(), policy.get("display_policy"), "display_policy"
        )

    def reload(self) -> "Settings":
        """Re-read environment and policy file."""
        self._initialize()
        return self

    def validate(self) -> List[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        c = self.classification

        if c.critical_percent > c.low_percent:
            warnings.append(
                "⚠️ critical_percent is above low_percent - low band is empty"
            )

        if c.critical_days > c.low_days:
            warnings.append("⚠️ critical_days is above low_days - low band is empty")

        if not self.database.password:
            warnings.append("ℹ️ MYSQL_PASSWORD not set")

        return warnings

    def to_dict(self) -> Dict:
        """Export settings as dictionary (for debugging, excludes secrets)."""
        return {
            "version": self.app.version,
            "debug": self.app.debug,
            "database_host": self.database.host,
            "tanks_view": self.database.tanks_view,
            "policy_file": str(self.app.policy_file),
            "classification": {
                f.name: getattr(self.classification, f.name)
                for f in fields(self.classification)
            },
            "grouping": {
                f.name: getattr(self.grouping, f.name) for f in fields(self.grouping)
            },
            "display_policy": {
                f.name: getattr(self.display_policy, f.name)
                for f in fields(self.display_policy)
            },
        }


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get global settings instance."""
    return settings
