"""Query guard: access policy + masking policy behind one facade.

Loads config from env vars (primary) and an optional YAML file, then builds
the immutable QueryGuard the tools consult for every request.
"""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from pgmcp.governance.access import (
    AccessDecision,
    AccessLevel,
    AccessPolicy,
    decide,
)
from pgmcp.governance.masking import (
    FieldDescriptor,
    HiddenTable,
    MaskedResult,
    MaskingPolicy,
    filter_schema,
    filter_tables,
    mask_result,
)

logger = logging.getLogger(__name__)


@dataclass
class GuardConfig:
    """Parsed guard configuration."""

    query_level: str = AccessLevel.READONLY.value
    allowed_commands: list[str] = field(default_factory=list)
    masking_enabled: bool = True
    hidden_tables: list[str] = field(default_factory=list)
    hidden_columns: list[str] = field(default_factory=list)
    sensitive_fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class QueryGuard:
    """Resolved guard: the runtime enforcement object.

    Built once at startup and only read afterwards, so concurrent tool
    calls can share it.
    """

    access: AccessPolicy
    masking: MaskingPolicy

    def classify_and_decide(self, sql: str) -> AccessDecision:
        return decide(sql, self.access)

    def apply_masking(
        self, rows: list[dict[str, Any]], fields: list[FieldDescriptor]
    ) -> MaskedResult:
        return mask_result(rows, fields, self.masking)

    def filter_table_list(self, tables: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return filter_tables(tables, self.masking)

    def filter_schema(
        self, rows: list[dict[str, Any]], requested_table: Optional[str] = None
    ) -> Union[list[dict[str, Any]], HiddenTable]:
        return filter_schema(rows, self.masking, table=requested_table)

    def is_table_hidden(self, table: str) -> bool:
        return self.masking.is_table_hidden(table)


def _load_yaml_config(path: str) -> dict:
    """Load guard config from YAML file."""
    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Guard config file not found: {path}")
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def _parse_env_list(env_var: str) -> Optional[list[str]]:
    """Parse comma-separated env var into list. Returns None if unset."""
    val = os.environ.get(env_var, "").strip()
    if not val:
        return None
    return [item.strip() for item in val.split(",") if item.strip()]


def _yaml_list(section: dict, key: str) -> list[str]:
    """Read a list setting from YAML. A string is split on commas."""
    value = section.get(key)
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, list):
        items = (str(item).strip() for item in value if item is not None)
        return [item for item in items if item]
    logger.warning(
        f"Ignoring guard setting '{key}': expected a list, got {type(value).__name__}"
    )
    return []


def _parse_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() != "false"


def load_guard_config() -> GuardConfig:
    """Load guard config from env vars + optional YAML.

    Env vars take precedence over YAML for all settings.
    """
    config = GuardConfig()

    yaml_path = os.environ.get("POSTGRES_GUARD_CONFIG", "")
    yaml_data = {}
    if yaml_path:
        yaml_data = _load_yaml_config(yaml_path)

    # Access control
    access_section = yaml_data.get("access") or {}
    config.query_level = (
        os.environ.get("POSTGRES_QUERY_LEVEL")
        or access_section.get("level")
        or AccessLevel.READONLY.value
    )
    config.allowed_commands = _parse_env_list("POSTGRES_ALLOWED_COMMANDS") or _yaml_list(
        access_section, "allowed_commands"
    )

    # Masking and visibility
    masking_section = yaml_data.get("masking") or {}
    config.masking_enabled = _parse_bool(
        os.environ.get("POSTGRES_DATA_MASKING", masking_section.get("enabled")),
        default=True,
    )
    config.hidden_tables = _parse_env_list("POSTGRES_HIDDEN_TABLES") or _yaml_list(
        masking_section, "hidden_tables"
    )
    config.hidden_columns = _parse_env_list("POSTGRES_HIDDEN_COLUMNS") or _yaml_list(
        masking_section, "hidden_columns"
    )
    config.sensitive_fields = _parse_env_list("POSTGRES_SENSITIVE_FIELDS") or _yaml_list(
        masking_section, "sensitive_fields"
    )

    return config


def _resolve_level(name: str) -> AccessLevel:
    try:
        return AccessLevel(name.strip().lower())
    except ValueError:
        logger.warning(f"Unknown query level '{name}', falling back to readonly")
        return AccessLevel.READONLY


def build_query_guard(config: GuardConfig = None) -> QueryGuard:
    """Build the runtime query guard from config."""
    if config is None:
        config = load_guard_config()

    access = AccessPolicy.for_level(
        _resolve_level(config.query_level), config.allowed_commands
    )
    masking = MaskingPolicy.build(
        enabled=config.masking_enabled,
        hidden_tables=config.hidden_tables,
        hidden_columns=config.hidden_columns,
        extra_sensitive_fields=config.sensitive_fields,
    )

    logger.info(
        f"Query guard: level={access.level.value}, "
        f"commands={len(access.permitted_commands)}, "
        f"masking={'on' if masking.enabled else 'off'}, "
        f"hidden_tables={len(masking.hidden_tables)}, "
        f"hidden_columns={len(masking.hidden_columns)}, "
        f"sensitive_fields={len(masking.sensitive_fields)}"
    )
    return QueryGuard(access=access, masking=masking)
