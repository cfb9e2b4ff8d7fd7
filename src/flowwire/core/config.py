# src/flowwire/core/config.py
"""Configuration schema and loading for flowwire.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Every field has a working default, so FlowwireSettings() is a complete
configuration and a settings file is optional.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from flowwire.contracts.enums import NodeCategory


class ValidationSettings(BaseModel):
    """Connection validator behavior."""

    model_config = {"frozen": True}

    allow_when_catalog_not_ready: bool = Field(
        default=True,
        description=(
            "Decision taken for connections proposed while the node type catalog is still "
            "loading. True keeps the editor usable during startup; False blocks until ready."
        ),
    )
    enforce_json_shapes: bool = Field(
        default=True,
        description="Reject JSON connections whose current source value violates the target handle's json_shape",
    )
    reject_duplicate_edges: bool = Field(
        default=True,
        description="Reject a candidate whose four endpoints match an existing edge",
    )


class ActivationSettings(BaseModel):
    """Activation evaluator behavior."""

    model_config = {"frozen": True}

    cache_size: int = Field(default=1024, ge=0, description="Max memoized activation records (0 disables caching)")
    use_name_patterns: bool = Field(
        default=True,
        description="Classify node types without a declared capability by matching their type name",
    )
    transformation_patterns: tuple[str, ...] = Field(
        default=("turnToUppercase", "transform", "turn", "convert"),
        description="Case-insensitive substrings marking a node type as a transformation",
    )
    view_output_types: tuple[str, ...] = Field(default=("viewOutput", "viewOutputV2U"))
    json_test_types: tuple[str, ...] = Field(default=("testJson",))
    output_fields: tuple[str, ...] = Field(
        default=("text", "value", "output", "heldText"),
        description="Node data fields that carry a node's output",
    )

    @field_validator("output_fields")
    @classmethod
    def validate_output_fields(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("output_fields must name at least one field")
        return v


class CategoryRule(BaseModel):
    """Connection policy declared by one source category.

    allowed_connections=None means "no allow-list"; an empty tuple means
    the category may not connect to anything.
    """

    model_config = {"frozen": True}

    allowed_connections: tuple[NodeCategory, ...] | None = None
    incompatible_with: tuple[NodeCategory, ...] = ()


# Allow-lists of the classic category registry. Strict: it
# forbids same-category links such as create→create.
STRICT_CATEGORY_RULES: dict[NodeCategory, CategoryRule] = {
    NodeCategory.CREATE: CategoryRule(
        allowed_connections=(NodeCategory.VIEW, NodeCategory.TRIGGER, NodeCategory.TEST),
    ),
    NodeCategory.VIEW: CategoryRule(
        allowed_connections=(NodeCategory.CREATE, NodeCategory.TRIGGER, NodeCategory.TEST, NodeCategory.CYCLE),
    ),
    NodeCategory.TRIGGER: CategoryRule(
        allowed_connections=(NodeCategory.CREATE, NodeCategory.VIEW, NodeCategory.CYCLE),
    ),
    NodeCategory.TEST: CategoryRule(
        allowed_connections=(NodeCategory.CREATE, NodeCategory.VIEW, NodeCategory.TRIGGER, NodeCategory.CYCLE),
    ),
    NodeCategory.CYCLE: CategoryRule(
        allowed_connections=(NodeCategory.CREATE, NodeCategory.VIEW, NodeCategory.TRIGGER),
        incompatible_with=(NodeCategory.TEST,),
    ),
}

# Deny-lists only. Keeps the cycle/test exclusion without blocking
# same-category chains.
PERMISSIVE_CATEGORY_RULES: dict[NodeCategory, CategoryRule] = {
    NodeCategory.CYCLE: CategoryRule(incompatible_with=(NodeCategory.TEST,)),
}


class CategoryPolicySettings(BaseModel):
    """Category-to-category connection policy (data, not code)."""

    model_config = {"frozen": True}

    preset: Literal["permissive", "strict", "none"] = "permissive"
    rules: dict[NodeCategory, CategoryRule] | None = Field(
        default=None,
        description="Explicit rules; replaces the preset table entirely when given",
    )
    conflicts: tuple[tuple[NodeCategory, NodeCategory], ...] = Field(
        default=((NodeCategory.CYCLE, NodeCategory.TEST),),
        description="Category pairs that may never be linked, in either direction",
    )

    def resolved_rules(self) -> dict[NodeCategory, CategoryRule]:
        """Rules in effect after applying preset/override precedence."""
        if self.rules is not None:
            return dict(self.rules)
        if self.preset == "strict":
            return dict(STRICT_CATEGORY_RULES)
        if self.preset == "permissive":
            return dict(PERMISSIVE_CATEGORY_RULES)
        return {}


class LoggingSettings(BaseModel):
    """Logging output configuration."""

    model_config = {"frozen": True}

    json_output: bool = False
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def uppercase_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class FlowwireSettings(BaseModel):
    """Top-level flowwire configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    registry_path: Path | None = Field(
        default=None,
        description="YAML/JSON node type registry loaded by the default catalog providers",
    )
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    activation: ActivationSettings = Field(default_factory=ActivationSettings)
    categories: CategoryPolicySettings = Field(default_factory=CategoryPolicySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="after")
    def validate_registry_suffix(self) -> "FlowwireSettings":
        if self.registry_path is not None and self.registry_path.suffix.lower() not in {".yaml", ".yml", ".json"}:
            raise ValueError(f"registry_path must be a .yaml, .yml or .json file, got '{self.registry_path}'")
        return self


def load_settings(config_path: Path) -> FlowwireSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FLOWWIRE_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: FLOWWIRE_ACTIVATION__CACHE_SIZE for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FLOWWIRE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lowercase_keys(raw_config)

    registry_path = raw_config.get("registry_path")
    if isinstance(registry_path, str) and not Path(registry_path).is_absolute():
        raw_config["registry_path"] = config_path.parent / registry_path

    return FlowwireSettings(**raw_config)


def _lowercase_keys(value: Any) -> Any:
    """Recursively lowercase dict keys (Dynaconf uppercases nested env overrides)."""
    if isinstance(value, dict):
        return {(k.lower() if isinstance(k, str) else k): _lowercase_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lowercase_keys(v) for v in value]
    return value
