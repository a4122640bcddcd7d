import argparse
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .constants import DefaultConfig, SupportedDatabases
from .domain.models import RelationshipDescriptor, RelationshipKind


logger = logging.getLogger(__name__)

PHP_NAMESPACE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\\[A-Za-z_][A-Za-z0-9_]*)*$")
PHP_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# --- Pydantic Models for Configuration Schema ---


class DatabaseSettings(BaseModel):
    """Schema for a single database connection within the DATABASES dict."""

    ENGINE: str = Field(
        ...,
        min_length=1,
        description="Django database engine (e.g., 'django.db.backends.postgresql').",
    )
    NAME: str = Field(..., min_length=1, description="Database name (file path for SQLite).")
    USER: Optional[str] = Field(None, description="Database user.")
    PASSWORD: Optional[str] = Field(None, description="Database password.")
    HOST: Optional[str] = Field(None, description="Database host address.")
    PORT: Optional[Union[str, int]] = Field(None, description="Database port number.")
    OPTIONS: Optional[Dict[str, Any]] = Field(
        default_factory=dict, description="Database engine specific options."
    )

    @field_validator("ENGINE")
    @classmethod
    def validate_engine(cls, v):
        if v not in SupportedDatabases.ALL:
            raise ValueError(
                f"Unsupported engine '{v}'. Supported engines: {', '.join(SupportedDatabases.ALL)}"
            )
        return v

    @field_validator("PORT", mode="before")
    @classmethod
    def validate_port(cls, v):
        """Ensure port is a number or string representation of one, and within range."""
        if v is None or v == "":
            return None
        if isinstance(v, int):
            port_num = v
        elif isinstance(v, str) and v.isdigit():
            port_num = int(v)
        else:
            raise ValueError(
                f"Port must be an integer or string containing only digits, got {type(v).__name__}"
            )

        if not 0 <= port_num <= 65535:
            raise ValueError(f"Port must be between 0 and 65535, got {port_num}")
        return port_num


class SpecialRelationship(BaseModel):
    """A relationship that is always added to a table's model."""

    kind: RelationshipKind
    method_name: str = Field(..., min_length=1)
    related_class_name: str = Field(..., min_length=1)
    local_key: Optional[str] = None
    foreign_key: Optional[str] = None
    pivot_table: Optional[str] = None

    @field_validator("method_name")
    @classmethod
    def check_method_name(cls, v):
        if not PHP_IDENTIFIER_RE.match(v):
            raise ValueError(f"'{v}' is not a valid PHP method name.")
        return v

    @model_validator(mode="after")
    def check_pivot_table(self) -> "SpecialRelationship":
        if self.kind is RelationshipKind.BELONGS_TO_MANY and not self.pivot_table:
            raise ValueError(f"belongsToMany relationship '{self.method_name}' needs a pivot_table.")
        return self

    def to_descriptor(self) -> RelationshipDescriptor:
        return RelationshipDescriptor(
            kind=self.kind,
            method_name=self.method_name,
            related_class_name=self.related_class_name,
            local_key=self.local_key,
            foreign_key=self.foreign_key,
            pivot_table=self.pivot_table,
        )


class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    model_config = ConfigDict(extra="ignore")

    databases: Dict[str, DatabaseSettings] = Field(
        ..., description="Django DATABASES setting dictionary."
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Directory the model files are written to.",
    )
    namespace: str = Field(
        DefaultConfig.NAMESPACE,
        min_length=1,
        description="PHP namespace of the generated models.",
    )
    tables: Optional[List[str]] = Field(
        None, description="Optional list of specific tables to generate."
    )
    relationships: bool = Field(
        DefaultConfig.GENERATE_RELATIONSHIPS,
        description="Generate relationship methods from foreign keys.",
    )
    force: bool = Field(
        DefaultConfig.FORCE_UPDATE,
        description="Patch existing model files with missing properties.",
    )
    schema_name: str = Field(
        DefaultConfig.POSTGRES_SCHEMA,
        alias="schema",
        min_length=1,
        description="PostgreSQL schema to introspect.",
    )
    special_relationships: Dict[str, List[SpecialRelationship]] = Field(
        default_factory=dict,
        description="Extra relationships per table name.",
    )

    # Internal field, usually added by load_config
    SECRET_KEY: Optional[str] = Field(
        None, description="Internal secret key for Django setup."
    )

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    @property
    def default_database(self) -> DatabaseSettings:
        return self.databases["default"]

    def special_relationship_descriptors(self) -> Dict[str, List[RelationshipDescriptor]]:
        return {
            table: [item.to_descriptor() for item in items]
            for table, items in self.special_relationships.items()
        }

    # --- Custom Validators ---

    @field_validator("namespace")
    @classmethod
    def check_namespace(cls, v):
        v = v.strip().strip("\\")
        if not PHP_NAMESPACE_RE.match(v):
            raise ValueError(
                f"'{v}' is not a valid PHP namespace. Use segments separated by backslashes, e.g. 'App\\Models'."
            )
        return v

    @field_validator("tables", mode="before")
    @classmethod
    def check_table_names(cls, v):
        """Accept a list or a comma separated string of non-empty table names."""
        if v is None:
            return None
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, list):
            raise ValueError("tables must be a list or a comma separated string.")
        names = []
        for item in v:
            if not isinstance(item, str):
                raise ValueError(f"Table names must be strings, found: {type(item).__name__}")
            if item.strip():
                names.append(item.strip())
        return names or None

    @model_validator(mode="after")
    def check_default_database_exists(self):
        """Ensure the 'databases' dictionary contains a 'default' key."""
        if "default" not in self.databases:
            raise ValueError(
                "The 'databases' configuration must contain a 'default' key specifying the database to introspect."
            )
        return self


# --- Validation Function (Internal) ---
def _validate_and_parse_config(config_dict: Dict[str, Any]) -> ToolConfigSchema:
    """
    Validates a raw configuration dictionary against the Pydantic schema.
    Prints detailed errors and exits on validation failure.
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully.")
        return validated_config
    except ValidationError as e:
        logger.error(
            "Configuration validation failed. Please check your config file or arguments."
        )
        print("\n--- Configuration Errors ---", file=sys.stderr)
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Top Level"

            print(f"  - Location: '{loc_str}'", file=sys.stderr)
            print(f"    Error: {error.get('msg', 'Unknown error')}", file=sys.stderr)

            if "ENGINE" in loc_parts:
                print(
                    f"    Hint: Allowed engines are: {', '.join(SupportedDatabases.ALL)}",
                    file=sys.stderr,
                )
            elif "namespace" in loc_parts:
                print("    Hint: Namespaces look like 'App\\Models'.", file=sys.stderr)
            elif "PORT" in loc_parts:
                print("    Hint: Port must be a number between 0 and 65535.", file=sys.stderr)
            elif "kind" in loc_parts:
                allowed = ", ".join(kind.value for kind in RelationshipKind)
                print(f"    Hint: Allowed relationship kinds are: {allowed}", file=sys.stderr)

        print("----------------------------", file=sys.stderr)
        sys.exit(1)


# --- Main Configuration Loading Function ---


def load_config(
    config_path: Optional[str], cli_args: argparse.Namespace
) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    Exits with error messages if validation fails.
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        try:
            config_file = Path(config_path)
            if config_file.is_file():
                with open(config_file, "r", encoding="utf-8") as f:
                    yaml_config = yaml.safe_load(f)
                    if yaml_config and isinstance(yaml_config, dict):
                        raw_config.update(yaml_config)
                        logger.debug(f"Loaded configuration from {config_path}")
                    elif yaml_config:
                        logger.warning(
                            f"Content in config file {config_path} is not a dictionary. Ignoring file content."
                        )
            else:
                logger.warning(
                    f"Config file not found at {config_path}. Using defaults and CLI arguments."
                )
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML file {config_path}: {e}")
            logger.warning("Proceeding with defaults and CLI arguments only.")

    # 2. Override with CLI arguments (only those explicitly provided)
    cli_dict = vars(cli_args)
    overridden_keys = set()
    for key, value in cli_dict.items():
        if value is not None and key != "databases" and key in ToolConfigSchema.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {overridden_keys}")

    # 3. Add internal SECRET_KEY if not present (needed for django.setup)
    if "SECRET_KEY" not in raw_config:
        raw_config["SECRET_KEY"] = os.urandom(50).hex()

    # 4. Validate the combined configuration dictionary
    validated_config: ToolConfigSchema = _validate_and_parse_config(raw_config)

    # 5. Resolve paths
    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())

    return validated_config
