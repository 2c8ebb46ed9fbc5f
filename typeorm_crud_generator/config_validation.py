# File: typeorm_crud_generator/config_validation.py
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .constants import DefaultConfig, SupportedDatabases
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_DECORATOR_PATTERN = re.compile(r"^@[A-Za-z_$][\w$]*(\.[A-Za-z_$][\w$]*)*$")


# --- Enumerated Options ---
class FileCase(str, Enum):
    """Case applied to generated file names."""

    PASCAL = "pascal"
    PARAM = "param"
    KEBAB = "kebab"  # same transform as param
    CAMEL = "camel"
    NONE = "none"


class EntityCase(str, Enum):
    """Case applied to generated class names."""

    PASCAL = "pascal"
    CAMEL = "camel"
    NONE = "none"


class PropertyCase(str, Enum):
    """Case applied to generated property names."""

    PASCAL = "pascal"
    CAMEL = "camel"
    SNAKE = "snake"
    NONE = "none"


class EndOfLine(str, Enum):
    LF = "LF"
    CRLF = "CRLF"


class PropertyVisibility(str, Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    NONE = "none"


class ExportType(str, Enum):
    NAMED = "named"
    DEFAULT = "default"


class StrictMode(str, Enum):
    """Marker appended to property names: none, optional ('?') or definite assignment ('!')."""

    NONE = "none"
    OPTIONAL = "?"
    DEFINITE = "!"


class CollisionPolicy(str, Enum):
    """What to do when two entities produce the same file name."""

    OVERWRITE = "overwrite"
    ERROR = "error"


class DatabaseType(str, Enum):
    MYSQL = SupportedDatabases.MYSQL
    POSTGRES = SupportedDatabases.POSTGRES
    MSSQL = SupportedDatabases.MSSQL
    ORACLE = SupportedDatabases.ORACLE
    MARIADB = SupportedDatabases.MARIADB
    SQLITE = SupportedDatabases.SQLITE


# --- Pydantic Models for Configuration Schema ---
class GenerationConfig(BaseModel):
    """
    Options controlling naming, typing and annotations of the generated code.

    Immutable once built. Field names are snake_case; the camelCase option
    names (``resultsPath``, ``convertCaseFile``, ...) are accepted as well.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    results_path: str = Field(
        DefaultConfig.RESULTS_PATH,
        min_length=1,
        description="Directory the generated files are written to.",
    )
    pluralize_names: bool = Field(
        DefaultConfig.PLURALIZE_NAMES,
        description="Pluralize entity names where a collection is meant (routes, lists).",
    )
    convert_case_file: FileCase = Field(DefaultConfig.CONVERT_CASE_FILE)
    convert_case_entity: EntityCase = Field(DefaultConfig.CONVERT_CASE_ENTITY)
    convert_case_property: PropertyCase = Field(DefaultConfig.CONVERT_CASE_PROPERTY)
    convert_eol: EndOfLine = Field(DefaultConfig.CONVERT_EOL)
    property_visibility: PropertyVisibility = Field(DefaultConfig.PROPERTY_VISIBILITY)
    lazy: bool = Field(False, description="Wrap relation types in Promise<...>.")
    active_record: bool = Field(False, description="Entities extend TypeORM's BaseEntity.")
    generate_constructor: bool = Field(
        False, description="Entities get a constructor taking Partial<Entity>."
    )
    relation_ids: bool = Field(False, description="Emit @RelationId properties.")
    strict_mode: StrictMode = Field(DefaultConfig.STRICT_MODE)
    skip_schema: bool = Field(False, description="Leave schema/database out of @Entity.")
    index_file: bool = Field(False, description="Generate an index.ts re-exporting all entities.")
    export_type: ExportType = Field(DefaultConfig.EXPORT_TYPE)

    # Permission decorators on controller routes
    add_permission_identifier: bool = Field(False)
    permission_identifier: str = Field(DefaultConfig.PERMISSION_IDENTIFIER, min_length=2)
    permission_identifier_prefix: str = Field(
        DefaultConfig.PERMISSION_IDENTIFIER_PREFIX,
        validation_alias=AliasChoices(
            "permission_identifier_prefix",
            "permissionIdentifierPrefix",
            "perMissionIdentifierPrefix",
        ),
    )
    permission_import_path: str = Field(
        "",
        description="Module the permission decorator is imported from; no import when empty.",
    )

    # Swagger decorators on controllers, DTOs and entities
    add_swagger_identifier: bool = Field(False)

    include_related_tables: bool = Field(
        True, description="Keep relations to other tables in the generated code."
    )
    on_file_name_collision: CollisionPolicy = Field(CollisionPolicy.OVERWRITE)

    formatter_command: Tuple[str, ...] = Field(
        tuple(DefaultConfig.FORMATTER_COMMAND),
        description="Command reading TypeScript on stdin and writing it formatted to stdout.",
    )
    formatter_timeout: float = Field(DefaultConfig.FORMATTER_TIMEOUT, gt=0)

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access from templates."""
        return getattr(self, key)

    @property
    def eol(self) -> str:
        return "\r\n" if self.convert_eol == EndOfLine.CRLF else "\n"

    @field_validator("results_path")
    @classmethod
    def resolve_results_path(cls, v: str) -> str:
        return str(Path(v).expanduser().resolve())

    @field_validator("permission_identifier")
    @classmethod
    def check_decorator_syntax(cls, v: str) -> str:
        """The permission identifier is spliced in as a decorator, e.g. '@permission'."""
        if not _DECORATOR_PATTERN.match(v):
            raise ValueError(f"'{v}' is not a decorator name such as '@permission'")
        return v

    @field_validator("formatter_command", mode="before")
    @classmethod
    def split_formatter_command(cls, v: Any) -> Any:
        if isinstance(v, str):
            return tuple(v.split())
        return v

    @model_validator(mode="after")
    def check_permission_options(self) -> "GenerationConfig":
        if self.permission_import_path and not self.add_permission_identifier:
            logger.warning(
                "'permission_import_path' is set but 'add_permission_identifier' is False. "
                "The import will not be generated."
            )
        if not self.formatter_command:
            raise ValueError("formatter_command cannot be empty")
        return self


class ConnectionOptions(BaseModel):
    """Connection descriptor handed to the schema provider."""

    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)

    host: str = Field("localhost", min_length=1)
    port: Optional[int] = Field(default=None, description="Defaults to the engine's port.")
    user: str = Field("")
    password: str = Field("")
    database_names: List[str] = Field(default_factory=list)
    database_type: DatabaseType = Field(DatabaseType.MYSQL)
    schema_names: List[str] = Field(default_factory=list)
    ssl: bool = Field(False)
    skip_tables: List[str] = Field(default_factory=list)
    only_tables: List[str] = Field(default_factory=list)
    include_related_tables: bool = Field(True)

    @field_validator("port", mode="before")
    @classmethod
    def validate_port(cls, v: Any) -> Optional[int]:
        """Ensure port is a number or string representation of one, and within range."""
        if v is None or v == "":
            return None
        if isinstance(v, bool):
            raise ValueError("Port must be an integer, got bool")
        if isinstance(v, int):
            port_num = v
        elif isinstance(v, str):
            if not v.isdigit():
                raise ValueError(f"Port must be a number or string containing only digits, got '{v}'")
            port_num = int(v)
        else:
            raise ValueError(f"Port must be an integer or string containing digits, got {type(v).__name__}")

        if not 0 <= port_num <= 65535:
            raise ValueError(f"Port must be between 0 and 65535, got {port_num}")
        return port_num

    @field_validator("database_names", "schema_names", "skip_tables", "only_tables", mode="before")
    @classmethod
    def check_name_list(cls, v: Any) -> List[str]:
        """Accept comma separated strings or lists; items must be non-empty strings."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple)):
            raise ValueError("Expected a list of names or a comma separated string.")
        processed_list = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(f"Item at index {index} must be a string, found: {type(item).__name__}")
            stripped_item = item.strip()
            if stripped_item:
                processed_list.append(stripped_item)
        return processed_list

    @model_validator(mode="after")
    def apply_default_port(self) -> "ConnectionOptions":
        if self.port is None:
            self.port = SupportedDatabases.DEFAULT_PORTS[self.database_type.value]
        overlap = set(self.only_tables) & set(self.skip_tables)
        if overlap:
            logger.warning(f"Tables listed in both only_tables and skip_tables will be skipped: {sorted(overlap)}")
        return self


# --- Validation Functions ---
def _describe_validation_error(e: ValidationError) -> List[str]:
    lines = []
    for error in e.errors():
        loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
        loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
        lines.append(f"{loc_str}: {error.get('msg', 'Unknown validation error')}")
    return lines


def build_generation_config(
    overrides: Optional[Union[Mapping[str, Any], GenerationConfig]] = None
) -> GenerationConfig:
    """
    Merge user overrides onto the documented defaults and validate the result.

    Raises:
        ConfigurationError: If any option is unknown or has an invalid value
    """
    if isinstance(overrides, GenerationConfig):
        return overrides
    try:
        config = GenerationConfig.model_validate(dict(overrides or {}))
    except ValidationError as e:
        problems = _describe_validation_error(e)
        raise ConfigurationError(
            f"Invalid generation options ({len(problems)} problem(s))",
            context={f"problem {i + 1}": problem for i, problem in enumerate(problems)},
        ) from e
    logger.debug("Generation options parsed and validated successfully.")
    return config


def build_connection_options(
    overrides: Optional[Union[Mapping[str, Any], ConnectionOptions]] = None
) -> ConnectionOptions:
    """Validate a connection descriptor, filling defaults."""
    if isinstance(overrides, ConnectionOptions):
        return overrides
    try:
        return ConnectionOptions.model_validate(dict(overrides or {}))
    except ValidationError as e:
        problems = _describe_validation_error(e)
        raise ConfigurationError(
            f"Invalid connection options ({len(problems)} problem(s))",
            context={f"problem {i + 1}": problem for i, problem in enumerate(problems)},
        ) from e


def default_generation_options() -> Dict[str, Any]:
    """The documented default option record, keyed by field name."""
    return GenerationConfig().model_dump(mode="json")


def _normalize_option_keys(model_cls, raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Rename camelCase / legacy option keys to field names so later overrides replace them."""
    key_map: Dict[str, str] = {}
    for name, field_info in model_cls.model_fields.items():
        key_map[name] = name
        if field_info.alias:
            key_map[field_info.alias] = name
        if isinstance(field_info.validation_alias, AliasChoices):
            for choice in field_info.validation_alias.choices:
                if isinstance(choice, str):
                    key_map[choice] = name
    return {key_map.get(key, key): value for key, value in raw.items()}


def _read_yaml_config(config_path: str) -> Dict[str, Any]:
    config_file = Path(config_path)
    if not config_file.is_file():
        logger.warning(f"Config file not found at {config_path}. Using defaults and CLI arguments.")
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Error parsing YAML file {config_path}: {e}", context={"config_file": config_path}
        ) from e
    if yaml_config is None:
        return {}
    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            f"Content in config file {config_path} is not a mapping.",
            context={"config_file": config_path},
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return yaml_config


def load_config(
    config_path: Optional[str],
    generation_overrides: Optional[Mapping[str, Any]] = None,
    connection_overrides: Optional[Mapping[str, Any]] = None,
) -> Tuple[GenerationConfig, ConnectionOptions]:
    """
    Load the YAML config file, apply explicitly given CLI overrides, validate.

    The file may hold a ``generation`` section and a ``connection`` section.
    Overrides whose value is ``None`` are treated as not given.
    """
    raw_generation: Dict[str, Any] = {}
    raw_connection: Dict[str, Any] = {}

    if config_path:
        yaml_config = _read_yaml_config(config_path)
        raw_generation.update(_normalize_option_keys(GenerationConfig, yaml_config.get("generation") or {}))
        raw_connection.update(_normalize_option_keys(ConnectionOptions, yaml_config.get("connection") or {}))

    for model_cls, raw, overrides in (
        (GenerationConfig, raw_generation, generation_overrides),
        (ConnectionOptions, raw_connection, connection_overrides),
    ):
        given = {key: value for key, value in (overrides or {}).items() if value is not None}
        if given:
            logger.debug(f"Overridden config keys from CLI arguments: {sorted(given)}")
        raw.update(_normalize_option_keys(model_cls, given))

    logger.info("Validating final configuration...")
    generation_config = build_generation_config(raw_generation)
    connection_options = build_connection_options(raw_connection)
    return generation_config, connection_options
