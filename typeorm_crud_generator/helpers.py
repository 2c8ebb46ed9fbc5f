"""
Template helper registry.

Templates call a fixed set of named helpers (``toEntityName``,
``toRelation``, ``toSwaggerType``, ...). ``TemplateHelpers`` binds them to a
single ``GenerationConfig``; every generation run builds its own instance and
its own Jinja2 environment, so runs with different options never share
helper state.
"""

import json
import logging
import re
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from jinja2 import Environment

from .config_validation import (
    EntityCase,
    ExportType,
    FileCase,
    GenerationConfig,
    PropertyCase,
    PropertyVisibility,
    StrictMode,
)
from .constants import (
    INTEGER_DB_TYPE_MARKER,
    LAZY_RELATION_WRAPPER,
    SWAGGER_DATE_FORMAT,
    SWAGGER_DATE_TYPE,
    SWAGGER_INT_FORMAT,
    SWAGGER_TYPE_MAP,
    SwaggerTypes,
    TO_MANY_RELATIONS,
    PermissionOperations,
)
from .domain.naming import convert_case, pluralize, to_camel_case
from .exceptions import raise_configuration_error


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

_ALLOWED_CASES = {
    "convert_case_entity": {case.value for case in EntityCase},
    "convert_case_file": {case.value for case in FileCase},
    "convert_case_property": {case.value for case in PropertyCase},
}


def _value(option: Any) -> Any:
    """Plain value of an enum option."""
    return option.value if isinstance(option, Enum) else option


def to_ts_literal(value: Any) -> str:
    """
    Serialize a value as a TypeScript literal.

    Object keys that are valid identifiers are written without quotes; every
    other part is plain JSON, so the represented value does not change.

    Example:
        >>> to_ts_literal({"name": "id", "nullable": True, "odd-key": 1})
        '{ name: "id", nullable: true, "odd-key": 1 }'
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = []
        for key, item in value.items():
            key = str(key)
            rendered_key = key if _IDENTIFIER.match(key) else json.dumps(key, ensure_ascii=False)
            items.append(f"{rendered_key}: {to_ts_literal(item)}")
        return "{ " + ", ".join(items) + " }"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(to_ts_literal(item) for item in value) + "]"
    return json.dumps(value, ensure_ascii=False, default=str)


class TemplateHelpers:
    """
    Helper functions exposed to templates, bound to one ``GenerationConfig``.

    Case helpers return an empty string for a missing name (and log a
    warning) so templates still render with incomplete data. An option value
    outside its known set raises ``ConfigurationError`` the moment a helper
    dispatches on it.
    """

    def __init__(self, config: GenerationConfig):
        self.config = config

    # --- Case transforms ---

    def _transform(self, name: Any, option: str, helper: str) -> str:
        if not name or not isinstance(name, str):
            logger.warning(f"{helper} received invalid input: {name!r}. Rendering an empty name.")
            return ""
        style = _value(getattr(self.config, option))
        if style not in _ALLOWED_CASES[option]:
            raise_configuration_error(
                f"Unknown case style '{style}' for {option}",
                option=option,
                context={"allowed": sorted(_ALLOWED_CASES[option])},
            )
        return convert_case(name, style)

    def to_entity_name(self, name: Any) -> str:
        return self._transform(name, "convert_case_entity", "toEntityName")

    def to_file_name(self, name: Any) -> str:
        return self._transform(name, "convert_case_file", "toFileName")

    def to_property_name(self, name: Any) -> str:
        return self._transform(name, "convert_case_property", "toPropertyName")

    @staticmethod
    def to_case(name: Any, style: str) -> str:
        """Fixed case conversion chosen by the template itself (routes, variables)."""
        if not name or not isinstance(name, str):
            logger.warning(f"toCase received invalid input: {name!r}. Rendering an empty name.")
            return ""
        try:
            return convert_case(name, style)
        except KeyError:
            raise ValueError(f"Unknown case style '{style}' requested by template")

    def pluralize(self, word: Any) -> str:
        """Plural form when ``pluralize_names`` is on, the word itself otherwise."""
        if not self.config.pluralize_names:
            return word if isinstance(word, str) else ""
        return pluralize(word)

    # --- Relations and columns ---

    def to_relation(self, entity_type: Any, relation_type: Any) -> str:
        """
        Property type for a relation: ``T[]`` for to-many relations, then
        ``Promise<...>`` around it when lazy relations are enabled.
        """
        if not entity_type or not isinstance(entity_type, str):
            logger.warning(f"toRelation received invalid entityType: {entity_type!r}")
            return ""
        result = entity_type
        if _value(relation_type) in TO_MANY_RELATIONS:
            result = f"{result}[]"
        if self.config.lazy:
            result = LAZY_RELATION_WRAPPER.format(type=result)
        return result

    def to_column_property(self, column) -> str:
        property_name = self.to_property_name(column.name)
        if column.nullable:
            property_name += "?"
        return property_name

    def to_column_type(self, column) -> str:
        column_type = column.tsc_type
        if column.array:
            column_type += "[]"
        return column_type

    @staticmethod
    def is_integer_column(column) -> bool:
        """Number column stored as an integer; an unspecified database type counts as ``int``."""
        if getattr(column, "tsc_type", None) != "number" or getattr(column, "array", False):
            return False
        db_type = getattr(column, "db_type", None)
        return not db_type or INTEGER_DB_TYPE_MARKER in db_type

    @staticmethod
    def is_primary_key(column) -> bool:
        return bool(column.primary)

    @staticmethod
    def is_generated(column) -> bool:
        return bool(column.generated)

    # --- Swagger ---

    @staticmethod
    def to_swagger_type(column) -> str:
        """Swagger type for a column; unknown TypeScript types map to String."""
        return SWAGGER_TYPE_MAP.get(getattr(column, "tsc_type", None), SwaggerTypes.STRING)

    @staticmethod
    def to_swagger_format(column) -> Optional[str]:
        """'date-time' for dates, 'int32' for integer columns, None otherwise."""
        tsc_type = getattr(column, "tsc_type", None)
        if tsc_type == SWAGGER_DATE_TYPE:
            return SWAGGER_DATE_FORMAT
        db_type = getattr(column, "db_type", None) or ""
        if tsc_type == "number" and INTEGER_DB_TYPE_MARKER in db_type:
            return SWAGGER_INT_FORMAT
        return None

    # --- Tokens spliced into the source ---

    def print_property_visibility(self) -> str:
        visibility = _value(self.config.property_visibility)
        if visibility not in {v.value for v in PropertyVisibility}:
            raise_configuration_error(f"Unknown property visibility '{visibility}'", option="property_visibility")
        return "" if visibility == PropertyVisibility.NONE.value else f"{visibility} "

    def default_export(self) -> str:
        export_type = _value(self.config.export_type)
        if export_type not in {e.value for e in ExportType}:
            raise_configuration_error(f"Unknown export type '{export_type}'", option="export_type")
        return "default" if export_type == ExportType.DEFAULT.value else ""

    def local_import(self, entity_name: Any) -> str:
        """Import clause for a generated class: ``Name`` or ``{ Name }``."""
        if not entity_name or not isinstance(entity_name, str):
            logger.warning(f"localImport received invalid entityName: {entity_name!r}")
            return ""
        return entity_name if self.default_export() else f"{{ {entity_name} }}"

    def strict_mode(self) -> str:
        marker = _value(self.config.strict_mode)
        if marker not in {m.value for m in StrictMode}:
            raise_configuration_error(f"Unknown strict mode '{marker}'", option="strict_mode")
        return "" if marker == StrictMode.NONE.value else marker

    def permission(self, entity_name: Any, operation: str) -> str:
        """
        Permission decorator for a controller route, e.g.
        ``@permission('system:userProfile:list')``; empty when disabled.
        """
        if not self.config.add_permission_identifier:
            return ""
        if operation not in PermissionOperations.ALL:
            raise ValueError(f"Unknown permission operation '{operation}'")
        if not entity_name or not isinstance(entity_name, str):
            logger.warning(f"permission received invalid entityName: {entity_name!r}")
            return ""
        parts = [self.config.permission_identifier_prefix, to_camel_case(entity_name), operation]
        key = ":".join(part for part in parts if part)
        return f"{self.config.permission_identifier}('{key}')"

    def permission_decorator_name(self) -> str:
        """Bare decorator name, used for the import statement."""
        return self.config.permission_identifier.lstrip("@").split(".")[0]

    @staticmethod
    def escape_newlines(text: Any) -> Any:
        if isinstance(text, str):
            return text.replace("\r\n", "\\n").replace("\n", "\\n")
        return text

    # --- Registry ---

    def as_registry(self) -> Dict[str, Callable[..., Any]]:
        """Template-facing helper names mapped to their implementations."""
        return {
            "json": to_ts_literal,
            "toEntityName": self.to_entity_name,
            "toFileName": self.to_file_name,
            "toPropertyName": self.to_property_name,
            "toCase": self.to_case,
            "toRelation": self.to_relation,
            "toColumnProperty": self.to_column_property,
            "toColumnType": self.to_column_type,
            "toSwaggerType": self.to_swagger_type,
            "toSwaggerFormat": self.to_swagger_format,
            "isIntegerColumn": self.is_integer_column,
            "isPrimaryKey": self.is_primary_key,
            "isGenerated": self.is_generated,
            "printPropertyVisibility": self.print_property_visibility,
            "defaultExport": self.default_export,
            "localImport": self.local_import,
            "strictMode": self.strict_mode,
            "permission": self.permission,
            "permissionDecoratorName": self.permission_decorator_name,
            "pluralize": self.pluralize,
            "escapeNewlines": self.escape_newlines,
            "and": lambda v1, v2: v1 and v2,
            "or": lambda v1, v2: v1 or v2,
            "eq": lambda v1, v2: v1 == v2,
            "ne": lambda v1, v2: v1 != v2,
            "gt": lambda v1, v2: v1 > v2,
            "gte": lambda v1, v2: v1 >= v2,
            "lt": lambda v1, v2: v1 < v2,
            "lte": lambda v1, v2: v1 <= v2,
        }

    def register(self, env: Environment) -> Environment:
        """
        Install the helpers into a Jinja2 environment.

        Every helper is a global; ``json``, ``pluralize`` and the case
        transforms are also filters, and the comparisons are also tests
        (``{% if count is gte 2 %}``). Registering again replaces the previous
        helpers under the same names.
        """
        registry = self.as_registry()
        env.globals.update(registry)
        for name in ("json", "pluralize", "toEntityName", "toFileName", "toPropertyName", "escapeNewlines"):
            env.filters[name] = registry[name]
        for name in ("eq", "ne", "gt", "gte", "lt", "lte"):
            env.tests[name] = registry[name]
        return env
