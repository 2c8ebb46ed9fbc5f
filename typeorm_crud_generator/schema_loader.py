"""
Schema model input for the TypeORM CRUD generator.

Database introspection happens outside this package; it hands over a dump
of the customized entity model as JSON or YAML. This module turns that dump
into ``Entity`` objects and applies the table filters from the connection
descriptor.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

import yaml

from .config_validation import ConnectionOptions, GenerationConfig
from .domain.models import Column, Entity, Index, Relation, RelationId
from .domain.naming import to_snake_case
from .domain.relationships import dangling_relations, strip_relations
from .exceptions import SchemaModelError


logger = logging.getLogger(__name__)

# Keys used by the introspection dump that differ from our attribute names
_ENTITY_RENAMES = {"tsc_name": "name"}
_COLUMN_RENAMES = {
    "tsc_name": "name",
    "type": "db_type",
    "is_primary": "primary",
    "is_nullable": "nullable",
    "is_array": "array",
    "is_unique": "unique",
    "enum": "enum_values",
}
# Column attributes that may also live inside an ``options`` object
_COLUMN_OPTION_KEYS = {
    "name": "sql_name",
    "nullable": "nullable",
    "unique": "unique",
    "array": "array",
    "length": "length",
    "width": "width",
    "precision": "precision",
    "scale": "scale",
    "comment": "comment",
    "enum": "enum_values",
    "default": "default",
}


def _normalize_keys(data: Mapping[str, Any], renames: Mapping[str, str]) -> Dict[str, Any]:
    """snake_case every top-level key, then apply the rename table."""
    normalized = {}
    for key, value in data.items():
        snake_key = to_snake_case(key)
        normalized[renames.get(snake_key, snake_key)] = value
    return normalized


def _only_known(data: Dict[str, Any], known: Iterable[str], kind: str, owner: str) -> Dict[str, Any]:
    known = set(known)
    unknown = sorted(set(data) - known)
    if unknown:
        logger.debug(f"Ignoring unknown {kind} keys on '{owner}': {unknown}")
    return {key: value for key, value in data.items() if key in known}


def column_from_dict(data: Mapping[str, Any], entity_name: str = "?") -> Column:
    values = _normalize_keys(data, _COLUMN_RENAMES)
    options = values.pop("options", None) or {}
    for option_key, attr in _COLUMN_OPTION_KEYS.items():
        if option_key in options and attr not in values:
            values[attr] = options[option_key]
    if values.get("generated") is True:
        values["generated"] = "increment"
    elif values.get("generated") is False:
        values["generated"] = None
    if not values.get("name"):
        raise SchemaModelError("Column without a name", entity=entity_name)
    return Column(**_only_known(values, Column.__dataclass_fields__, "column", entity_name))


def relation_from_dict(data: Mapping[str, Any], entity_name: str = "?") -> Relation:
    values = _normalize_keys(data, {})
    for required in ("field_name", "relation_type", "related_table"):
        if not values.get(required):
            raise SchemaModelError(f"Relation is missing '{required}'", entity=entity_name)
    return Relation(**_only_known(values, Relation.__dataclass_fields__, "relation", entity_name))


def relation_id_from_dict(data: Mapping[str, Any], entity_name: str = "?") -> RelationId:
    values = _normalize_keys(data, {})
    return RelationId(**_only_known(values, RelationId.__dataclass_fields__, "relation id", entity_name))


def index_from_dict(data: Mapping[str, Any], entity_name: str = "?") -> Index:
    values = _normalize_keys(data, {})
    options = values.pop("options", None) or {}
    if "unique" in options and "unique" not in values:
        values["unique"] = options["unique"]
    return Index(**_only_known(values, Index.__dataclass_fields__, "index", entity_name))


def entity_from_dict(data: Mapping[str, Any]) -> Entity:
    values = _normalize_keys(data, _ENTITY_RENAMES)
    name = values.get("name")
    if not isinstance(name, str) or not name:
        raise SchemaModelError("Entity without a name", context={"keys": sorted(values)})

    values["columns"] = [column_from_dict(col, name) for col in values.get("columns") or []]
    values["relations"] = [relation_from_dict(rel, name) for rel in values.get("relations") or []]
    values["relation_ids"] = [relation_id_from_dict(rid, name) for rid in values.get("relation_ids") or []]
    values["indices"] = [index_from_dict(idx, name) for idx in values.get("indices") or []]
    return Entity(**_only_known(values, Entity.__dataclass_fields__, "entity", name))


def entities_from_dicts(items: Iterable[Mapping[str, Any]]) -> List[Entity]:
    """Build entities from plain dictionaries, accepting snake_case or camelCase keys."""
    entities = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise SchemaModelError(
                f"Entity at index {index} is a {type(item).__name__}, expected a mapping"
            )
        entities.append(entity_from_dict(item))
    return entities


def load_schema_model(path) -> List[Entity]:
    """
    Read an entity model dump (``.json``, ``.yaml`` or ``.yml``).

    The document is either a list of entities or a mapping with an
    ``entities`` list.
    """
    schema_file = Path(path)
    if not schema_file.is_file():
        raise SchemaModelError(f"Schema model file not found: {schema_file}", source=str(schema_file))

    try:
        with open(schema_file, "r", encoding="utf-8") as f:
            if schema_file.suffix.lower() == ".json":
                document = json.load(f)
            else:
                document = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SchemaModelError(f"Could not parse schema model: {e}", source=str(schema_file)) from e

    if isinstance(document, Mapping):
        document = document.get("entities")
    if not isinstance(document, list):
        raise SchemaModelError(
            "Schema model must be a list of entities or contain an 'entities' list",
            source=str(schema_file),
        )

    entities = entities_from_dicts(document)
    logger.info(f"Loaded {len(entities)} entities from {schema_file}")
    return entities


def filter_entities(entities: List[Entity], connection: ConnectionOptions) -> List[Entity]:
    """Apply the database, only-tables and skip-tables filters, keeping input order."""
    only = set(connection.only_tables)
    skip = set(connection.skip_tables)
    databases = set(connection.database_names)

    selected = []
    for entity in entities:
        table_names = {entity.sql_name, entity.name}
        if databases and entity.database and entity.database not in databases:
            logger.debug(f"Skipping '{entity.name}': database '{entity.database}' not selected")
            continue
        if only and not table_names & only:
            logger.debug(f"Skipping '{entity.name}': not in only_tables")
            continue
        if table_names & skip:
            logger.debug(f"Skipping '{entity.name}': listed in skip_tables")
            continue
        selected.append(entity)
    return selected


class SchemaProvider(Protocol):
    """Anything that can produce the customized entity model for a connection."""

    def get_entities(self, connection: ConnectionOptions, config: GenerationConfig) -> List[Entity]:
        ...


class FileSchemaProvider:
    """Schema provider backed by an entity model dump on disk."""

    def __init__(self, schema_path):
        self.schema_path = Path(schema_path)

    def get_entities(
        self, connection: ConnectionOptions, config: Optional[GenerationConfig] = None
    ) -> List[Entity]:
        entities = filter_entities(load_schema_model(self.schema_path), connection)

        include_related = connection.include_related_tables and (
            config is None or config.include_related_tables
        )
        if not include_related:
            return strip_relations(entities)

        dangling = dangling_relations(entities)
        if dangling:
            logger.warning(
                f"Relations point at entities that are not generated: {', '.join(dangling)}. "
                "Their imports will not resolve."
            )
        return entities
