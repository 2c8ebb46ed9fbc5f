"""
Generate NestJS/TypeORM CRUD scaffolding from an introspected schema model.
"""

from .codegen import FileGroupGenerator, generate_entity_source, setup_jinja_env
from .config_validation import (
    ConnectionOptions,
    GenerationConfig,
    build_connection_options,
    build_generation_config,
    load_config,
)
from .domain import Column, Entity, GeneratedFileSet, Index, Relation, RelationId, RelationType, strip_relations
from .exceptions import CrudGeneratorError
from .pipeline import CrudGenerator
from .schema_loader import FileSchemaProvider, entities_from_dicts, load_schema_model
from .service import GenerateService

__version__ = "0.1.0"

__all__ = [
    'Column',
    'ConnectionOptions',
    'CrudGenerator',
    'CrudGeneratorError',
    'Entity',
    'FileGroupGenerator',
    'FileSchemaProvider',
    'GenerateService',
    'GeneratedFileSet',
    'GenerationConfig',
    'Index',
    'Relation',
    'RelationId',
    'RelationType',
    'build_connection_options',
    'build_generation_config',
    'entities_from_dicts',
    'generate_entity_source',
    'load_config',
    'load_schema_model',
    'setup_jinja_env',
    'strip_relations',
]
