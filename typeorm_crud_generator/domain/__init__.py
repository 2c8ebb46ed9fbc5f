"""
Domain module for the TypeORM CRUD generator.

Contains the schema model handed over by introspection, the naming
conventions applied to it and the relation-stripping step.
"""

from .models import (
    Column,
    Entity,
    GeneratedFileSet,
    Index,
    Relation,
    RelationId,
    RelationType,
)

from .naming import (
    NamingCase,
    convert_case,
    pluralize,
    split_words,
    to_camel_case,
    to_param_case,
    to_pascal_case,
    to_snake_case,
)

from .relationships import (
    dangling_relations,
    strip_relations,
)

__all__ = [
    # Core models
    'Column',
    'Entity',
    'GeneratedFileSet',
    'Index',
    'Relation',
    'RelationId',
    'RelationType',

    # Naming
    'NamingCase',
    'convert_case',
    'pluralize',
    'split_words',
    'to_camel_case',
    'to_param_case',
    'to_pascal_case',
    'to_snake_case',

    # Relationships
    'dangling_relations',
    'strip_relations',
]
