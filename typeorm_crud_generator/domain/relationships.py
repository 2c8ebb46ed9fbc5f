"""
Relationship handling for the TypeORM CRUD generator.

When related tables are not part of the generated output, the entity model
must not mention them at all: templates decide whether to emit relation
imports and decorators from the relation lists and from the relation role
markers on columns, so both have to go together.
"""

import logging
from typing import List

from .models import Entity


logger = logging.getLogger(__name__)


def strip_relations(entities: List[Entity]) -> List[Entity]:
    """
    Remove all relation data from the entities, in place.

    Clears ``relations`` and ``relation_ids`` and resets both relation role
    markers on every column.

    Returns:
        The same list, for chaining
    """
    for entity in entities:
        if entity.relations or entity.relation_ids:
            logger.debug(
                f"Stripping {len(entity.relations)} relation(s) and "
                f"{len(entity.relation_ids)} relation id(s) from '{entity.name}'"
            )
        for column in entity.columns:
            column.is_used_in_relation_as_owner = False
            column.is_used_in_relation_as_referenced = False
        entity.relations = []
        entity.relation_ids = []
    return entities


def dangling_relations(entities: List[Entity]) -> List[str]:
    """
    List relations that point at entities missing from the model.

    Returned as ``"<entity>.<field>"`` strings; the generated imports for
    these relations would not resolve.
    """
    known = {entity.name for entity in entities}
    return [
        f"{entity.name}.{relation.field_name}"
        for entity in entities
        for relation in entity.relations
        if relation.related_table not in known
    ]
