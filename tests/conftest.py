# File: tests/conftest.py
# Shared fixtures: sample entity models, generation configs and formatters.

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest

from typeorm_crud_generator.config_validation import GenerationConfig, build_generation_config
from typeorm_crud_generator.domain.models import Column, Entity, Index, Relation, RelationId, RelationType
from typeorm_crud_generator.exceptions import FormattingError


def build_user_profile() -> Entity:
    return Entity(
        name="user_profile",
        schema="public",
        database="app",
        columns=[
            Column(name="id", tsc_type="number", db_type="int", primary=True, generated="increment",
                   is_used_in_relation_as_referenced=True),
            Column(name="display_name", tsc_type="string", db_type="varchar", length=120),
            Column(name="email", tsc_type="string", db_type="varchar", unique=True),
            Column(name="bio", tsc_type="string", db_type="text", nullable=True, comment="About me"),
            Column(name="created_at", tsc_type="Date", db_type="timestamp"),
        ],
        relations=[
            Relation(
                field_name="posts",
                relation_type=RelationType.ONE_TO_MANY,
                related_table="post",
                related_field="author",
            ),
        ],
        indices=[Index(name="UQ_user_profile_email", columns=["email"], unique=True)],
    )


def build_post() -> Entity:
    return Entity(
        name="post",
        columns=[
            Column(name="id", tsc_type="number", db_type="int", primary=True, generated="increment"),
            Column(name="title", tsc_type="string", db_type="varchar"),
            Column(name="author_id", tsc_type="number", db_type="int", is_used_in_relation_as_owner=True),
        ],
        relations=[
            Relation(
                field_name="author",
                relation_type=RelationType.MANY_TO_ONE,
                related_table="user_profile",
                related_field="posts",
                relation_options={"onDelete": "CASCADE"},
                join_column_options=[{"name": "author_id", "referencedColumnName": "id"}],
            ),
        ],
        relation_ids=[RelationId(field_name="author_id_ref", relation_field="author")],
    )


@pytest.fixture
def sample_entities() -> List[Entity]:
    """``user_profile`` (one-to-many) and ``post`` (many-to-one owner)."""
    return [build_user_profile(), build_post()]


@pytest.fixture
def user_profile() -> Entity:
    return build_user_profile()


@pytest.fixture
def make_config(tmp_path: Path):
    """Factory for configs whose results directory lives in ``tmp_path``."""

    def _make(**overrides: Any) -> GenerationConfig:
        options: Dict[str, Any] = {"results_path": str(tmp_path / "output"), "convert_eol": "LF"}
        options.update(overrides)
        return build_generation_config(options)

    return _make


@pytest.fixture
def passthrough_formatter():
    return lambda source, file_name: source


@pytest.fixture
def failing_formatter():
    def _fail(source: str, file_name: str) -> str:
        raise FormattingError("Unexpected token", file_name=file_name)

    return _fail


@pytest.fixture
def schema_dump(tmp_path: Path) -> Path:
    """An entity model dump written the way the introspection tool writes it (camelCase keys)."""
    document = {
        "entities": [
            {
                "tscName": "user_profile",
                "sqlName": "user_profile",
                "database": "app",
                "columns": [
                    {"tscName": "id", "tscType": "number", "type": "int", "primary": True, "generated": True,
                     "isUsedInRelationAsReferenced": True},
                    {"tscName": "email", "tscType": "string", "type": "varchar", "options": {"unique": True, "length": 255}},
                ],
                "relations": [
                    {"fieldName": "posts", "relationType": "OneToMany", "relatedTable": "post", "relatedField": "author"},
                ],
                "indices": [{"name": "UQ_email", "columns": ["email"], "options": {"unique": True}}],
            },
            {
                "tscName": "post",
                "database": "app",
                "columns": [
                    {"tscName": "id", "tscType": "number", "type": "int", "primary": True, "generated": True},
                    {"tscName": "author_id", "tscType": "number", "type": "int", "isUsedInRelationAsOwner": True},
                ],
                "relations": [
                    {"fieldName": "author", "relationType": "ManyToOne", "relatedTable": "user_profile",
                     "relatedField": "posts", "joinColumnOptions": [{"name": "author_id"}]},
                ],
                "relationIds": [{"fieldName": "authorIdRef", "relationField": "author"}],
            },
            {
                "tscName": "migrations",
                "database": "app",
                "columns": [{"tscName": "id", "tscType": "number", "primary": True}],
            },
        ]
    }
    path = tmp_path / "entities.json"
    path.write_text(json.dumps(document), encoding="utf-8")
    return path
