"""
Core domain models for the TypeORM CRUD generator.

These models describe the schema model handed over by the introspection
step (entities, columns, relations) and the set of files the generator
produces from it. Templates read them through plain attribute access.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Iterator

from ..exceptions import SchemaModelError


_HAS_WORD_CHARACTER = re.compile(r"[A-Za-z0-9]")


def check_identifier(name: Any, kind: str, entity: Optional[str] = None) -> None:
    """Raise ``SchemaModelError`` unless ``name`` has at least one letter or digit."""
    if not isinstance(name, str) or not _HAS_WORD_CHARACTER.search(name):
        raise SchemaModelError(
            f"{kind} name {name!r} cannot be turned into an identifier",
            entity=entity or repr(name),
        )


class RelationType(str, Enum):
    """TypeORM relation decorators."""

    ONE_TO_ONE = "OneToOne"
    ONE_TO_MANY = "OneToMany"
    MANY_TO_ONE = "ManyToOne"
    MANY_TO_MANY = "ManyToMany"

    def __str__(self) -> str:
        return self.value

    @property
    def is_to_many(self) -> bool:
        """Check if the related side is a collection."""
        return self in (RelationType.ONE_TO_MANY, RelationType.MANY_TO_MANY)


@dataclass
class Column:
    """
    One field of an entity.

    ``name`` is the property name in generated code, ``sql_name`` the column
    name in the database and ``tsc_type`` the TypeScript type
    (string, number, boolean, Date, ...).
    """

    name: str
    tsc_type: str = "string"
    db_type: str = ""
    sql_name: Optional[str] = None
    primary: bool = False
    generated: Optional[str] = None  # 'increment', 'uuid', 'rowid' or None
    nullable: bool = False
    array: bool = False
    unique: bool = False
    default: Optional[Any] = None
    length: Optional[int] = None
    width: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    comment: Optional[str] = None
    enum_values: Optional[List[str]] = None

    # Relation role markers
    is_used_in_relation_as_owner: bool = False
    is_used_in_relation_as_referenced: bool = False

    def __post_init__(self):
        check_identifier(self.name, "Column")
        if self.primary and self.nullable:
            # Primary keys can't be null
            self.nullable = False
        if self.sql_name is None:
            self.sql_name = self.name

    @property
    def is_primary(self) -> bool:
        return self.primary

    @property
    def is_generated(self) -> bool:
        return bool(self.generated)

    @property
    def is_used_in_relation(self) -> bool:
        return self.is_used_in_relation_as_owner or self.is_used_in_relation_as_referenced

    def column_options(self) -> Dict[str, Any]:
        """Options object for the ``@Column`` decorator, without empty entries."""
        options: Dict[str, Any] = {"name": self.sql_name}
        if self.nullable:
            options["nullable"] = True
        if self.unique:
            options["unique"] = True
        for key in ("length", "width", "precision", "scale"):
            value = getattr(self, key)
            if value is not None:
                options[key] = value
        if self.array:
            options["array"] = True
        if self.enum_values:
            options["enum"] = list(self.enum_values)
        if self.default is not None:
            options["default"] = self.default
        if self.comment:
            options["comment"] = self.comment
        return options


@dataclass
class Relation:
    """
    A directional association from the owning entity to ``related_table``.

    ``related_table`` is the related entity name, ``related_field`` the
    property on the other side of the relation.
    """

    field_name: str
    relation_type: RelationType
    related_table: str
    related_field: Optional[str] = None
    relation_options: Dict[str, Any] = field(default_factory=dict)
    join_column_options: List[Dict[str, Any]] = field(default_factory=list)
    join_table_options: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        check_identifier(self.field_name, "Relation", entity=self.related_table)
        if not isinstance(self.relation_type, RelationType):
            try:
                self.relation_type = RelationType(self.relation_type)
            except ValueError:
                raise SchemaModelError(
                    f"Unknown relation type '{self.relation_type}'",
                    entity=self.related_table,
                    suggestions=[f"Use one of: {', '.join(rt.value for rt in RelationType)}"],
                )

    @property
    def is_to_many(self) -> bool:
        return self.relation_type.is_to_many

    @property
    def is_owner(self) -> bool:
        """The owning side carries the join column / join table."""
        return bool(self.join_column_options or self.join_table_options)


@dataclass
class RelationId:
    """A ``@RelationId`` property exposing the id(s) of a relation."""

    field_name: str
    relation_field: str
    field_type: str = "number"

    def __post_init__(self):
        check_identifier(self.field_name, "Relation id")


@dataclass
class Index:
    """A table index or unique constraint."""

    name: str
    columns: List[str] = field(default_factory=list)
    unique: bool = False
    primary: bool = False

    def index_options(self) -> Dict[str, Any]:
        return {"unique": True} if self.unique else {}


@dataclass
class Entity:
    """
    One schema table or view.

    ``name`` is the canonical entity name every case transform starts from.
    ``sql_name`` is the table name used in the ``@Entity`` decorator.
    """

    name: str
    sql_name: Optional[str] = None
    columns: List[Column] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)
    relation_ids: List[RelationId] = field(default_factory=list)
    indices: List[Index] = field(default_factory=list)
    database: Optional[str] = None
    schema: Optional[str] = None
    comment: Optional[str] = None

    def __post_init__(self):
        check_identifier(self.name, "Entity")
        if self.sql_name is None:
            self.sql_name = self.name

    @property
    def primary_columns(self) -> List[Column]:
        return [col for col in self.columns if col.primary]

    @property
    def primary_column(self) -> Optional[Column]:
        """First primary key column, used for ``:id`` routes."""
        primary = self.primary_columns
        return primary[0] if primary else None

    @property
    def plain_columns(self) -> List[Column]:
        """Columns rendered as ``@Column``; owning foreign keys are expressed by their relation."""
        return [col for col in self.columns if not col.is_used_in_relation_as_owner]

    @property
    def editable_columns(self) -> List[Column]:
        """Columns a client may set when creating a row."""
        return [col for col in self.columns if not col.is_generated]

    @property
    def related_entities(self) -> List[str]:
        """Distinct related entity names, in relation order, excluding self references."""
        seen: List[str] = []
        for relation in self.relations:
            if relation.related_table != self.name and relation.related_table not in seen:
                seen.append(relation.related_table)
        return seen

    def get_column_by_name(self, name: str) -> Optional[Column]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


@dataclass
class GeneratedFileSet:
    """
    The output of one generation run.

    ``crud_source`` and ``entity_source`` map generated file names to their
    formatted content. ``relative_paths`` maps every file name to its path
    relative to the results directory, which is the layout used on disk.
    """

    crud_source: Dict[str, str] = field(default_factory=dict)
    entity_source: Dict[str, str] = field(default_factory=dict)
    index_source: Optional[str] = None
    relative_paths: Dict[str, str] = field(default_factory=dict)

    def add(self, file_name: str, relative_path: str, content: str, entity_file: bool = False):
        target = self.entity_source if entity_file else self.crud_source
        target[file_name] = content
        self.relative_paths[file_name] = relative_path

    def files_by_path(self) -> Dict[str, str]:
        """Relative path -> content for every generated file."""
        files = {
            self.relative_paths[name]: content
            for name, content in {**self.crud_source, **self.entity_source}.items()
        }
        if self.index_source is not None:
            files[self.relative_paths.get("index.ts", "index.ts")] = self.index_source
        return files

    def __iter__(self) -> Iterator[str]:
        yield from self.crud_source
        yield from self.entity_source

    def __len__(self) -> int:
        return len(self.crud_source) + len(self.entity_source) + (self.index_source is not None)
