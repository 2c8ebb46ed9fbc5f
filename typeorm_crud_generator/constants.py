"""
Centralized constants for the TypeORM CRUD generator.

This module holds the default generation options, the template catalogue,
the Swagger type tables and the supported database engines, so that the
helpers, the generators and the CLI all read from one place.
"""

import os
from typing import Dict, List, Tuple


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default generation option values."""

    RESULTS_PATH = "./output"
    PLURALIZE_NAMES = True
    CONVERT_CASE_FILE = "param"
    CONVERT_CASE_ENTITY = "pascal"
    CONVERT_CASE_PROPERTY = "camel"
    CONVERT_EOL = "LF" if os.linesep == "\n" else "CRLF"
    PROPERTY_VISIBILITY = "none"
    STRICT_MODE = "none"
    EXPORT_TYPE = "named"

    # Permission decorators on controller routes
    PERMISSION_IDENTIFIER = "@permission"
    PERMISSION_IDENTIFIER_PREFIX = ""

    # Formatting
    FORMATTER_COMMAND = ["prettier", "--parser", "typescript"]
    FORMATTER_TIMEOUT = 30

    ARCHIVE_NAME_PREFIX = "generated-crud"


class SupportedDatabases:
    """Database engines the schema dump may come from, with their default ports."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    MSSQL = "mssql"
    ORACLE = "oracle"
    MARIADB = "mariadb"
    SQLITE = "sqlite"

    ALL = [MYSQL, POSTGRES, MSSQL, ORACLE, MARIADB, SQLITE]

    DISPLAY_NAMES = {
        MYSQL: "MySQL",
        POSTGRES: "PostgreSQL",
        MSSQL: "Microsoft SQL Server",
        ORACLE: "Oracle",
        MARIADB: "MariaDB",
        SQLITE: "SQLite",
    }

    DEFAULT_PORTS = {
        MYSQL: 3306,
        POSTGRES: 5432,
        MSSQL: 1433,
        ORACLE: 1521,
        MARIADB: 3306,
        SQLITE: 0,
    }


EOL_SEQUENCES: Dict[str, str] = {
    "LF": "\n",
    "CRLF": "\r\n",
}


# =============================================================================
# TEMPLATES
# =============================================================================

class TemplateKinds:
    """
    Names of the templates rendered for every entity.

    Each CRUD kind maps to its template file, the sub-directory it lands in
    (relative to the entity directory) and the file-name pattern, where
    ``{name}`` is the file-case transformed entity name.
    """

    CREATE_DTO = "create_dto"
    UPDATE_DTO = "update_dto"
    PAGINATION_DTO = "pagination_dto"
    SERVICE = "service"
    CONTROLLER = "controller"
    MODULE = "module"
    ENTITY = "entity"
    INDEX = "index"

    CRUD: List[str] = [CREATE_DTO, UPDATE_DTO, PAGINATION_DTO, SERVICE, CONTROLLER, MODULE]


# kind -> (template file, sub-directory, file-name pattern)
TEMPLATE_LAYOUT: Dict[str, Tuple[str, str, str]] = {
    TemplateKinds.CREATE_DTO: ("dto/create.dto.ts.j2", "dto", "create-{name}.dto.ts"),
    TemplateKinds.UPDATE_DTO: ("dto/update.dto.ts.j2", "dto", "update-{name}.dto.ts"),
    TemplateKinds.PAGINATION_DTO: ("dto/pagination.dto.ts.j2", "dto", "pagination-{name}.dto.ts"),
    TemplateKinds.SERVICE: ("service.ts.j2", "", "{name}.service.ts"),
    TemplateKinds.CONTROLLER: ("controller.ts.j2", "", "{name}.controller.ts"),
    TemplateKinds.MODULE: ("module.ts.j2", "", "{name}.module.ts"),
    TemplateKinds.ENTITY: ("entity.ts.j2", "entity", "{name}.entity.ts"),
}

INDEX_TEMPLATE = "index.ts.j2"
INDEX_FILE_NAME = "index.ts"


# =============================================================================
# SWAGGER TYPE MAPPING
# =============================================================================

class SwaggerTypes:
    """Swagger ``type`` names used in ApiProperty decorators."""

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"

    ALL = [STRING, NUMBER, BOOLEAN]


# TypeScript column type -> Swagger type; anything else falls back to String
SWAGGER_TYPE_MAP: Dict[str, str] = {
    "string": SwaggerTypes.STRING,
    "number": SwaggerTypes.NUMBER,
    "boolean": SwaggerTypes.BOOLEAN,
}

SWAGGER_DATE_TYPE = "Date"
SWAGGER_DATE_FORMAT = "date-time"
SWAGGER_INT_FORMAT = "int32"
INTEGER_DB_TYPE_MARKER = "int"


# =============================================================================
# RELATIONS
# =============================================================================

TO_MANY_RELATIONS = ("OneToMany", "ManyToMany")
LAZY_RELATION_WRAPPER = "Promise<{type}>"


class PermissionOperations:
    """Permission operation names used on controller routes."""

    ADD = "add"        # @Post
    REMOVE = "remove"  # @Delete
    LIST = "list"      # @Get paginate and @Get
    QUERY = "query"    # @Get :id
    EDIT = "edit"      # @Patch :id and /upsert

    ALL = [ADD, REMOVE, LIST, QUERY, EDIT]
