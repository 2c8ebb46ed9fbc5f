import argparse
import logging
import sys
from typing import List, Optional

from rich.prompt import Prompt

from typeorm_crud_generator.config_validation import load_config
from typeorm_crud_generator.constants import SupportedDatabases
from typeorm_crud_generator.exceptions import ConfigurationError, CrudGeneratorError
from typeorm_crud_generator.schema_loader import FileSchemaProvider
from typeorm_crud_generator.service import GenerateService

from typeorm_crud_generator.colored_logging import (
    setup_colored_logging,
    get_colored_logger,
    log_success,
    log_progress,
    log_highlight,
    log_section,
)

# Note: Colored logging will be configured after parsing args
logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="typeorm-crud-generator",
        description="Generate NestJS/TypeORM CRUD modules (DTOs, service, controller, module, entity) "
        "from an introspected database schema model.",
    )
    parser.add_argument("--schema", help="Path to the entity model dump (JSON or YAML).")
    parser.add_argument("-c", "--config", help="Path to a YAML configuration file.")
    parser.add_argument("--host", help="Database host (default: localhost).")
    parser.add_argument("--port", help="Database port (default: the engine's port).")
    parser.add_argument("--username", help="Database username.")
    parser.add_argument("--password", help="Database password.")
    parser.add_argument("--database", help="Database names, comma-separated.")
    parser.add_argument(
        "--type",
        choices=SupportedDatabases.ALL,
        help="Database engine the schema model was read from.",
    )
    parser.add_argument("--output", help="Output directory for generated files.")
    parser.add_argument("--skip-tables", help="Tables to skip, comma-separated.")
    parser.add_argument("--only-tables", help="Only process these tables, comma-separated.")
    parser.add_argument(
        "--swagger",
        action="store_true",
        help="Add Swagger decorators to entities, controllers and DTOs.",
    )
    parser.add_argument(
        "--no-related-tables",
        action="store_true",
        help="Drop relations between entities before generating.",
    )
    parser.add_argument(
        "--archive",
        action="store_true",
        help="Zip the generated files and remove the output directory.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def is_interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def prompt_for_missing(args: argparse.Namespace, interactive: bool) -> argparse.Namespace:
    """Ask for the values that have no usable default."""
    if not args.schema:
        if not interactive:
            raise ConfigurationError(
                "No schema model given",
                option="schema",
                suggestions=["Pass --schema path/to/entities.json"],
            )
        args.schema = Prompt.ask("Path to the entity model dump (JSON or YAML)")
    if args.type is None and not args.config and interactive:
        args.type = Prompt.ask(
            "Database type",
            choices=SupportedDatabases.ALL,
            default=SupportedDatabases.MYSQL,
        )
    return args


def main(argv: Optional[List[str]] = None):
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    use_colors = not args.no_color
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=use_colors)

    global logger
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    try:
        args = prompt_for_missing(args, interactive=is_interactive())

        # 1. Load Configuration
        log_progress(logger, "Loading configuration...")
        generation_config, connection = load_config(
            args.config,
            generation_overrides={
                "results_path": args.output,
                "add_swagger_identifier": True if args.swagger else None,
                "include_related_tables": False if args.no_related_tables else None,
            },
            connection_overrides={
                "host": args.host,
                "port": args.port,
                "user": args.username,
                "password": args.password,
                "database_names": args.database,
                "database_type": args.type,
                "skip_tables": args.skip_tables,
                "only_tables": args.only_tables,
                "include_related_tables": False if args.no_related_tables else None,
            },
        )
        log_success(logger, "Configuration loaded and validated successfully.")

        log_highlight(logger, f"Schema model: {args.schema}")
        log_highlight(
            logger,
            f"Database type: {SupportedDatabases.DISPLAY_NAMES[connection.database_type.value]}",
        )
        log_highlight(logger, f"Host: {connection.host}:{connection.port}")
        if connection.database_names:
            log_highlight(logger, f"Databases: {', '.join(connection.database_names)}")
        log_highlight(logger, f"Output: {generation_config.results_path}")

        # 2. Generate
        service = GenerateService(FileSchemaProvider(args.schema))
        if args.archive:
            archive_path = service.generate_and_archive_crud(connection, generation_config)
            log_section(logger, "COMPLETION")
            log_success(logger, f"CRUD files archived to {archive_path}")
        else:
            service.generate_crud(connection, generation_config)
            log_section(logger, "COMPLETION")
            log_success(logger, f"Files generated in: {generation_config.results_path}")

    # --- Error Handling ---
    except CrudGeneratorError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.error("Generation cancelled.")
        sys.exit(1)
    except Exception as e:
        # Catch any other unexpected exceptions
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
