"""
Facade tying the schema provider, the generator and the archiver together.

The CLI goes through ``GenerateService``; library users can call it with a
connection descriptor and a partial set of generation options.
"""

import logging
from pathlib import Path
from typing import Any, List, Mapping, Optional, Union

from .archiver import create_zip_archive, default_archive_name, remove_output_directory
from .colored_logging import log_section, log_success
from .config_validation import (
    ConnectionOptions,
    GenerationConfig,
    build_connection_options,
    build_generation_config,
)
from .domain.models import GeneratedFileSet
from .pipeline import CrudGenerator
from .schema_loader import SchemaProvider


logger = logging.getLogger(__name__)

Options = Optional[Union[Mapping[str, Any], GenerationConfig]]


class GenerateService:
    def __init__(self, schema_provider: SchemaProvider, formatter=None, template_dir: Optional[Path] = None):
        self.schema_provider = schema_provider
        self.formatter = formatter
        self.template_dir = template_dir

    def _prepare(self, connection, options: Options):
        connection = build_connection_options(connection)
        config = build_generation_config(options)
        entities = self.schema_provider.get_entities(connection, config)
        if not entities:
            logger.warning("The schema model holds no entities after filtering. Nothing to generate.")
        generator = CrudGenerator(config, formatter=self.formatter, template_dir=self.template_dir)
        return config, entities, generator

    def generate_crud(
        self, connection: Union[ConnectionOptions, Mapping[str, Any]], options: Options = None
    ) -> List[Path]:
        """Generate the CRUD files and entity definitions under ``results_path``."""
        log_section(logger, "CRUD GENERATION")
        config, entities, generator = self._prepare(connection, options)
        written = generator.generate_crud_files(entities)
        log_success(logger, f"CRUD generation completed for {len(entities)} entities in {config.results_path}")
        return written

    def generate_source_code(
        self, connection: Union[ConnectionOptions, Mapping[str, Any]], options: Options = None
    ) -> GeneratedFileSet:
        """Generate everything in memory; nothing is written."""
        _, entities, generator = self._prepare(connection, options)
        return generator.generate_source_code(entities)

    def generate_and_archive_crud(
        self,
        connection: Union[ConnectionOptions, Mapping[str, Any]],
        options: Options = None,
        archive_name: Optional[str] = None,
        dest_dir=None,
    ) -> Path:
        """
        Generate to disk, zip the results directory, then remove it.

        The directory is removed only after the archive has been written; a
        failed removal is logged and does not fail the call.
        """
        config = build_generation_config(options)
        self.generate_crud(connection, config)
        archive_path, _ = create_zip_archive(
            config.results_path, archive_name or default_archive_name(), dest_dir=dest_dir
        )
        remove_output_directory(config.results_path)
        return archive_path
