"""
Generation pipeline.

``CrudGenerator`` runs the file-group generator over an ordered list of
entities in one of two explicit modes:

* ``generate_source_code`` renders everything in memory and returns a
  ``GeneratedFileSet``.
* ``generate_crud_files`` renders the same set, writes it to a staging
  directory next to the results directory and only then moves the files
  into place. A failure at any point leaves the results directory as it
  was.

Both modes build one Jinja2 environment per call and process entities
sequentially. The first render failure aborts the call.
"""

import logging
import os
import shutil
import tempfile
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import BaseLoader

from .codegen import FileGroupGenerator, output_names, setup_jinja_env, write_files
from .codegen_utils import Formatter, PrettierFormatter
from .colored_logging import log_progress, log_success
from .config_validation import CollisionPolicy, GenerationConfig
from .constants import INDEX_FILE_NAME, TemplateKinds
from .domain.models import Entity, GeneratedFileSet
from .exceptions import FileNameCollisionError, OutputWriteError
from .helpers import TemplateHelpers


logger = logging.getLogger(__name__)

_STAGING_PREFIX = ".crud-staging-"


def default_formatter(config: GenerationConfig) -> Optional[Formatter]:
    """Prettier with the configured command, or None when it is not installed."""
    formatter = PrettierFormatter(config.formatter_command, timeout=config.formatter_timeout)
    return formatter if formatter.available else None


def find_file_name_collisions(entities: List[Entity], helpers: TemplateHelpers) -> Dict[str, List[str]]:
    """File-case name -> entity names, for names shared by more than one entity."""
    by_file_name = defaultdict(list)
    for entity in entities:
        by_file_name[helpers.to_file_name(entity.name)].append(entity.name)
    return {name: owners for name, owners in by_file_name.items() if len(owners) > 1}


class CrudGenerator:
    """
    Generates the NestJS/TypeORM CRUD scaffolding for a list of entities.

    Args:
        config: Options for this generator. Each call binds its own helpers to it.
        formatter: Callable ``(source, file_name) -> formatted``. Defaults to
            Prettier when it is on PATH; pass ``False`` to skip formatting.
        template_dir: Directory with replacement templates.
        loader: Jinja2 loader used instead of ``template_dir``.
    """

    def __init__(
        self,
        config: GenerationConfig,
        formatter=None,
        template_dir: Optional[Path] = None,
        loader: Optional[BaseLoader] = None,
    ):
        self.config = config
        if formatter is None:
            formatter = default_formatter(config)
        self.formatter: Optional[Formatter] = formatter or None
        self.template_dir = template_dir
        self.loader = loader

    @property
    def results_path(self) -> Path:
        return Path(self.config.results_path)

    def _file_group_generator(self) -> FileGroupGenerator:
        env = setup_jinja_env(self.config, template_dir=self.template_dir, loader=self.loader)
        return FileGroupGenerator(self.config, formatter=self.formatter, env=env)

    def _check_collisions(self, entities: List[Entity], helpers: TemplateHelpers) -> None:
        collisions = find_file_name_collisions(entities, helpers)
        if not collisions:
            return
        if self.config.on_file_name_collision == CollisionPolicy.ERROR:
            file_name, owners = next(iter(collisions.items()))
            raise FileNameCollisionError(
                f"Entities {owners} all map to the file name '{file_name}'",
                file_name=file_name,
                entities=owners,
            )
        for file_name, owners in collisions.items():
            logger.warning(
                f"Entities {owners} map to the same file name '{file_name}'. "
                f"Files of '{owners[-1]}' overwrite the others."
            )

    def generate_source_code(self, entities: List[Entity]) -> GeneratedFileSet:
        """Render every file for ``entities`` in memory."""
        generator = self._file_group_generator()
        self._check_collisions(entities, generator.helpers)

        file_set = GeneratedFileSet()
        kinds = TemplateKinds.CRUD + [TemplateKinds.ENTITY]
        for entity in entities:
            log_progress(logger, f"Generating files for '{entity.name}'")
            names = output_names(entity, generator.helpers, kinds)
            for kind, (file_name, relative_path) in names.items():
                content = generator.render_kind(kind, entity, file_name)
                file_set.add(file_name, relative_path, content, entity_file=kind == TemplateKinds.ENTITY)

        if self.config.index_file:
            file_set.index_source = generator.generate_index(entities)
            file_set.relative_paths[INDEX_FILE_NAME] = INDEX_FILE_NAME

        logger.info(f"Generated {len(file_set)} files for {len(entities)} entities")
        return file_set

    def generate_crud_files(self, entities: List[Entity]) -> List[Path]:
        """
        Render every file for ``entities`` and write them under the results path.

        Returns the written paths. Files that already exist with the same
        name are overwritten; other files in the results directory are kept.
        """
        file_set = self.generate_source_code(entities)
        results_path = self.results_path
        try:
            results_path.parent.mkdir(parents=True, exist_ok=True)
            staging_dir = Path(tempfile.mkdtemp(prefix=_STAGING_PREFIX, dir=results_path.parent))
        except OSError as e:
            raise OutputWriteError(
                f"Could not create a staging directory next to {results_path}: {e}",
                path=str(results_path),
            ) from e

        try:
            files = file_set.files_by_path()
            write_files(files, staging_dir)
            written = self._move_into_place(staging_dir, files, results_path)
        finally:
            shutil.rmtree(staging_dir, ignore_errors=True)

        log_success(logger, f"Wrote {len(written)} files to {results_path}")
        return written

    @staticmethod
    def _move_into_place(staging_dir: Path, files: Dict[str, str], results_path: Path) -> List[Path]:
        written = []
        for relative_path in files:
            target = results_path / relative_path
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                os.replace(staging_dir / relative_path, target)
            except OSError as e:
                raise OutputWriteError(f"Could not move {relative_path} into {results_path}: {e}", path=str(target)) from e
            written.append(target)
        return written
