import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from jinja2 import (
    BaseLoader,
    Environment,
    FileSystemLoader,
    ext as jinja2_extensions,
)

from .codegen_utils import Formatter, convert_eol, format_source_code
from .config_validation import GenerationConfig
from .constants import INDEX_FILE_NAME, INDEX_TEMPLATE, TEMPLATE_LAYOUT, TemplateKinds
from .domain.models import Entity
from .exceptions import CrudGeneratorError, OutputWriteError, TemplateRenderError
from .helpers import TemplateHelpers


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"


def setup_jinja_env(
    config: GenerationConfig,
    template_dir: Optional[Path] = None,
    loader: Optional[BaseLoader] = None,
) -> Environment:
    """
    Build a fresh Jinja2 environment with the template helpers bound to ``config``.

    Nothing is cached between calls, so two runs with different
    configurations never see each other's helpers.
    """
    env = Environment(
        loader=loader or FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=False,  # TypeScript output, quotes must survive
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        extensions=[
            jinja2_extensions.do,
            jinja2_extensions.loopcontrols,
        ],
    )
    TemplateHelpers(config).register(env)
    return env


def output_names(entity: Entity, helpers: TemplateHelpers, kinds: List[str]) -> Dict[str, Tuple[str, str]]:
    """
    Template kind -> (file name, path relative to the results directory).

    Example for ``user_profile`` with param-case file names::

        service -> ("user-profile.service.ts", "user-profile/user-profile.service.ts")
    """
    base_name = helpers.to_file_name(entity.name)
    names = {}
    for kind in kinds:
        _, subdir, pattern = TEMPLATE_LAYOUT[kind]
        file_name = pattern.format(name=base_name)
        relative_path = "/".join(part for part in (base_name, subdir, file_name) if part)
        names[kind] = (file_name, relative_path)
    return names


class FileGroupGenerator:
    """
    Renders the file group of one entity.

    ``generate`` returns file name -> content without touching the
    filesystem; ``write`` renders the same content and writes it below an
    output directory. Every rendered file goes through the formatter (with
    fallback to the raw text) and then through end-of-line conversion.
    """

    def __init__(
        self,
        config: GenerationConfig,
        formatter: Optional[Formatter] = None,
        env: Optional[Environment] = None,
    ):
        self.config = config
        self.formatter = formatter
        self.env = env or setup_jinja_env(config)
        self.helpers = TemplateHelpers(config)

    def render(self, template_name: str, context: Dict[str, Any], entity_name: str = None) -> str:
        try:
            template = self.env.get_template(template_name)
            return template.render(context)
        except CrudGeneratorError:
            # Configuration problems keep their own type
            raise
        except Exception as e:
            raise TemplateRenderError(
                f"Failed to render '{template_name}': {e}",
                template=template_name,
                entity=entity_name,
                suggestions=["Check the template syntax and the entity model passed to it"],
            ) from e

    def finish(self, source: str, file_name: str) -> str:
        """Format, then convert line endings."""
        formatted = format_source_code(self.formatter, source, file_name)
        return convert_eol(formatted, self.config.eol)

    def render_kind(self, kind: str, entity: Entity, file_name: str) -> str:
        template_name = TEMPLATE_LAYOUT[kind][0]
        context = {
            "entity": entity,
            "entityName": self.helpers.to_entity_name(entity.name),
            "generationConfig": self.config,
        }
        logger.debug(f"Rendering {kind} for '{entity.name}' -> {file_name}")
        return self.finish(self.render(template_name, context, entity.name), file_name)

    def generate_files(self, entity: Entity, kinds: List[str]) -> Dict[str, Tuple[str, str]]:
        """File name -> (relative path, content) for the requested kinds."""
        files = {}
        for kind, (file_name, relative_path) in output_names(entity, self.helpers, kinds).items():
            files[file_name] = (relative_path, self.render_kind(kind, entity, file_name))
        return files

    def generate(self, entity: Entity) -> Dict[str, str]:
        """The six CRUD files of ``entity``, keyed by file name."""
        return {
            file_name: content
            for file_name, (_, content) in self.generate_files(entity, TemplateKinds.CRUD).items()
        }

    def generate_entity(self, entity: Entity) -> Tuple[str, str]:
        """(file name, content) of the entity definition file."""
        ((file_name, (_, content)),) = self.generate_files(entity, [TemplateKinds.ENTITY]).items()
        return file_name, content

    def generate_index(self, entities: List[Entity]) -> str:
        """
        Render ``index.ts``. Entities sharing a file name export once, from
        the last of them, since its files overwrite the others.
        """
        by_file_name = {}
        for entity in entities:
            by_file_name[self.helpers.to_file_name(entity.name)] = entity
        context = {"entities": list(by_file_name.values()), "generationConfig": self.config}
        return self.finish(self.render(INDEX_TEMPLATE, context), INDEX_FILE_NAME)

    def write(self, entity: Entity, output_dir: Path, include_entity: bool = True) -> List[Path]:
        """
        Render the file group of ``entity`` and write it below ``output_dir``.

        Directories are created if missing and existing files with the same
        name are overwritten.
        """
        kinds = TemplateKinds.CRUD + ([TemplateKinds.ENTITY] if include_entity else [])
        files = self.generate_files(entity, kinds)
        return write_files({path: content for path, content in files.values()}, Path(output_dir))


def write_files(files: Dict[str, str], output_dir: Path) -> List[Path]:
    """Write relative path -> content below ``output_dir``; returns the written paths."""
    written = []
    for relative_path, content in files.items():
        target = output_dir / relative_path
        try:
            # exist_ok makes concurrent creation of the same directory safe
            target.parent.mkdir(parents=True, exist_ok=True)
            # newline="" keeps the converted line endings as they are
            with open(target, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            raise OutputWriteError(f"Could not write {target}: {e}", path=str(target)) from e
        logger.debug(f"Generated file: {target}")
        written.append(target)
    return written


def generate_entity_source(
    entities: List[Entity],
    config: GenerationConfig,
    formatter: Optional[Formatter] = None,
    env: Optional[Environment] = None,
) -> Dict[str, str]:
    """Entity definition files for ``entities``, keyed by file name (``<file>.entity.ts``)."""
    generator = FileGroupGenerator(config, formatter=formatter, env=env)
    sources = {}
    for entity in entities:
        file_name, content = generator.generate_entity(entity)
        sources[file_name] = content
    return sources
