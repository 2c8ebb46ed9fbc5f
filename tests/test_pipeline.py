"""
Tests for the generation pipeline: in-memory and on-disk modes
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from jinja2 import ChoiceLoader, DictLoader, FileSystemLoader

from typeorm_crud_generator.codegen import TEMPLATE_DIR
from typeorm_crud_generator.domain.models import Column, Entity
from typeorm_crud_generator.exceptions import FileNameCollisionError, OutputWriteError, TemplateRenderError
from typeorm_crud_generator.pipeline import CrudGenerator, default_formatter


def read_tree(root: Path):
    return {
        path.relative_to(root).as_posix(): path.read_bytes().decode("utf-8")
        for path in root.rglob("*")
        if path.is_file()
    }


def test_in_memory_file_set(make_config, sample_entities, passthrough_formatter):
    file_set = CrudGenerator(make_config(), formatter=passthrough_formatter).generate_source_code(sample_entities)

    assert len(file_set) == 14
    assert set(file_set.entity_source) == {"user-profile.entity.ts", "post.entity.ts"}
    assert "post.controller.ts" in file_set.crud_source
    assert file_set.index_source is None
    assert file_set.relative_paths["create-post.dto.ts"] == "post/dto/create-post.dto.ts"


def test_in_memory_mode_writes_nothing(make_config, sample_entities, passthrough_formatter):
    config = make_config()
    CrudGenerator(config, formatter=passthrough_formatter).generate_source_code(sample_entities)
    assert not Path(config.results_path).exists()


def test_in_memory_and_on_disk_content_parity(make_config, sample_entities, passthrough_formatter):
    config = make_config(index_file=True, convert_eol="CRLF")
    generator = CrudGenerator(config, formatter=passthrough_formatter)

    in_memory = generator.generate_source_code(sample_entities).files_by_path()
    written = generator.generate_crud_files(sample_entities)

    on_disk = read_tree(Path(config.results_path))
    assert on_disk == in_memory
    assert len(written) == len(in_memory)
    assert "index.ts" in on_disk


def test_failing_formatter_keeps_unformatted_text(make_config, sample_entities, failing_formatter):
    config = make_config()
    raw = CrudGenerator(config, formatter=False).generate_source_code(sample_entities)
    fallback = CrudGenerator(config, formatter=failing_formatter).generate_source_code(sample_entities)

    assert fallback.crud_source == raw.crud_source
    assert fallback.entity_source == raw.entity_source


def test_existing_files_are_overwritten_and_others_kept(make_config, sample_entities, passthrough_formatter):
    config = make_config()
    results = Path(config.results_path)
    (results / "post").mkdir(parents=True)
    (results / "post" / "post.service.ts").write_text("stale", encoding="utf-8")
    (results / "README.md").write_text("keep me", encoding="utf-8")

    CrudGenerator(config, formatter=passthrough_formatter).generate_crud_files(sample_entities)

    assert (results / "post" / "post.service.ts").read_text(encoding="utf-8") != "stale"
    assert (results / "README.md").read_text(encoding="utf-8") == "keep me"


def test_render_failure_leaves_output_untouched(make_config, sample_entities, passthrough_formatter):
    config = make_config()
    results = Path(config.results_path)
    results.mkdir(parents=True)
    (results / "README.md").write_text("keep me", encoding="utf-8")

    # the second entity's module template fails after the first entity rendered fine
    loader = ChoiceLoader([
        DictLoader({"module.ts.j2": "{% if entity.name == 'post' %}{{ missing() }}{% endif %}module"}),
        FileSystemLoader(str(TEMPLATE_DIR)),
    ])
    generator = CrudGenerator(config, formatter=passthrough_formatter, loader=loader)

    with pytest.raises(TemplateRenderError) as exc_info:
        generator.generate_crud_files(sample_entities)

    assert exc_info.value.context["entity"] == "post"
    assert read_tree(results) == {"README.md": "keep me"}
    assert not [p for p in results.parent.iterdir() if p.name.startswith(".crud-staging-")]


def test_write_failure_removes_staging_directory(make_config, sample_entities, passthrough_formatter):
    config = make_config()
    generator = CrudGenerator(config, formatter=passthrough_formatter)

    with patch("typeorm_crud_generator.pipeline.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OutputWriteError):
            generator.generate_crud_files(sample_entities)

    assert not [p for p in Path(config.results_path).parent.iterdir() if p.name.startswith(".crud-staging-")]


def colliding_entities():
    return [
        Entity(name="user_profile", columns=[Column(name="id", tsc_type="number", primary=True)]),
        Entity(name="UserProfile", columns=[Column(name="nickname", tsc_type="string")]),
    ]


def test_file_name_collision_last_write_wins(make_config, passthrough_formatter):
    generator = CrudGenerator(make_config(), formatter=passthrough_formatter)

    with patch("typeorm_crud_generator.pipeline.logger") as mock_logger:
        file_set = generator.generate_source_code(colliding_entities())
        assert "user-profile" in mock_logger.warning.call_args[0][0]

    assert len(file_set.crud_source) == 6
    assert "nickname" in file_set.crud_source["create-user-profile.dto.ts"]
    assert "nickname" in file_set.entity_source["user-profile.entity.ts"]


def test_file_name_collision_exports_once_from_index(make_config, passthrough_formatter):
    generator = CrudGenerator(make_config(index_file=True), formatter=passthrough_formatter)
    index_source = generator.generate_source_code(colliding_entities()).index_source

    assert index_source.count("export { UserProfileModule }") == 1
    assert index_source.count("/user-profile/entity/user-profile.entity") == 1


def test_file_name_collision_as_error(make_config, passthrough_formatter):
    config = make_config(on_file_name_collision="error")
    generator = CrudGenerator(config, formatter=passthrough_formatter)

    with pytest.raises(FileNameCollisionError) as exc_info:
        generator.generate_crud_files(colliding_entities())

    assert exc_info.value.entities == ["user_profile", "UserProfile"]
    assert not Path(config.results_path).exists()


def test_empty_entity_list(make_config, passthrough_formatter):
    file_set = CrudGenerator(make_config(), formatter=passthrough_formatter).generate_source_code([])
    assert len(file_set) == 0


def test_default_formatter_without_prettier(make_config):
    with patch("typeorm_crud_generator.codegen_utils.shutil.which", return_value=None):
        assert default_formatter(make_config()) is None
        assert CrudGenerator(make_config()).formatter is None


def test_default_formatter_with_prettier(make_config):
    with patch("typeorm_crud_generator.codegen_utils.shutil.which", return_value="/usr/bin/prettier"):
        formatter = default_formatter(make_config(formatter_command="prettier --parser typescript"))
    assert formatter is not None
    assert formatter.command == ["prettier", "--parser", "typescript"]
