"""
Tests for the GenerateService facade
"""

import zipfile
from unittest.mock import patch

import pytest

from typeorm_crud_generator.exceptions import ArchiveError
from typeorm_crud_generator.schema_loader import FileSchemaProvider
from typeorm_crud_generator.service import GenerateService


def service_for(schema_dump, passthrough_formatter):
    return GenerateService(FileSchemaProvider(schema_dump), formatter=passthrough_formatter)


def test_generate_crud_writes_filtered_entities(schema_dump, tmp_path, passthrough_formatter):
    results = tmp_path / "generated"
    written = service_for(schema_dump, passthrough_formatter).generate_crud(
        {"databaseType": "postgres", "skipTables": "migrations"},
        {"resultsPath": str(results), "convertEol": "LF"},
    )

    assert len(written) == 14
    assert (results / "user-profile" / "entity" / "user-profile.entity.ts").is_file()
    assert not (results / "migrations").exists()


def test_generate_source_code_is_in_memory(schema_dump, tmp_path, passthrough_formatter):
    results = tmp_path / "generated"
    file_set = service_for(schema_dump, passthrough_formatter).generate_source_code(
        {"only_tables": ["post"]}, {"results_path": str(results), "include_related_tables": False}
    )

    assert set(file_set.entity_source) == {"post.entity.ts"}
    assert "ManyToOne" not in file_set.entity_source["post.entity.ts"]
    assert "authorId: number;" in file_set.entity_source["post.entity.ts"]
    assert not results.exists()


def test_generate_and_archive_crud(schema_dump, tmp_path, passthrough_formatter):
    results = tmp_path / "generated"
    archive_path = service_for(schema_dump, passthrough_formatter).generate_and_archive_crud(
        {"skip_tables": "migrations"},
        {"results_path": str(results)},
        archive_name="crud.zip",
        dest_dir=tmp_path,
    )

    assert archive_path == (tmp_path / "crud.zip").resolve()
    assert not results.exists()
    with zipfile.ZipFile(archive_path) as zf:
        assert "post/post.module.ts" in zf.namelist()


def test_empty_model_warns(schema_dump, tmp_path, passthrough_formatter):
    with patch("typeorm_crud_generator.service.logger") as mock_logger:
        written = service_for(schema_dump, passthrough_formatter).generate_crud(
            {"only_tables": "does_not_exist"}, {"results_path": str(tmp_path / "generated")}
        )
    assert written == []
    mock_logger.warning.assert_called_once()
    assert not (tmp_path / "generated").exists()


def test_archive_in_results_directory_keeps_generated_files(schema_dump, tmp_path, passthrough_formatter, monkeypatch):
    results = tmp_path / "generated"
    results.mkdir()
    monkeypatch.chdir(results)

    with pytest.raises(ArchiveError):
        service_for(schema_dump, passthrough_formatter).generate_and_archive_crud(
            {"skip_tables": "migrations"}, {"results_path": str(results)}, archive_name="crud.zip"
        )

    assert (results / "post" / "post.module.ts").is_file()
    assert not (results / "crud.zip").exists()
