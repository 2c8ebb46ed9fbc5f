"""
Tests for the generation options and connection descriptor validation
"""

from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

import pytest

from typeorm_crud_generator.config_validation import (
    CollisionPolicy,
    ConnectionOptions,
    DatabaseType,
    EndOfLine,
    FileCase,
    GenerationConfig,
    build_connection_options,
    build_generation_config,
    default_generation_options,
    load_config,
)
from typeorm_crud_generator.exceptions import ConfigurationError


class TestGenerationConfig(TestCase):
    """Test cases for GenerationConfig and build_generation_config"""

    def test_documented_defaults(self):
        config = build_generation_config()
        assert config.results_path == str(Path("./output").resolve())
        assert config.pluralize_names is True
        assert config.convert_case_file == FileCase.PARAM
        assert config.convert_case_entity.value == "pascal"
        assert config.convert_case_property.value == "camel"
        assert config.property_visibility.value == "none"
        assert config.strict_mode.value == "none"
        assert config.export_type.value == "named"
        assert config.permission_identifier == "@permission"
        assert config.permission_identifier_prefix == ""
        assert config.include_related_tables is True
        assert config.on_file_name_collision == CollisionPolicy.OVERWRITE
        assert config.formatter_command == ("prettier", "--parser", "typescript")
        assert not config.lazy and not config.active_record and not config.index_file

    def test_camel_case_option_names(self):
        config = build_generation_config({"convertCaseFile": "pascal", "addSwaggerIdentifier": True})
        assert config.convert_case_file == FileCase.PASCAL
        assert config.add_swagger_identifier is True

    def test_legacy_permission_prefix_spelling(self):
        config = build_generation_config({"perMissionIdentifierPrefix": "system"})
        assert config.permission_identifier_prefix == "system"

    def test_unknown_enum_value_is_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_generation_config({"convert_case_file": "shouting"})
        message = str(exc_info.value)
        assert "convert_case_file" in message or "convertCaseFile" in message

    def test_unknown_option_is_rejected(self):
        with pytest.raises(ConfigurationError):
            build_generation_config({"convert_case_fiel": "param"})

    def test_bad_permission_identifier(self):
        with pytest.raises(ConfigurationError):
            build_generation_config({"permission_identifier": "permission"})

    def test_formatter_command_from_string(self):
        config = build_generation_config({"formatter_command": "npx prettier --parser typescript"})
        assert config.formatter_command == ("npx", "prettier", "--parser", "typescript")

    def test_eol(self):
        assert build_generation_config({"convert_eol": "CRLF"}).eol == "\r\n"
        assert build_generation_config({"convert_eol": EndOfLine.LF}).eol == "\n"

    def test_config_is_immutable(self):
        config = build_generation_config()
        with pytest.raises(Exception):
            config.lazy = True

    def test_existing_config_is_returned_as_is(self):
        config = build_generation_config({"lazy": True})
        assert build_generation_config(config) is config

    def test_permission_import_without_feature_warns(self):
        with patch("typeorm_crud_generator.config_validation.logger") as mock_logger:
            build_generation_config({"permission_import_path": "src/auth"})
            mock_logger.warning.assert_called_once()

    def test_default_generation_options_are_plain_values(self):
        options = default_generation_options()
        assert options["convert_case_file"] == "param"
        assert options["results_path"].endswith("output")


class TestConnectionOptions(TestCase):
    """Test cases for ConnectionOptions"""

    def test_default_port_follows_engine(self):
        assert build_connection_options({"database_type": "postgres"}).port == 5432
        assert build_connection_options({}).port == 3306
        assert build_connection_options({"databaseType": "mssql", "port": "1533"}).port == 1533

    def test_comma_separated_lists(self):
        options = build_connection_options({"database_names": "app, reporting", "skip_tables": "migrations,,logs"})
        assert options.database_names == ["app", "reporting"]
        assert options.skip_tables == ["migrations", "logs"]

    def test_invalid_port(self):
        with pytest.raises(ConfigurationError):
            build_connection_options({"port": "http"})
        with pytest.raises(ConfigurationError):
            build_connection_options({"port": 70000})

    def test_unknown_database_type(self):
        with pytest.raises(ConfigurationError):
            build_connection_options({"database_type": "db2"})

    def test_instance_is_returned_as_is(self):
        options = ConnectionOptions(database_type=DatabaseType.SQLITE)
        assert build_connection_options(options) is options
        assert options.port == 0


def test_load_config_merges_file_and_overrides(tmp_path):
    config_file = tmp_path / "crud.yaml"
    config_file.write_text(
        "generation:\n"
        "  resultsPath: generated\n"
        "  convertCaseFile: pascal\n"
        "  lazy: true\n"
        "connection:\n"
        "  databaseType: postgres\n"
        "  onlyTables: [users, posts]\n",
        encoding="utf-8",
    )

    generation, connection = load_config(
        str(config_file),
        generation_overrides={"results_path": str(tmp_path / "out"), "add_swagger_identifier": None},
        connection_overrides={"host": "db.local", "port": None},
    )

    assert isinstance(generation, GenerationConfig)
    assert generation.results_path == str((tmp_path / "out").resolve())
    assert generation.convert_case_file == FileCase.PASCAL
    assert generation.lazy is True
    assert generation.add_swagger_identifier is False
    assert connection.database_type == DatabaseType.POSTGRES
    assert connection.port == 5432
    assert connection.host == "db.local"
    assert connection.only_tables == ["users", "posts"]


def test_load_config_missing_file_uses_defaults(tmp_path):
    generation, connection = load_config(str(tmp_path / "missing.yaml"))
    assert generation.convert_case_file == FileCase.PARAM
    assert connection.host == "localhost"


def test_load_config_rejects_non_mapping(tmp_path):
    config_file = tmp_path / "list.yaml"
    config_file.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(config_file))


def test_load_config_rejects_invalid_yaml(tmp_path):
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("generation: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(config_file))
