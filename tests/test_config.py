from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from schemaforge.config import (
    BuildSchemaOptions,
    CaseFormat,
    DateScalarMode,
    NumberScalarMode,
    import_from_string,
    load_build_options,
)
from tests.data.middleware import uppercase


class TestBuildSchemaOptions:
    def test_defaults(self) -> None:
        options = BuildSchemaOptions()

        assert options.field_middleware == []
        assert options.number_scalar_mode is NumberScalarMode.FLOAT
        assert options.date_scalar_mode is DateScalarMode.ISO_DATE
        assert options.field_name_case is None
        assert options.orphaned_types == []
        assert options.skip_check is False

    def test_aliases_and_field_names_are_both_accepted(self) -> None:
        config: Any = {"numberScalarMode": "integer", "skip_check": True}
        options = BuildSchemaOptions(**config)

        assert options.number_scalar_mode is NumberScalarMode.INTEGER
        assert options.skip_check is True

    def test_unknown_option_is_rejected(self) -> None:
        config: Any = {"fieldMiddlewares": []}
        with pytest.raises(ValidationError):
            BuildSchemaOptions(**config)

    def test_invalid_case_format(self) -> None:
        config: Any = {"fieldNameCase": "InvalidCase"}
        with pytest.raises(ValidationError):
            BuildSchemaOptions(**config)

    def test_middleware_given_as_import_path(self) -> None:
        config: Any = {"fieldMiddleware": ["tests.data.middleware:uppercase"]}
        options = BuildSchemaOptions(**config)

        assert options.field_middleware == [uppercase]

    def test_middleware_must_be_callable(self) -> None:
        config: Any = {"fieldMiddleware": ["tests.data.middleware:not_callable"]}
        with pytest.raises(ValidationError, match="must be callable"):
            BuildSchemaOptions(**config)

    def test_middleware_object_must_be_callable(self) -> None:
        with pytest.raises(ValidationError, match="must be callable, got 42"):
            BuildSchemaOptions(field_middleware=[42])

    def test_middleware_must_be_a_list(self) -> None:
        config: Any = {"fieldMiddleware": "tests.data.middleware:uppercase"}
        with pytest.raises(ValidationError, match="Expected a list"):
            BuildSchemaOptions(**config)

    def test_orphaned_types_given_as_import_paths(self) -> None:
        config: Any = {"orphanedTypes": ["tests.data.middleware.uppercase", Path]}
        options = BuildSchemaOptions(**config)

        assert options.orphaned_types == [uppercase, Path]


class TestImportFromString:
    @pytest.mark.parametrize("path", ["pathlib:Path", "pathlib.Path"])
    def test_both_separators(self, path: str) -> None:
        assert import_from_string(path) is Path

    @pytest.mark.parametrize(
        "path,message",
        [
            ("Path", "Invalid import path"),
            ("pathlib:", "Invalid import path"),
            ("pathlib:Nothing", "has no attribute"),
            ("no_such_module_here:Thing", "Cannot import module"),
        ],
    )
    def test_invalid_paths(self, path: str, message: str) -> None:
        with pytest.raises(ValueError, match=message):
            import_from_string(path)


class TestLoadBuildOptions:
    def test_load_valid_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "build.yaml"
        config_file.write_text(
            """
            fieldNameCase: camelCase
            dateScalarMode: timestamp
            fieldMiddleware:
              - tests.data.middleware:uppercase
            """,
            encoding="utf-8",
        )

        options = load_build_options(config_file)

        assert options == BuildSchemaOptions(
            field_name_case=CaseFormat.CAMEL_CASE,
            date_scalar_mode=DateScalarMode.TIMESTAMP,
            field_middleware=[uppercase],
        )

    def test_load_invalid_config_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "build.yaml"
        config_file.write_text("invalid_option: true\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_build_options(config_file)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        config_file = tmp_path / "build.yaml"
        config_file.write_text("- camelCase\n", encoding="utf-8")

        with pytest.raises(TypeError, match="must be a mapping"):
            load_build_options(config_file)

    @pytest.mark.parametrize("content", ["", "null\n", "{}\n"])
    def test_load_empty_config(self, tmp_path: Path, content: str) -> None:
        config_file = tmp_path / "build.yaml"
        config_file.write_text(content, encoding="utf-8")

        assert load_build_options(config_file) == BuildSchemaOptions()

    def test_no_config_file(self) -> None:
        assert load_build_options(None) == BuildSchemaOptions()
