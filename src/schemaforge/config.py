import importlib
from enum import Enum
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from schemaforge import log


class CaseFormat(str, Enum):
    CAMEL_CASE = "camelCase"
    PASCAL_CASE = "PascalCase"
    SNAKE_CASE = "snake_case"
    KEBAB_CASE = "kebab-case"
    MACRO_CASE = "MACROCASE"
    COBOL_CASE = "COBOL-CASE"
    FLAT_CASE = "flatcase"
    TITLE_CASE = "TitleCase"


class NumberScalarMode(str, Enum):
    FLOAT = "float"
    INTEGER = "integer"


class DateScalarMode(str, Enum):
    ISO_DATE = "isoDate"
    TIMESTAMP = "timestamp"


def import_from_string(path: str) -> Any:
    """Import an object given as ``"package.module:attribute"`` or ``"package.module.attribute"``."""
    module_name, sep, attribute = path.partition(":")
    if not sep:
        module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        raise ValueError(f"Invalid import path '{path}', expected 'module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}': {e}") from e
    try:
        return getattr(module, attribute)
    except AttributeError as e:
        raise ValueError(f"Module '{module_name}' has no attribute '{attribute}'") from e


class BuildSchemaOptions(BaseModel):
    """Options shared by every factory during one schema build."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", arbitrary_types_allowed=True)

    field_middleware: list[Any] = Field(default_factory=list, alias="fieldMiddleware")
    number_scalar_mode: NumberScalarMode = Field(NumberScalarMode.FLOAT, alias="numberScalarMode")
    date_scalar_mode: DateScalarMode = Field(DateScalarMode.ISO_DATE, alias="dateScalarMode")
    field_name_case: CaseFormat | None = Field(None, alias="fieldNameCase")
    orphaned_types: list[Any] = Field(default_factory=list, alias="orphanedTypes")
    skip_check: bool = Field(False, alias="skipCheck")

    @field_validator("field_middleware", "orphaned_types", mode="before")
    @classmethod
    def import_dotted_paths(cls, value: Any) -> Any:
        if value is None:
            return []
        if not isinstance(value, list | tuple):
            raise ValueError(f"Expected a list, got {type(value).__name__}")
        return [import_from_string(item) if isinstance(item, str) else item for item in value]

    @field_validator("field_middleware")
    @classmethod
    def check_middleware_callable(cls, value: list[Any]) -> list[Any]:
        for middleware in value:
            if not callable(middleware):
                raise ValueError(f"Field middleware must be callable, got {middleware!r}")
        return value


def load_build_options(config_path: Path | None) -> BuildSchemaOptions:
    """Load build options from a YAML file.

    Args:
        config_path: Path to the YAML file, or None for defaults

    Returns:
        Validated BuildSchemaOptions

    Raises:
        TypeError: If the YAML root is not a mapping.
        ValidationError: If validation against BuildSchemaOptions fails.
    """
    if config_path is None:
        log.debug("No build options file provided")
        return BuildSchemaOptions()

    raw: Any
    with config_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    log.debug(f"Loaded build options from {config_path}")

    # Empty file or explicit YAML null means defaults
    if raw is None or raw == {}:
        return BuildSchemaOptions()

    if not isinstance(raw, dict):
        raise TypeError(f"Build options root must be a mapping (YAML object), got {type(raw).__name__}")

    return BuildSchemaOptions.model_validate(cast(dict[str, Any], raw))
