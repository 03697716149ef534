"""
Document loading for campaignflow.

Reads schema documents, standard definitions and campaign data files from
JSON or YAML. The format follows the file suffix; files with any other
suffix are tried as JSON first, then as YAML.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .common.exceptions import ConfigurationError, DocumentLoadError
from .constants import BUNDLED_SCHEMA, BUNDLED_STANDARD, FILE_EXT_JSON, FILE_EXT_YAML, FILE_EXT_YML
from .models import StandardDefinition

logger = logging.getLogger(__name__)

DATA_PACKAGE = "campaignflow.data"


def bundled_schema_path() -> Path:
    """Path of the bundled IEA Task 43 schema document."""
    return Path(str(resources.files(DATA_PACKAGE).joinpath(BUNDLED_SCHEMA)))


def bundled_standard_path() -> Path:
    """Path of the bundled standard definition."""
    return Path(str(resources.files(DATA_PACKAGE).joinpath(BUNDLED_STANDARD)))


def _parse_json(text: str) -> Any:
    return json.loads(text)


def _parse_yaml(text: str) -> Any:
    yaml = YAML(typ="safe", pure=True)
    return yaml.load(text)


def read_document(path: str | Path) -> Any:
    """
    Read a JSON or YAML document.

    Args:
        path: File to read

    Returns:
        The parsed document

    Raises:
        DocumentLoadError: If the file cannot be read or parsed
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        logger.error(f"Document not found: {file_path}")
        raise DocumentLoadError(f"Document not found: {file_path}", str(file_path)) from e
    except UnicodeDecodeError as e:
        logger.error(f"Cannot decode document {file_path} as UTF-8: {e}")
        raise DocumentLoadError(f"Cannot decode document {file_path} as UTF-8: {e}", str(file_path)) from e
    except OSError as e:
        logger.error(f"Cannot read document {file_path}: {e}")
        raise DocumentLoadError(f"Cannot read document {file_path}: {e}", str(file_path)) from e

    suffix = file_path.suffix.lower().lstrip(".")
    if suffix == FILE_EXT_JSON:
        parsers = [_parse_json]
    elif suffix in (FILE_EXT_YAML, FILE_EXT_YML):
        parsers = [_parse_yaml]
    else:
        parsers = [_parse_json, _parse_yaml]

    errors = []
    for parser in parsers:
        try:
            return parser(text)
        except (json.JSONDecodeError, YAMLError) as e:
            errors.append(str(e))

    logger.error(f"Cannot parse document {file_path}")
    raise DocumentLoadError(
        f"Cannot parse document {file_path}: {errors[-1]}",
        str(file_path),
        context={"errors": errors},
    )


def load_schema_document(path: str | Path | None = None) -> dict[str, Any]:
    """
    Read a schema document, the bundled one when ``path`` is None.

    Raises:
        DocumentLoadError: If the file cannot be read, parsed, or is not an object
    """
    source = Path(path) if path is not None else bundled_schema_path()
    document = read_document(source)
    if not isinstance(document, dict):
        raise DocumentLoadError(f"Schema document must be an object: {source}", str(source))
    return document


def load_standard(path: str | Path | None = None) -> StandardDefinition:
    """
    Load a standard definition, the bundled one when ``path`` is None.

    Raises:
        DocumentLoadError: If the file cannot be read or parsed
        ConfigurationError: If the definition is structurally invalid
    """
    source = Path(path) if path is not None else bundled_standard_path()
    raw = read_document(source)
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Standard definition must be a mapping: {source}", config_section="standard"
        )
    try:
        standard = StandardDefinition.model_validate(raw)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(loc) for loc in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigurationError(
            f"Invalid standard definition {source}: {details}",
            config_section="standard",
            context={"errors": e.errors(include_url=False)},
        ) from e

    logger.info(f"Loaded standard '{standard.name}' with {len(standard.steps)} steps")
    return standard
