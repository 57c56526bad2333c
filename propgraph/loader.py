"""YAML helpers shared by the statistics and configuration loaders."""

from pathlib import Path

import yaml
from pydantic import ValidationError

def load_yaml(path: str | Path, error_class: type[Exception]) -> dict:
    """Load a YAML file whose root must be a mapping.

    Args:
        path: Path to the YAML file.
        error_class: Exception raised on failure, built from a message and
            the path.

    Returns:
        The raw data; an empty file gives an empty mapping.
    """
    path = Path(path)

    if not path.exists():
        raise error_class(f"File not found: {path}", str(path))

    if not path.is_file():
        raise error_class(f"Not a file: {path}", str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise error_class(f"Invalid YAML: {e}", str(path)) from e
    except OSError as e:
        raise error_class(f"Cannot read file: {e}", str(path)) from e

    return _mapping(data, error_class, str(path))


def parse_yaml(yaml_string: str, error_class: type[Exception]) -> dict:
    """Parse a YAML string whose root must be a mapping."""
    try:
        data = yaml.safe_load(yaml_string)
    except yaml.YAMLError as e:
        raise error_class(f"Invalid YAML: {e}") from e

    return _mapping(data, error_class, None)


def validation_errors(error: ValidationError) -> list[dict]:
    """Flatten pydantic errors to ``loc``/``msg``/``type`` records."""
    return [
        {
            "loc": ".".join(str(x) for x in err["loc"]),
            "msg": err["msg"],
            "type": err["type"],
        }
        for err in error.errors()
    ]


def _mapping(data: object, error_class: type[Exception], path: str | None) -> dict:
    if data is None:
        return {}

    if not isinstance(data, dict):
        raise error_class(f"Expected YAML mapping at root, got {type(data).__name__}", path)

    return data
