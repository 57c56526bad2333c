"""YAML loading and dumping of graph statistics."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .. import loader
from .errors import StatisticsLoadError, StatisticsValidationError
from .models import GraphStatistics


def load_yaml(path: str | Path) -> dict:
    """Load a YAML file and return the raw data.

    Raises:
        StatisticsLoadError: If the file cannot be read or parsed.
    """
    return loader.load_yaml(path, StatisticsLoadError)


def load_statistics(path: str | Path) -> GraphStatistics:
    """Load graph statistics from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed statistics.

    Raises:
        StatisticsLoadError: If the file cannot be read or parsed.
        StatisticsValidationError: If the data fails validation.
    """
    return _parse_statistics_data(load_yaml(path))


def parse_statistics_from_string(yaml_string: str) -> GraphStatistics:
    """Parse graph statistics from a YAML string.

    Raises:
        StatisticsLoadError: If the YAML cannot be parsed.
        StatisticsValidationError: If the data fails validation.
    """
    return _parse_statistics_data(loader.parse_yaml(yaml_string, StatisticsLoadError))


def dump_statistics(statistics: GraphStatistics) -> str:
    """Serialize statistics to YAML, readable by ``load_statistics``."""
    return yaml.safe_dump(statistics.model_dump(mode="json"), sort_keys=False)


def _parse_statistics_data(data: dict) -> GraphStatistics:
    try:
        return GraphStatistics.model_validate(data)
    except ValidationError as e:
        errors = loader.validation_errors(e)
        raise StatisticsValidationError(
            f"Statistics validation failed with {len(errors)} error(s)", errors
        ) from e
