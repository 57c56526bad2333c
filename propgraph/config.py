"""Matching configuration loaded from YAML."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .loader import load_yaml, validation_errors
from .matching.strategy import DEFAULT_EDGE_STRATEGY, DEFAULT_VERTEX_STRATEGY, MatchStrategy

STATISTICS_ENVVAR = "PROPGRAPH_STATISTICS"


class ConfigLoadError(Exception):
    """Raised when a configuration file cannot be loaded or is invalid."""

    def __init__(self, message: str, path: str | None = None, errors: list[dict] | None = None):
        self.path = path
        self.errors = errors or []
        super().__init__(message)


class MatchingConfig(BaseModel):
    """Defaults for planning and executing pattern queries.

    Example::

        vertex_strategy: isomorphism
        edge_strategy: isomorphism
        statistics: stats.yaml
        default_estimate: 500
    """

    model_config = ConfigDict(extra="forbid")

    vertex_strategy: MatchStrategy = DEFAULT_VERTEX_STRATEGY
    edge_strategy: MatchStrategy = DEFAULT_EDGE_STRATEGY
    statistics: str | None = None
    default_estimate: float | None = Field(default=None, gt=0)

    @model_validator(mode="before")
    @classmethod
    def normalize_strategies(cls, data: Any) -> Any:
        """Accept strategy names in any case."""
        if not isinstance(data, dict):
            return data

        result = dict(data)
        for key in ("vertex_strategy", "edge_strategy"):
            if isinstance(result.get(key), str):
                result[key] = result[key].lower()
        return result


def load_config(path: str | Path) -> MatchingConfig:
    """Load a matching configuration from a YAML file.

    Relative statistics paths are resolved against the config file's directory.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed configuration.

    Raises:
        ConfigLoadError: If the file cannot be read, parsed or validated.
    """
    path = Path(path)
    data = load_yaml(path, ConfigLoadError)

    try:
        config = MatchingConfig.model_validate(data)
    except ValidationError as e:
        errors = validation_errors(e)
        raise ConfigLoadError(
            f"Config validation failed with {len(errors)} error(s)", str(path), errors
        ) from e

    if config.statistics is not None and not Path(config.statistics).is_absolute():
        config = config.model_copy(update={"statistics": str(path.parent / config.statistics)})
    return config
