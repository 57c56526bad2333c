"""Graph statistics used by the query planner."""

from .errors import StatisticsLoadError, StatisticsUnavailable, StatisticsValidationError
from .loader import dump_statistics, load_statistics, parse_statistics_from_string
from .models import DEFAULT_ESTIMATE, GraphStatistics, TripleCount

__all__ = [
    "StatisticsLoadError",
    "StatisticsUnavailable",
    "StatisticsValidationError",
    "dump_statistics",
    "load_statistics",
    "parse_statistics_from_string",
    "DEFAULT_ESTIMATE",
    "GraphStatistics",
    "TripleCount",
]
