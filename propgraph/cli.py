"""Command-line interface for propgraph."""

import logging
import sys
from typing import NoReturn

import click

from .config import STATISTICS_ENVVAR, ConfigLoadError, MatchingConfig, load_config
from .matching.errors import ExecutionFailure
from .matching.strategy import MatchStrategy
from .model.errors import GraphFormatError, GraphLoadError
from .query.errors import QueryError
from .statistics.errors import StatisticsLoadError, StatisticsValidationError
from .statistics.models import GraphStatistics

STRATEGIES = [s.value for s in MatchStrategy]
FORMAT_OPTION = click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)


def _exit_with_error(prefix: str, error: Exception) -> NoReturn:
    click.echo(f"{prefix}: {error}", err=True)
    for err in getattr(error, "errors", []):
        click.echo(f"  - {err['loc']}: {err['msg']}", err=True)
    sys.exit(2)


def _load_config(config_file: str | None) -> MatchingConfig:
    if config_file is None:
        return MatchingConfig()
    try:
        return load_config(config_file)
    except ConfigLoadError as e:
        _exit_with_error("Error loading config", e)


def _load_statistics(path: str | None, config: MatchingConfig) -> GraphStatistics | None:
    """Load statistics from the option, falling back to the config file."""
    from .statistics.loader import load_statistics

    path = path or config.statistics
    if path is None:
        if config.default_estimate is not None:
            return GraphStatistics(default_estimate=config.default_estimate)
        return None

    try:
        statistics = load_statistics(path)
    except (StatisticsLoadError, StatisticsValidationError) as e:
        _exit_with_error("Error loading statistics", e)

    if config.default_estimate is not None:
        statistics = statistics.model_copy(update={"default_estimate": config.default_estimate})
    return statistics


def _load_graph(graph_file: str, variable: str | None):
    """Load a graph document and select a graph; returns (loader, graph)."""
    from .model.ascii import load_graphs

    try:
        loader = load_graphs(graph_file)
        if variable is None:
            return loader, loader.get_database_graph()
        return loader, loader.get_logical_graph_by_variable(variable)
    except (GraphLoadError, GraphFormatError) as e:
        _exit_with_error("Error loading graph", e)


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def main(verbose: bool):
    """propgraph: pattern matching and equality on property graphs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("query")
@click.option(
    "--statistics",
    "statistics_file",
    envvar=STATISTICS_ENVVAR,
    type=click.Path(),
    help=f"Statistics YAML file (defaults to {STATISTICS_ENVVAR} env var)",
)
@click.option("--config", "config_file", type=click.Path(), help="Matching config YAML file")
@click.option("--return", "return_variables", multiple=True, help="Variable to project onto")
@FORMAT_OPTION
def plan(
    query: str,
    statistics_file: str | None,
    config_file: str | None,
    return_variables: tuple[str, ...],
    output_format: str,
):
    """Show the execution plan of a pattern query.

    QUERY is a pattern such as "MATCH (a:Person)-[:knows]->(b) WHERE a.age > 30".

    Exit codes:
      0 - Plan computed
      2 - File, syntax or planning error
    """
    from .matching.cypher import CypherPatternMatching
    from .output.formatter import format_plan

    config = _load_config(config_file)
    statistics = _load_statistics(statistics_file, config)

    try:
        matching = CypherPatternMatching(
            query, statistics=statistics, return_variables=list(return_variables) or None
        )
        entry = matching.plan()
    except QueryError as e:
        _exit_with_error("Query error", e)

    click.echo(format_plan(entry, output_format))  # type: ignore
    sys.exit(0)


@main.command("match")
@click.argument("graph_file", type=click.Path(exists=True))
@click.argument("query")
@click.option("--graph", "graph_variable", help="Graph variable to match against (default: all)")
@click.option(
    "--vertex-strategy",
    type=click.Choice(STRATEGIES, case_sensitive=False),
    help="Vertex match strategy (default: homomorphism)",
)
@click.option(
    "--edge-strategy",
    type=click.Choice(STRATEGIES, case_sensitive=False),
    help="Edge match strategy (default: isomorphism)",
)
@click.option(
    "--statistics",
    "statistics_file",
    envvar=STATISTICS_ENVVAR,
    type=click.Path(),
    help="Statistics YAML file (computed from the graph if omitted)",
)
@click.option("--config", "config_file", type=click.Path(), help="Matching config YAML file")
@click.option("--return", "return_variables", multiple=True, help="Variable to project onto")
@FORMAT_OPTION
def match_cmd(
    graph_file: str,
    query: str,
    graph_variable: str | None,
    vertex_strategy: str | None,
    edge_strategy: str | None,
    statistics_file: str | None,
    config_file: str | None,
    return_variables: tuple[str, ...],
    output_format: str,
):
    """Match a pattern query against a graph.

    GRAPH_FILE is an ASCII graph document, QUERY a pattern query.

    Exit codes:
      0 - At least one match
      1 - No match
      2 - File, syntax, planning or execution error
    """
    from .matching.cypher import CypherPatternMatching
    from .output.formatter import format_embeddings

    config = _load_config(config_file)
    statistics = _load_statistics(statistics_file, config)
    loader, graph = _load_graph(graph_file, graph_variable)

    try:
        matching = CypherPatternMatching(
            query,
            statistics=statistics,
            vertex_strategy=MatchStrategy(vertex_strategy.lower())
            if vertex_strategy
            else config.vertex_strategy,
            edge_strategy=MatchStrategy(edge_strategy.lower())
            if edge_strategy
            else config.edge_strategy,
            return_variables=list(return_variables) or None,
        )
        embeddings, metadata = matching.collect(graph)
    except QueryError as e:
        _exit_with_error("Query error", e)
    except ExecutionFailure as e:
        _exit_with_error("Execution failed", e)

    output = format_embeddings(embeddings, metadata, output_format, loader.variables_by_id())  # type: ignore
    click.echo(output)

    sys.exit(0 if embeddings else 1)


@main.command()
@click.argument("graph_file", type=click.Path(exists=True))
@click.argument("left")
@click.argument("right")
@click.option(
    "--mode",
    type=click.Choice(["graph-ids", "ids", "element-data", "data"]),
    default="data",
    help="What to compare (graph-ids requires --collection)",
)
@click.option("--undirected", is_flag=True, default=False, help="Ignore edge direction")
@click.option(
    "--collection",
    is_flag=True,
    default=False,
    help="Treat LEFT and RIGHT as comma-separated lists of graph variables",
)
@FORMAT_OPTION
def equal(
    graph_file: str,
    left: str,
    right: str,
    mode: str,
    undirected: bool,
    collection: bool,
    output_format: str,
):
    """Compare two graphs (or graph collections) of a document.

    LEFT and RIGHT are graph variables of GRAPH_FILE.

    Exit codes:
      0 - Equal
      1 - Not equal
      2 - File or usage error
    """
    from .equality import equality as eq
    from .model.ascii import load_graphs
    from .output.formatter import format_equality

    if mode == "graph-ids" and not collection:
        click.echo("Error: --mode graph-ids requires --collection", err=True)
        sys.exit(2)
    if mode in ("graph-ids", "ids") and undirected:
        click.echo(f"Error: --undirected cannot be used with --mode {mode}", err=True)
        sys.exit(2)

    directed = not undirected
    try:
        loader = load_graphs(graph_file)
        if collection:
            first = loader.get_graph_collection_by_variables(*_split(left))
            second = loader.get_graph_collection_by_variables(*_split(right))
        else:
            first = loader.get_logical_graph_by_variable(left)
            second = loader.get_logical_graph_by_variable(right)
    except (GraphLoadError, GraphFormatError) as e:
        _exit_with_error("Error loading graph", e)

    if collection:
        result = {
            "graph-ids": lambda: eq.collection_equals_by_graph_ids(first, second),
            "ids": lambda: eq.collection_equals_by_element_ids(first, second),
            "element-data": lambda: eq.collection_equals_by_element_data(first, second, directed),
            "data": lambda: eq.collection_equals_by_data(first, second, directed),
        }[mode]()
    else:
        result = {
            "ids": lambda: eq.equals_by_element_ids(first, second),
            "element-data": lambda: eq.equals_by_element_data(first, second, directed),
            "data": lambda: eq.equals_by_data(first, second, directed),
        }[mode]()

    click.echo(format_equality(result, mode, directed, output_format))  # type: ignore
    sys.exit(0 if result else 1)


def _split(variables: str) -> list[str]:
    return [v.strip() for v in variables.split(",") if v.strip()]


@main.command()
@click.argument("graph_file", type=click.Path(exists=True))
@click.option("--graph", "graph_variable", help="Graph variable (default: all elements)")
def stats(graph_file: str, graph_variable: str | None):
    """Compute statistics of a graph and print them as YAML.

    The output can be passed to the --statistics option of other commands.

    Exit codes:
      0 - Success
      2 - File error
    """
    from .statistics.loader import dump_statistics

    _, graph = _load_graph(graph_file, graph_variable)
    click.echo(dump_statistics(GraphStatistics.from_graph(graph)), nl=False)
    sys.exit(0)


if __name__ == "__main__":
    main()
