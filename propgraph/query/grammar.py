"""Lark parsers for the pattern grammar and the graph document grammar."""

from pathlib import Path
from typing import Any

from lark import Lark, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from .errors import QueryError, QuerySyntaxError

GRAMMAR_DIR = Path(__file__).parent

PATTERN_GRAMMAR = "pattern.lark"
DOCUMENT_GRAMMAR = "gdl.lark"

_PARSERS: dict[str, Lark] = {}


def get_parser(grammar: str) -> Lark:
    """Get or create the parser for a grammar file of this package.

    Parsers are built on first use and shared afterwards.
    """
    parser = _PARSERS.get(grammar)
    if parser is None:
        parser = Lark.open(
            str(GRAMMAR_DIR / grammar),
            parser="lalr",
            start="start",
            maybe_placeholders=True,
        )
        _PARSERS[grammar] = parser
    return parser


def parse_with(grammar: str, transformer: Transformer, text: str) -> Any:
    """Parse text with a grammar and transform the resulting tree.

    Raises:
        QuerySyntaxError: If the text does not match the grammar.
        QueryError: If the transformer rejects a well-formed construct.
    """
    try:
        tree = get_parser(grammar).parse(text)
    except UnexpectedInput as e:
        raise syntax_error(text, e) from e

    try:
        return transformer.transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, QueryError):
            raise e.orig_exc from e
        raise


def syntax_error(text: str, error: UnexpectedInput) -> QuerySyntaxError:
    """Map a lark parse error to a QuerySyntaxError carrying the offset."""
    if isinstance(error, UnexpectedCharacters):
        return QuerySyntaxError(
            f"Unexpected character {error.char!r}", error.pos_in_stream, error.char
        )
    if isinstance(error, UnexpectedToken) and error.token.type != "$END":
        token = error.token
        return QuerySyntaxError(f"Unexpected token {str(token)!r}", token.start_pos, str(token))
    return QuerySyntaxError("Unexpected end of input", len(text))
