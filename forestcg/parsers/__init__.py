"""
Parsers module - instance file parsers.

Available Parsers:
-----------------
- Parser: Abstract base class for custom parsers
- TSPLIBParser: TSPLIB EUC_2D coordinates, complete graph
- TxtGraphParser: Plain text depot format (see write_txt_file)

Usage:
------
>>> from forestcg.parsers import TSPLIBParser
>>> builder = TSPLIBParser().parse("data/berlin52.tsp")
>>> assign_depots(builder, 4)
>>> graph = builder.finalize()
"""

from forestcg.parsers.base import (
    Parser,
    ParserConfig,
    ParserRegistry,
    get_parser,
    parse,
    register_parser,
)
from forestcg.parsers.tsplib import TSPLIBParser
from forestcg.parsers.txt import TxtGraphParser, write_txt_file

register_parser(TSPLIBParser)
register_parser(TxtGraphParser)

__all__ = [
    "Parser",
    "ParserConfig",
    "ParserRegistry",
    "TSPLIBParser",
    "TxtGraphParser",
    "write_txt_file",
    "register_parser",
    "get_parser",
    "parse",
]
