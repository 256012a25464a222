"""
Instance reader interface and the suffix based parser registry.

A parser turns one instance file into a GraphBuilder rather than a Graph,
so depots can still be assigned and edges cut before finalization.
Malformed input raises ValueError; a missing file surfaces as the
FileNotFoundError raised by open().
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from forestcg.core.builder import GraphBuilder

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class ParserConfig:
    """
    Options handed to every parser instance.

    Attributes:
        encoding: Text encoding of instance files
        options: Free-form settings a particular format may read
    """
    encoding: str = "utf-8"
    options: Dict[str, Any] = field(default_factory=dict)


class Parser(ABC):
    """
    Reads one instance format.

    Subclasses set ``suffix`` and implement parse(). The default
    can_parse() accepts any existing file whose suffix matches.
    """

    suffix: str = ""

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config if config is not None else ParserConfig()

    @abstractmethod
    def parse(self, path: PathLike) -> GraphBuilder:
        """Build an unfinalized graph from the file at ``path``."""

    def can_parse(self, path: PathLike) -> bool:
        candidate = Path(path)
        if not candidate.is_file():
            return False
        return self.suffix == "" or candidate.suffix == self.suffix

    def get_format_name(self) -> str:
        """Class name without the trailing "Parser"."""
        return type(self).__name__.replace("Parser", "")

    def _log(self, message: str) -> None:
        logger.debug("[%s] %s", self.get_format_name(), message)

    def _read_text(self, path: PathLike) -> str:
        return Path(path).read_text(encoding=self.config.encoding)

    def _read_lines(self, path: PathLike) -> List[str]:
        return [line.strip() for line in self._read_text(path).splitlines()]

    def _read_tokens(self, path: PathLike) -> List[str]:
        return self._read_text(path).split()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(suffix={self.suffix!r})"


class ParserRegistry:
    """
    Named collection of parser classes.

    parse() either uses the parser registered under ``parser_name`` or
    tries every registered parser in insertion order and takes the first
    whose can_parse() accepts the file.
    """

    def __init__(self):
        self._by_name: Dict[str, Type[Parser]] = {}

    def register(self, parser_class: Type[Parser], name: Optional[str] = None) -> None:
        self._by_name[name or parser_class.__name__] = parser_class

    def get(self, name: str) -> Optional[Type[Parser]]:
        return self._by_name.get(name)

    def list_parsers(self) -> List[str]:
        return list(self._by_name)

    def _select(self, path: Path, parser_name: Optional[str], config: ParserConfig) -> Parser:
        if parser_name:
            chosen = self.get(parser_name)
            if chosen is None:
                raise ValueError(f"Unknown parser: {parser_name}")
            return chosen(config)

        for candidate in self._by_name.values():
            reader = candidate(config)
            if reader.can_parse(path):
                return reader
        raise ValueError(f"No parser found for: {path}")

    def parse(self, path: PathLike, parser_name: Optional[str] = None, **config_options) -> GraphBuilder:
        """
        Read ``path`` with an explicit or detected parser.

        Keyword arguments become ParserConfig fields.

        Raises:
            ValueError: Unknown ``parser_name`` or no parser accepts the file
        """
        path = Path(path)
        reader = self._select(path, parser_name, ParserConfig(**config_options))
        logger.debug("reading %s with %r", path, reader)
        return reader.parse(path)


_default_registry = ParserRegistry()


def register_parser(parser_class: Type[Parser], name: Optional[str] = None) -> None:
    _default_registry.register(parser_class, name)


def get_parser(name: str) -> Optional[Type[Parser]]:
    return _default_registry.get(name)


def parse(path: PathLike, **options) -> GraphBuilder:
    """Read an instance through the package-wide registry."""
    return _default_registry.parse(path, **options)
