"""Tree-sitter front-end adapter.

Converts tree-sitter parse trees into astdelta Trees:
- named nodes become Nodes (anonymous tokens are folded away)
- leaf text becomes the node value
- operator tokens of inner nodes (``+``, ``>=``, ``&&``) become the value

Grammars are loaded lazily from their wheel modules (``tree_sitter_java``,
``tree_sitter_python``) the first time a language is requested.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

import structlog
import tree_sitter

from astdelta.core.errors import FrontEndError
from astdelta.tree.builder import ParsedNode, build_tree
from astdelta.tree.models import Span, Tree

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GrammarPack:
    """Grammar wheel metadata for one language."""

    name: str
    grammar_package: str  # PyPI package ("tree-sitter-java")
    grammar_module: str  # Python import ("tree_sitter_java")
    extensions: frozenset[str] = field(default_factory=frozenset)


PACKS: dict[str, GrammarPack] = {
    "java": GrammarPack(
        name="java",
        grammar_package="tree-sitter-java",
        grammar_module="tree_sitter_java",
        extensions=frozenset({"java"}),
    ),
    "python": GrammarPack(
        name="python",
        grammar_package="tree-sitter-python",
        grammar_module="tree_sitter_python",
        extensions=frozenset({"py", "pyi"}),
    ),
}

_EXT_TO_LANGUAGE = {ext: pack.name for pack in PACKS.values() for ext in pack.extensions}


def language_for_path(path: str | PurePath) -> str:
    """Language name for a file path, by extension.

    Raises:
        FrontEndError: if no grammar handles the extension.
    """
    ext = PurePath(path).suffix.lower().lstrip(".")
    language = _EXT_TO_LANGUAGE.get(ext)
    if language is None:
        raise FrontEndError.unsupported_file(str(path))
    return language


_PUNCTUATION = frozenset({"(", ")", "[", "]", "{", "}", ",", ";", ":", ".", "@", "\"", "'"})


def _is_operator(token_type: str) -> bool:
    return bool(token_type) and not any(ch.isalnum() or ch == "_" for ch in token_type) and token_type not in _PUNCTUATION


def from_tree_sitter(ts_node: Any, source: bytes) -> Tree:
    """Convert a tree-sitter node (usually ``tree.root_node``) to a Tree."""
    root = ParsedNode(kind=ts_node.type)
    stack: list[tuple[Any, ParsedNode]] = [(ts_node, root)]
    while stack:
        current, parsed = stack.pop()
        parsed.span = Span(current.start_byte, current.end_byte)
        named = [c for c in current.children if c.is_named]
        if not named:
            parsed.value = source[current.start_byte : current.end_byte].decode("utf-8", errors="replace")
            continue
        operators = [c.type for c in current.children if not c.is_named and _is_operator(c.type)]
        if operators:
            parsed.value = " ".join(operators)
        for child in named:
            child_node = ParsedNode(kind=child.type)
            parsed.children.append(child_node)
            stack.append((child, child_node))
    return build_tree(root)


@dataclass
class TreeSitterFrontEnd:
    """Parses source text into Trees for the languages in ``PACKS``.

    Usage::

        front_end = TreeSitterFrontEnd()
        tree = front_end.parse(content, "java")
        tree = front_end.parse_path(Path("Foo.java"), content)
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._languages = {}

    def _get_language(self, name: str) -> Any:
        if name in self._languages:
            return self._languages[name]

        pack = PACKS.get(name)
        if pack is None:
            raise FrontEndError.language_unavailable(name)
        try:
            module = importlib.import_module(pack.grammar_module)
        except ImportError as err:
            raise FrontEndError.language_unavailable(name, pack.grammar_package) from err

        lang = tree_sitter.Language(module.language())
        self._languages[name] = lang
        log.debug("grammar_loaded", language=name, module=pack.grammar_module)
        return lang

    def parse(self, content: bytes | str, language: str) -> Tree:
        data = content.encode() if isinstance(content, str) else content
        self._parser.language = self._get_language(language)
        ts_tree = self._parser.parse(data)
        return from_tree_sitter(ts_tree.root_node, data)

    def parse_path(self, path: str | PurePath, content: bytes | str) -> Tree:
        return self.parse(content, language_for_path(path))


def parse_source(content: bytes | str, language: str) -> Tree:
    """One-shot parse with a fresh front end."""
    return TreeSitterFrontEnd().parse(content, language)
