"""Symbol-outline analysis of source text.

Uses Tree-sitter when a grammar package is installed and per-language regex
patterns otherwise. Languages without a configured grammar are named via
Pygments and reported without symbols.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from ..paths import base_name
from .symbols_config import (
    CLASS_NODE_TYPES,
    FALLBACK_PATTERNS_BY_LANGUAGE,
    FUNCTION_NODE_TYPES,
    GENERIC_FALLBACK_PATTERNS,
    IDENTIFIER_NODE_TYPES,
    IMPORT_NODE_TYPES,
    LANGUAGE_BY_SUFFIX,
    MAX_ANALYZED_BYTES,
    MAX_SYMBOLS,
)

GRAMMAR_LANGUAGES = frozenset(LANGUAGE_BY_SUFFIX.values())


@dataclass(frozen=True)
class SymbolEntry:
    """One outline symbol; ``line`` and ``column`` are zero-based."""

    kind: str
    name: str
    line: int
    column: int


@dataclass(frozen=True)
class SourceReport:
    """Structured analysis result for one file."""

    path: str
    language: str | None
    line_count: int
    symbols: tuple[SymbolEntry, ...] = ()
    parser: str | None = None

    def symbols_of_kind(self, kind: str) -> tuple[SymbolEntry, ...]:
        return tuple(symbol for symbol in self.symbols if symbol.kind == kind)

    @property
    def functions(self) -> tuple[SymbolEntry, ...]:
        return self.symbols_of_kind("fn")

    @property
    def classes(self) -> tuple[SymbolEntry, ...]:
        return self.symbols_of_kind("class")

    @property
    def imports(self) -> tuple[SymbolEntry, ...]:
        return self.symbols_of_kind("import")


def _normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _suffix(path: str) -> str:
    name = base_name(path)
    dot = name.rfind(".")
    return name[dot:].lower() if dot > 0 else ""


@lru_cache(maxsize=256)
def _pygments_language(file_name: str) -> str | None:
    """Return the Pygments lexer name for ``file_name`` if one is registered."""
    from pygments.lexers import get_lexer_for_filename
    from pygments.util import ClassNotFound

    try:
        lexer = get_lexer_for_filename(file_name)
    except ClassNotFound:
        return None
    return lexer.name.lower()


def language_for_path(path: str) -> str | None:
    """Map ``path`` to a grammar key, falling back to the Pygments lexer name."""
    language = LANGUAGE_BY_SUFFIX.get(_suffix(path))
    if language is not None:
        return language
    return _pygments_language(base_name(path))


@lru_cache(maxsize=32)
def _load_parser(language_name: str):
    """Load a Tree-sitter parser from whichever grammar bundle is installed.

    Tries ``tree_sitter_language_pack`` first, then ``tree_sitter_languages``.
    Returns ``None`` when neither provides the language.
    """
    try:
        from tree_sitter_language_pack import get_parser

        return get_parser(language_name)
    except ModuleNotFoundError:
        pass
    except Exception:
        return None

    try:
        from tree_sitter_languages import get_parser

        return get_parser(language_name)
    except Exception:
        return None


def _node_text(source_bytes: bytes, node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def _name_from_node(source_bytes: bytes, node, kind: str) -> str:
    """Extract display name for a symbol/import node."""
    if kind == "import":
        return _normalize_whitespace(_node_text(source_bytes, node))

    for field_name in ("name", "declarator"):
        child = node.child_by_field_name(field_name)
        if child is None:
            continue
        nested = child.child_by_field_name("name")
        if nested is not None:
            return _normalize_whitespace(_node_text(source_bytes, nested))
        return _normalize_whitespace(_node_text(source_bytes, child))

    for child in node.named_children:
        if child.type in IDENTIFIER_NODE_TYPES:
            return _normalize_whitespace(_node_text(source_bytes, child))

    return _normalize_whitespace(_node_text(source_bytes, node))


def _symbol_kind(node_type: str) -> str | None:
    if node_type in FUNCTION_NODE_TYPES:
        return "fn"
    if node_type in CLASS_NODE_TYPES:
        return "class"
    if node_type in IMPORT_NODE_TYPES:
        return "import"
    return None


def _sorted(symbols: list[SymbolEntry]) -> tuple[SymbolEntry, ...]:
    symbols.sort(key=lambda item: (item.line, item.column, item.kind, item.name.casefold()))
    return tuple(symbols)


def collect_symbols_regex(source: str, language_name: str | None) -> tuple[SymbolEntry, ...]:
    """Collect symbols line by line with the language's regex patterns."""
    patterns = FALLBACK_PATTERNS_BY_LANGUAGE.get(language_name or "", GENERIC_FALLBACK_PATTERNS)
    symbols: list[SymbolEntry] = []
    for line_idx, line in enumerate(source.splitlines()):
        for kind, pattern in patterns:
            match = pattern.match(line)
            if match is None:
                continue
            name = _normalize_whitespace(match.group("name"))
            if not name:
                continue
            symbols.append(SymbolEntry(kind=kind, name=name, line=line_idx, column=int(match.start("name"))))
            break
        if len(symbols) >= MAX_SYMBOLS:
            break
    return _sorted(symbols)


def collect_symbols_tree_sitter(parser, source: str) -> tuple[SymbolEntry, ...]:
    """Collect symbols from a Tree-sitter parse of ``source``."""
    source_bytes = source.encode("utf-8", errors="replace")
    tree = parser.parse(source_bytes)
    symbols: list[SymbolEntry] = []

    def walk(node) -> None:
        if len(symbols) >= MAX_SYMBOLS:
            return
        if node.type in {"decorated_definition", "decorated_declaration"}:
            definition = node.child_by_field_name("definition")
            if definition is not None:
                walk(definition)
                return

        kind = _symbol_kind(node.type)
        if kind is not None:
            line, column = node.start_point
            symbols.append(
                SymbolEntry(
                    kind=kind,
                    name=_name_from_node(source_bytes, node, kind),
                    line=int(line),
                    column=int(column),
                )
            )
            if kind == "import":
                return

        for child in node.named_children:
            walk(child)

    walk(tree.root_node)
    return _sorted(symbols)


def analyze_source(text: str, path: str) -> SourceReport:
    """Analyze file contents into a ``SourceReport``.

    Raises ``ValueError`` for binary or oversized content.
    """
    if "\x00" in text[:4096]:
        raise ValueError(f"{path} looks like a binary file")
    if len(text) > MAX_ANALYZED_BYTES:
        raise ValueError(f"{path} is too large to analyze ({len(text)} characters)")

    language = language_for_path(path)
    line_count = len(text.splitlines())
    if language not in GRAMMAR_LANGUAGES:
        return SourceReport(path=path, language=language, line_count=line_count)

    parser = _load_parser(language)
    if parser is not None:
        try:
            symbols = collect_symbols_tree_sitter(parser, text)
        except (ValueError, RuntimeError):
            symbols = ()
        if symbols:
            return SourceReport(path=path, language=language, line_count=line_count, symbols=symbols, parser="tree-sitter")

    symbols = collect_symbols_regex(text, language)
    return SourceReport(
        path=path,
        language=language,
        line_count=line_count,
        symbols=symbols,
        parser="regex" if symbols else None,
    )


__all__ = [
    "SymbolEntry",
    "SourceReport",
    "analyze_source",
    "collect_symbols_regex",
    "collect_symbols_tree_sitter",
    "language_for_path",
]
