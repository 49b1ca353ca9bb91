"""Tree-sitter parser for JavaScript/TypeScript source files."""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

log = logging.getLogger(__name__)

TYPED_EXTENSIONS = {'.ts', '.tsx', '.mts', '.cts'}
MARKUP_EXTENSIONS = {'.jsx', '.tsx'}
SUPPORTED_EXTENSIONS = {'.js', '.jsx', '.mjs', '.cjs'} | TYPED_EXTENSIONS

MODULE_STATEMENTS = {'import_statement', 'export_statement'}

# Annex B: '<!--' anywhere and '-->' at the start of a line open a
# single-line comment, but only under the script goal.
_HTML_OPEN_COMMENT = re.compile(rb'<!--[^\n]*')
_HTML_CLOSE_COMMENT = re.compile(rb'^([ \t]*)-->[^\n]*', re.MULTILINE)


class ParseFailure(ValueError):
    """Raised when neither the module nor the script parse succeeds."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"{file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason


@dataclass(frozen=True)
class GrammarSelection:
    """Syntax extensions enabled for one file."""
    class_properties: bool = True
    decorators_legacy: bool = True
    typed: bool = False
    markup: bool = False

    @classmethod
    def for_path(cls, file_path: str | Path) -> 'GrammarSelection':
        """Select extensions from a file name.

        Class properties and legacy decorators are always on; the typed
        extension follows TypeScript suffixes and the markup extension
        follows JSX suffixes.
        """
        extension = Path(file_path).suffix.lower()
        return cls(
            typed=extension in TYPED_EXTENSIONS,
            markup=extension in MARKUP_EXTENSIONS,
        )

    @property
    def grammar(self) -> str:
        if self.typed and self.markup:
            return 'tsx'
        if self.typed:
            return 'typescript'
        # The JavaScript grammar accepts JSX, class fields and decorators.
        return 'javascript'


@lru_cache(maxsize=None)
def _load_language(grammar: str) -> Language:
    """Wrap the grammar capsule with Language() (tree-sitter v0.25+ API)."""
    if grammar == 'javascript':
        return Language(tsjavascript.language())
    if grammar == 'typescript':
        return Language(tstypescript.language_typescript())
    if grammar == 'tsx':
        return Language(tstypescript.language_tsx())
    raise ValueError(f"Unsupported grammar: {grammar}")


def has_module_syntax(root: Node) -> bool:
    """True if the program has a top-level import or export statement."""
    return any(child.type in MODULE_STATEMENTS for child in root.children)


def mask_html_comments(source: bytes) -> bytes:
    """Blank out Annex B HTML-like comments, keeping every byte offset."""
    def blank(match: re.Match) -> bytes:
        return b' ' * len(match.group(0))

    masked = _HTML_OPEN_COMMENT.sub(blank, source)
    return _HTML_CLOSE_COMMENT.sub(blank, masked)


class SourceParser:
    """Two-pass JS/TS parser.

    The first pass assumes an ES module and accepts only an error-free tree.
    If it fails and the file carries no module syntax, the text is re-read
    under the script goal and parsed once more. Anything still failing
    raises ParseFailure.
    """

    def __init__(self):
        self._parsers = {}

    def _parser_for(self, grammar: str) -> Parser:
        parser = self._parsers.get(grammar)
        if parser is None:
            parser = Parser(_load_language(grammar))
            self._parsers[grammar] = parser
        return parser

    def parse_source(self, source: str | bytes, file_path: str | Path = 'unknown.js') -> Tree:
        """Parse source text using the grammar selected by file_path's suffix.

        Args:
            source: File contents
            file_path: Path used only for grammar selection and messages

        Returns:
            Error-free tree-sitter Tree

        Raises:
            ParseFailure: If both attempts produce syntax errors
        """
        if isinstance(source, str):
            source = source.encode('utf-8')

        selection = GrammarSelection.for_path(file_path)
        parser = self._parser_for(selection.grammar)

        tree = parser.parse(source)
        if not tree.root_node.has_error:
            return tree

        if has_module_syntax(tree.root_node):
            raise ParseFailure(str(file_path), "syntax error in module")

        script_source = mask_html_comments(source)
        if script_source != source:
            tree = parser.parse(script_source)
            if not tree.root_node.has_error:
                log.debug("Parsed %s under the script goal", file_path)
                return tree

        raise ParseFailure(str(file_path), "syntax error in script")

    def parse_file(self, file_path: str | Path) -> Tree:
        """Read a UTF-8 file and parse it.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid UTF-8
            ParseFailure: If the file does not parse
        """
        file_path = Path(file_path)
        text = file_path.read_bytes().decode('utf-8')
        return self.parse_source(text, file_path)
