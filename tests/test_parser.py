"""Tests for grammar selection and the two-pass source parser."""
import pytest

from codeguardian.analyzer.parser import (
    GrammarSelection,
    ParseFailure,
    SourceParser,
    has_module_syntax,
    mask_html_comments,
)


@pytest.fixture
def parser():
    return SourceParser()


class TestGrammarSelection:

    @pytest.mark.parametrize("file_name, grammar", [
        ("app.js", "javascript"),
        ("app.mjs", "javascript"),
        ("App.jsx", "javascript"),
        ("app.ts", "typescript"),
        ("app.mts", "typescript"),
        ("App.tsx", "tsx"),
    ])
    def test_grammar_follows_extension(self, file_name, grammar):
        assert GrammarSelection.for_path(file_name).grammar == grammar

    def test_class_properties_and_decorators_always_enabled(self):
        selection = GrammarSelection.for_path("plain.js")
        assert selection.class_properties
        assert selection.decorators_legacy
        assert not selection.typed
        assert not selection.markup

    def test_tsx_is_typed_and_markup(self):
        selection = GrammarSelection.for_path("src/Component.TSX")
        assert selection.typed and selection.markup


class TestSourceParser:

    def test_parses_es_module(self, parser):
        tree = parser.parse_source("import a from 'a';\nexport const b = a;\n", "mod.js")
        assert not tree.root_node.has_error
        assert has_module_syntax(tree.root_node)

    def test_parses_typescript_annotations(self, parser):
        tree = parser.parse_source("let x: number = 1;\ninterface I { a: string }\n", "mod.ts")
        assert not tree.root_node.has_error

    def test_parses_jsx_in_tsx(self, parser):
        source = "const App = () => <div className=\"x\">hi</div>;\n"
        tree = parser.parse_source(source, "App.tsx")
        assert not tree.root_node.has_error

    def test_parses_class_fields_and_decorators(self, parser):
        source = "@sealed\nclass A {\n  count = 0;\n  static #secret = 1;\n}\n"
        tree = parser.parse_source(source, "a.js")
        assert not tree.root_node.has_error

    def test_syntax_error_raises_parse_failure(self, parser):
        with pytest.raises(ParseFailure) as exc_info:
            parser.parse_source("import { from 'x'\nconst = ;\n", "broken.js")
        assert exc_info.value.file_path == "broken.js"

    def test_same_input_same_tree(self, parser):
        source = "import a from 'a';\na();\n"
        first = parser.parse_source(source, "x.js").root_node
        second = parser.parse_source(source, "x.js").root_node
        assert str(first) == str(second), "Parsing must be deterministic"

    def test_parse_file_rejects_invalid_utf8(self, parser, tmp_path):
        path = tmp_path / "bad.js"
        path.write_bytes(b"const s = '\xff\xfe';\n")
        with pytest.raises(UnicodeDecodeError):
            parser.parse_file(path)

    def test_parse_file_reads_utf8_text(self, parser, tmp_path):
        path = tmp_path / "greet.js"
        path.write_bytes("const s = 'h\u00e9llo';\n".encode('utf-8'))
        tree = parser.parse_file(path)
        assert not tree.root_node.has_error

    def test_parse_file_missing(self, parser, tmp_path):
        with pytest.raises(OSError):
            parser.parse_file(tmp_path / "missing.js")


class TestHtmlComments:

    def test_mask_keeps_byte_offsets(self):
        source = b"var a = 1; <!-- old browsers\n--> trailing\nvar b = 2;\n"
        masked = mask_html_comments(source)
        assert len(masked) == len(source)
        assert b"<!--" not in masked
        assert b"-->" not in masked
        assert masked.endswith(b"var b = 2;\n")

    def test_close_comment_only_at_line_start(self):
        source = b"x-->y;\n"
        assert mask_html_comments(source) == source

    def test_script_with_html_comments_parses(self, parser):
        source = "<!-- legacy guard\nvar a = 1;\n--> end of guard\n"
        tree = parser.parse_source(source, "legacy.js")
        assert not tree.root_node.has_error
