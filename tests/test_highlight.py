"""Line highlighter: span carving, classification and rendering adapters."""

import unittest

from prompt_toolkit.document import Document

from jsrepl.interface.highlight import (
    HighlightLexer,
    KeywordTable,
    LineHighlighter,
    TokenCategory,
    strip,
)
from jsrepl.ui.utils.ansi import ANSI

SAMPLES = [
    "",
    "let x = true;",
    "function f(a, b) { return a >= b ? a : b; }",
    "  undefined ?? Infinity  ",
    "s = 'it\\'s (not) a {real} token'; // comment",
    "x=>x**2 && $y_1 !== null",
    "été = 1",
]


class HighlighterTests(unittest.TestCase):
    def setUp(self):
        self.highlighter = LineHighlighter(KeywordTable())

    def test_spans_preserve_content(self):
        for line in SAMPLES:
            with self.subTest(line=line):
                spans = self.highlighter.spans(line)
                self.assertEqual("".join(s.text for s in spans), line)

    def test_rendered_text_strips_back_to_input(self):
        for line in SAMPLES:
            with self.subTest(line=line):
                self.assertEqual(strip(self.highlighter.render_ansi(line)), line)

    def test_categories(self):
        spans = self.highlighter.spans("let x = true")
        self.assertEqual(
            [(s.text, s.category) for s in spans],
            [
                ("let", TokenCategory.RESERVED_WORD),
                (" ", TokenCategory.OTHER),
                ("x", TokenCategory.PLAIN_IDENTIFIER),
                (" ", TokenCategory.OTHER),
                ("=", TokenCategory.OPERATOR),
                (" ", TokenCategory.OTHER),
                ("true", TokenCategory.LITERAL_CONSTANT),
            ],
        )
        self.assertIs(self.highlighter.classify("undefined"), TokenCategory.SPECIAL_IDENTIFIER)
        self.assertIs(self.highlighter.classify("Infinity"), TokenCategory.LITERAL_CONSTANT)
        self.assertIs(self.highlighter.classify("null"), TokenCategory.LITERAL_CONSTANT)

    def test_two_character_operators_are_single_spans(self):
        texts = [s.text for s in self.highlighter.spans("a&&b==c")]
        self.assertEqual(texts, ["a", "&&", "b", "==", "c"])

    def test_punctuation_is_styled_as_operator(self):
        spans = self.highlighter.spans("a.b, c;")
        self.assertEqual(
            [(s.text, s.category) for s in spans if s.text in ".,;"],
            [
                (".", TokenCategory.OPERATOR),
                (",", TokenCategory.OPERATOR),
                (";", TokenCategory.OPERATOR),
            ],
        )

    def test_classification_is_stable(self):
        line = "while (done) { let done = false; }"
        first = self.highlighter.spans(line)
        again = self.highlighter.spans(strip(self.highlighter.render_ansi(line)))
        self.assertEqual(first, again)
        for span in first:
            if span.text == "done":
                self.assertIs(span.category, TokenCategory.PLAIN_IDENTIFIER)

    def test_cursor_does_not_change_output(self):
        line = "return x"
        self.assertEqual(self.highlighter.highlight(line, 0), self.highlighter.highlight(line, 5))

    def test_alternate_keyword_table(self):
        custom = LineHighlighter(KeywordTable(["foo"]))
        self.assertIs(custom.classify("foo"), TokenCategory.RESERVED_WORD)
        self.assertIs(custom.classify("let"), TokenCategory.PLAIN_IDENTIFIER)

    def test_reserved_words_render_bold_yellow(self):
        rendered = self.highlighter.render_ansi("if")
        self.assertIn(ANSI["bold"], rendered)
        self.assertIn(ANSI["yellow"], rendered)
        self.assertTrue(rendered.endswith(ANSI["reset"]))

    def test_plain_identifiers_are_not_wrapped(self):
        self.assertEqual(self.highlighter.render_ansi("abc"), "abc")


class HighlightLexerTests(unittest.TestCase):
    def test_fragments_use_category_classes(self):
        lexer = HighlightLexer(LineHighlighter(KeywordTable()))
        get_line = lexer.lex_document(Document("let a\nnull"))
        self.assertEqual(
            get_line(0),
            [("class:reserved", "let"), ("class:other", " "), ("class:identifier", "a")],
        )
        self.assertEqual(get_line(1), [("class:literal", "null")])
        self.assertEqual(get_line(5), [])

    def test_style_covers_coloured_categories(self):
        style = LineHighlighter(KeywordTable()).prompt_toolkit_style()
        self.assertIn(("reserved", "ansiyellow bold"), style.style_rules)
        self.assertIn(("undefined", "ansibrightblack"), style.style_rules)


if __name__ == "__main__":
    unittest.main()
