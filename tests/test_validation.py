"""Bracket validator: classification of whole buffers and the prompt_toolkit adapter."""

import unittest

from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError

from jsrepl.interface.validation import (
    BracketValidator,
    ValidationStatus,
    validate,
)


class ValidateTests(unittest.TestCase):
    def test_balanced_inputs_are_valid(self):
        for text in ("", "1 + 2", "(a[0]{})", "function f(x) { return [1, {a: 2}]; }"):
            with self.subTest(text=text):
                self.assertIs(validate(text).status, ValidationStatus.VALID)

    def test_every_open_prefix_is_incomplete(self):
        program = "function f() {\n  return [1,\n    (2 + 3)];\n}\nf()"
        depth = 0
        for end, ch in enumerate(program, start=1):
            if ch in "([{":
                depth += 1
            elif ch in ")]}":
                depth -= 1
            expected = ValidationStatus.INCOMPLETE if depth else ValidationStatus.VALID
            with self.subTest(prefix=program[:end]):
                self.assertIs(validate(program[:end]).status, expected)

    def test_unpaired_closer_is_invalid(self):
        result = validate(")")
        self.assertTrue(result.is_invalid)
        self.assertEqual(result.reason, "Mismatched brackets: ')' is unpaired")
        self.assertEqual(str(result), "ValidationInvalid: Mismatched brackets: ')' is unpaired")

    def test_wrong_closer_is_invalid_regardless_of_suffix(self):
        for suffix in ("", ")", "]", "(((", ") + 1"):
            with self.subTest(suffix=suffix):
                result = validate("(]" + suffix)
                self.assertTrue(result.is_invalid)
                self.assertEqual(result.reason, "Mismatched brackets: '(' is not properly closed")
                self.assertEqual(result.position, 1)

    def test_multi_line_completion(self):
        self.assertTrue(validate("(1 + (2 * 3)").is_incomplete)
        self.assertTrue(validate("(1 + (2 * 3)\n)").is_valid)

    def test_brackets_inside_strings_still_count(self):
        # documented limitation: literals are not understood
        self.assertTrue(validate('"("').is_incomplete)
        self.assertTrue(validate("// )").is_invalid)


class BracketValidatorTests(unittest.TestCase):
    def test_accepts_valid_and_incomplete_documents(self):
        validator = BracketValidator()
        validator.validate(Document("1 + 2"))
        validator.validate(Document("if (x) {"))

    def test_rejects_invalid_document(self):
        with self.assertRaises(ValidationError) as ctx:
            BracketValidator().validate(Document("a)"))
        self.assertIn("is unpaired", ctx.exception.message)
        self.assertEqual(ctx.exception.cursor_position, 1)

    def test_pending_buffer_is_taken_into_account(self):
        validator = BracketValidator(lambda: "foo(")
        validator.validate(Document(")"))
        with self.assertRaises(ValidationError) as ctx:
            validator.validate(Document("]"))
        self.assertEqual(ctx.exception.cursor_position, 0)


if __name__ == "__main__":
    unittest.main()
