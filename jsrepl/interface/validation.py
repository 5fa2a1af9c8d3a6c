#!/usr/bin/env python3
# jsrepl/interface/validation.py
from __future__ import annotations

"""
Bracket/delimiter validator.

Decides whether the buffered input can be submitted: every opener among
(), [] and {} must be closed in order. The scan is purely character based;
brackets inside string literals and comments are counted like any other,
so `"("` reads as an open parenthesis. That limitation is accepted here:
the validator exists so this layer does not depend on the engine's lexer.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from prompt_toolkit.document import Document
from prompt_toolkit.validation import ValidationError, Validator

PAIRS: dict[str, str] = {"(": ")", "[": "]", "{": "}"}
CLOSERS: dict[str, str] = {close: open_ for open_, close in PAIRS.items()}


class ValidationStatus(str, Enum):
    VALID = "Valid"
    INCOMPLETE = "Incomplete"
    INVALID = "Invalid"


@dataclass(frozen=True)
class ValidationResult:
    status: ValidationStatus
    reason: Optional[str] = None
    # 0-based offset of the offending closer for Invalid results
    position: Optional[int] = None

    @property
    def is_valid(self) -> bool:
        return self.status is ValidationStatus.VALID

    @property
    def is_incomplete(self) -> bool:
        return self.status is ValidationStatus.INCOMPLETE

    @property
    def is_invalid(self) -> bool:
        return self.status is ValidationStatus.INVALID

    def __str__(self) -> str:
        if self.is_invalid:
            return f"ValidationInvalid: {self.reason}"
        return self.status.value


VALID = ValidationResult(ValidationStatus.VALID)
INCOMPLETE = ValidationResult(ValidationStatus.INCOMPLETE)


def validate(text: str) -> ValidationResult:
    """
    Classify a whole buffer.

    A closer that does not match the innermost opener (or arrives with
    nothing open) is Invalid at once, whatever follows. Otherwise the
    buffer is Incomplete while anything is still open, else Valid.
    """
    stack: list[str] = []
    for index, ch in enumerate(text):
        if ch in PAIRS:
            stack.append(ch)
        elif ch in CLOSERS:
            if not stack:
                return ValidationResult(
                    ValidationStatus.INVALID,
                    f"Mismatched brackets: '{ch}' is unpaired",
                    index,
                )
            if stack[-1] != CLOSERS[ch]:
                return ValidationResult(
                    ValidationStatus.INVALID,
                    f"Mismatched brackets: '{stack[-1]}' is not properly closed",
                    index,
                )
            stack.pop()
    return INCOMPLETE if stack else VALID


class BracketValidator(Validator):
    """
    prompt_toolkit adapter.

    Validates `pending() + "\\n" + document.text` so a continuation line is
    judged together with the lines already buffered. Only Invalid blocks
    submission; Incomplete is accepted and handled by the controller.
    """

    def __init__(self, pending: Optional[Callable[[], str]] = None) -> None:
        self._pending = pending or (lambda: "")

    def _buffer(self, text: str) -> tuple[str, int]:
        prefix = self._pending()
        if not prefix:
            return text, 0
        return f"{prefix}\n{text}", len(prefix) + 1

    def validate(self, document: Document) -> None:
        text, offset = self._buffer(document.text)
        result = validate(text)
        if result.is_invalid:
            position = max((result.position or 0) - offset, 0)
            raise ValidationError(message=str(result), cursor_position=position)
