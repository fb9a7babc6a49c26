"""Base classes and shared helpers for form field parsers."""

import re
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any, FrozenSet, Iterator, List, Optional, Tuple

from ..models import DocumentType

DEFAULT_RULE = "default"

# Full-width digits ０-９ sit at U+FF10..U+FF19, 0xFEE0 above ASCII.
_NUMERAL_TABLE = {code: code - 0xFEE0 for code in range(0xFF10, 0xFF1A)}
_NUMERAL_TABLE[ord('，')] = ord(',')


def normalize_numerals(text: str) -> str:
    """Convert full-width digits and the full-width comma to ASCII."""
    return text.translate(_NUMERAL_TABLE)


def parse_int(digits: str) -> Optional[int]:
    """Parse a digit run that may contain thousands commas."""
    cleaned = digits.replace(',', '')
    if not cleaned.isdigit():
        return None
    return int(cleaned)


@dataclass(frozen=True)
class Rule:
    """A named extraction rule. Position in a parser's table is its priority."""
    name: str
    pattern: re.Pattern
    document_types: Optional[FrozenSet[DocumentType]] = None
    group: int = 1

    def applies_to(self, document_type: DocumentType) -> bool:
        return self.document_types is None or document_type in self.document_types


def rule(name: str, pattern: str, *document_types: DocumentType, group: int = 1) -> Rule:
    """Build a Rule; with no document types it applies to every form."""
    return Rule(
        name=name,
        pattern=re.compile(pattern),
        document_types=frozenset(document_types) if document_types else None,
        group=group,
    )


@dataclass
class ParseResult:
    """Outcome of a parser: the value plus the rule that produced it."""
    value: Any
    rule: str = DEFAULT_RULE
    source_text: str = ""

    @property
    def matched(self) -> bool:
        return self.rule != DEFAULT_RULE


@dataclass
class FormContext:
    """The text of one form and what is known about it before field parsing."""
    full_text: str
    document_type: DocumentType = DocumentType.REIMBURSEMENT
    today: Optional[date] = None
    normalized: str = None

    def __post_init__(self):
        if self.full_text is None:
            self.full_text = ""
        if self.today is None:
            self.today = date.today()
        if self.normalized is None:
            self.normalized = normalize_numerals(self.full_text)


class BaseParser(ABC):
    """Base class for all field parsers.

    Subclasses fill ``self.rules`` in priority order. ``parse`` must be
    total: when no rule matches it returns a ParseResult carrying the
    field's default value and ``rule == DEFAULT_RULE``.
    """

    # Whether rules run against the numeral-normalized text
    uses_normalized_text = True

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.rules: List[Rule] = []

    @abstractmethod
    def parse(self, context: FormContext) -> ParseResult:
        """
        Extract this parser's field from the form context.

        Args:
            context: Form context with text and document type

        Returns:
            ParseResult with the value and the name of the winning rule
        """

    def _text_for(self, context: FormContext) -> str:
        return context.normalized if self.uses_normalized_text else context.full_text

    def _iter_matches(self, context: FormContext) -> Iterator[Tuple[Rule, re.Match]]:
        """Yield (rule, match) for each applicable rule that matches, in table order."""
        text = self._text_for(context)
        for current in self.rules:
            if not current.applies_to(context.document_type):
                continue
            match = current.pattern.search(text)
            if match:
                yield current, match

    def _log_result(self, result: ParseResult):
        """Log parsing result for debugging."""
        if result.matched:
            self.logger.info(f"Parsed: {result.value!r} (rule: {result.rule})")
        else:
            self.logger.debug(f"No rule matched, using default {result.value!r}")
