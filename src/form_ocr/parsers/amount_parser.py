"""Amount parsing: labelled totals per form type, largest number as fallback."""

import re
from typing import List, Optional

from ..models import DocumentType
from .base import BaseParser, FormContext, ParseResult, parse_int, rule

# Optional ASCII/full-width colon or whitespace between a label and its value
LABEL_GAP = r'\s*[:：\s]?\s*'

FALLBACK_RULE = 'largest_number'


class AmountParser(BaseParser):
    """Extract the total amount (JPY) from a form.

    Labelled patterns are tried first, each only for the form type it
    belongs to. If none gives a number, the largest run of three or more
    digits anywhere in the text is taken as the grand total.
    """

    def __init__(self):
        super().__init__()

        self.rules = [
            # 金 3,000 円 phrasing on reimbursement claims
            rule('kin_yen', r'金\s*([0-9,]+)\s*円', DocumentType.REIMBURSEMENT),
            rule('tax_included', r'税込[金額]*' + LABEL_GAP + r'([0-9,]+)',
                 DocumentType.PURCHASE_REQUEST),
            rule('total', r'合計[金額]*' + LABEL_GAP + r'([0-9,]+)',
                 DocumentType.PURCHASE_REQUEST),
            rule('settlement', r'精算額*' + LABEL_GAP + r'([0-9,]+)', DocumentType.TRAVEL),
        ]

        self.number_pattern = re.compile(r'[0-9,]{3,}')

    def parse(self, context: FormContext) -> ParseResult:
        """
        Extract the total amount.

        Args:
            context: Form context with document type already classified

        Returns:
            ParseResult with an int amount, 0 when nothing is recoverable
        """
        for current, match in self._iter_matches(context):
            amount = parse_int(match.group(current.group))
            if amount is None:
                self.logger.debug(f"Rule {current.name} matched non-numeric {match.group()!r}")
                continue
            result = ParseResult(value=amount, rule=current.name, source_text=match.group())
            self._log_result(result)
            return result

        candidates = self._find_candidates(context.normalized)
        if candidates:
            amount = max(candidates)
            self.logger.info(f"No labelled amount, using largest number ¥{amount:,} "
                             f"of {len(candidates)} candidates")
            return ParseResult(value=amount, rule=FALLBACK_RULE)

        self.logger.warning("No amount candidates found")
        return ParseResult(value=0)

    def _find_candidates(self, text: str) -> List[int]:
        """All positive integers written with three or more digit/comma characters."""
        candidates = []
        for raw in self.number_pattern.findall(text):
            amount: Optional[int] = parse_int(raw)
            if amount is not None and amount > 0:
                candidates.append(amount)
        return candidates
