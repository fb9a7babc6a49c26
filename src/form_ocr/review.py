"""Validation and review queue for extracted form records."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz

from .models import ExtractedFields
from .parsers import ParseResult
from .parsers.amount_parser import FALLBACK_RULE

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """A field that needs correction before the record can be saved."""
    field: str
    message: str


def validate_extracted(fields: ExtractedFields) -> List[ValidationResult]:
    """Check the fields a saved transaction cannot be without."""
    errors = []
    if not fields.item_name.strip():
        errors.append(ValidationResult(field="itemName", message="品名が空です"))
    if fields.amount <= 0:
        errors.append(ValidationResult(field="amount", message="金額が0以下です"))
    if not fields.date:
        errors.append(ValidationResult(field="date", message="日付が空です"))
    return errors


@dataclass
class ReviewItem:
    """Represents a form that needs manual review."""
    file_path: str
    reason: str
    suggested_date: Optional[str] = None
    suggested_amount: Optional[int] = None
    suggested_category: Optional[str] = None
    raw_snippet: str = ""


class ReviewQueue:
    """Collects forms whose extraction a person should check."""

    def __init__(self, payee_similarity: float = 85.0):
        """
        Initialize review queue.

        Args:
            payee_similarity: Minimum rapidfuzz ratio for two payees to count
                as the same in duplicate detection
        """
        self.items: List[ReviewItem] = []
        self.payee_similarity = payee_similarity

    def review_reasons(self, fields: ExtractedFields,
                       results: Optional[Dict[str, ParseResult]] = None) -> List[str]:
        """
        List the reasons a record should be reviewed.

        Args:
            fields: Extracted record
            results: Per-field parse results, used to spot fallback values

        Returns:
            Reasons, empty when the record looks complete
        """
        reasons = [error.message for error in validate_extracted(fields)]

        if results:
            date_result = results.get('date')
            if date_result is not None and not date_result.matched:
                reasons.append("日付が見つからないため本日の日付を設定")
            amount_result = results.get('amount')
            if amount_result is not None and amount_result.rule == FALLBACK_RULE:
                reasons.append("金額は最大の数値から推定")

        return reasons

    def add_item(self,
                 file_path: str,
                 reason: str,
                 suggested_date: Optional[str] = None,
                 suggested_amount: Optional[int] = None,
                 suggested_category: Optional[str] = None,
                 raw_snippet: str = ""):
        """Add an item to the review queue."""
        item = ReviewItem(
            file_path=file_path,
            reason=reason,
            suggested_date=suggested_date,
            suggested_amount=suggested_amount,
            suggested_category=suggested_category,
            raw_snippet=raw_snippet,
        )
        self.items.append(item)
        logger.debug(f"Added to review queue: {Path(file_path).name} - {reason}")

    def add_from_extraction(self,
                            file_path: str,
                            fields: ExtractedFields,
                            results: Optional[Dict[str, ParseResult]] = None,
                            raw_text: str = "") -> Optional[ReviewItem]:
        """
        Queue the record for review if anything about it is uncertain.

        Returns:
            The queued ReviewItem, or None if the record needs no review
        """
        reasons = self.review_reasons(fields, results)
        if not reasons:
            return None

        reason = "; ".join(reasons)
        logger.info(f"Sending {Path(file_path).name} to review: {reason}")
        self.add_item(
            file_path=file_path,
            reason=reason,
            suggested_date=fields.date,
            suggested_amount=fields.amount,
            suggested_category=fields.category.value,
            raw_snippet=make_snippet(raw_text),
        )
        return self.items[-1]

    def detect_conflicts(self, extractions: List[Dict[str, Any]]) -> List[ReviewItem]:
        """
        Detect forms that look like duplicates of each other.

        Two records conflict when they share a slip number, or when they
        have the same date and amount and their payees are similar.

        Args:
            extractions: Extracted records as dictionaries with a file_path key

        Returns:
            Review items for every record involved in a conflict
        """
        conflicts = []
        flagged = set()

        for i, first in enumerate(extractions):
            for second in extractions[i + 1:]:
                reason = self._conflict_reason(first, second)
                if not reason:
                    continue
                for record, other in ((first, second), (second, first)):
                    key = (record.get('file_path', ''), other.get('file_path', ''))
                    if key in flagged:
                        continue
                    flagged.add(key)
                    conflicts.append(ReviewItem(
                        file_path=record.get('file_path', ''),
                        reason=reason,
                        suggested_date=record.get('date'),
                        suggested_amount=record.get('amount'),
                        suggested_category=record.get('category'),
                        raw_snippet=f"Similar to {Path(other.get('file_path', '')).name}",
                    ))

        if conflicts:
            logger.warning(f"Detected {len(conflicts)} possible duplicate forms")
        return conflicts

    def _conflict_reason(self, first: Dict[str, Any], second: Dict[str, Any]) -> Optional[str]:
        slip = first.get('slip_number')
        if slip and slip == second.get('slip_number'):
            return f"Duplicate slip number {slip}"

        if not first.get('amount') or first.get('amount') != second.get('amount'):
            return None
        if first.get('date') != second.get('date'):
            return None

        payee_a, payee_b = first.get('payee') or '', second.get('payee') or ''
        if not payee_a or not payee_b:
            return None
        similarity = fuzz.ratio(payee_a.lower(), payee_b.lower())
        if similarity >= self.payee_similarity:
            return f"Potential duplicate form (same date and amount, payee similarity {similarity:.0f})"
        return None

    def get_summary(self) -> Dict[str, Any]:
        """Get summary statistics for the review queue."""
        if not self.items:
            return {"total": 0}

        reason_counts = {}
        for item in self.items:
            for reason in item.reason.split(';'):
                reason = reason.strip()
                reason_counts[reason] = reason_counts.get(reason, 0) + 1

        return {
            "total": len(self.items),
            "reason_breakdown": reason_counts,
        }

    def clear(self):
        """Clear all items from the review queue."""
        self.items.clear()


def make_snippet(raw_text: str, limit: int = 200) -> str:
    """First characters of the OCR text on one line, cleaned for Excel."""
    snippet = raw_text.replace('\n', ' ').replace('\r', ' ')[:limit]
    snippet = ''.join(char for char in snippet if ord(char) >= 32 or char == '\t')
    if len(raw_text) > limit:
        snippet += "..."
    return snippet
