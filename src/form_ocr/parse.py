"""Expense-form field extraction from raw OCR text."""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .classify import CategoryClassifier, DocumentTypeClassifier, load_rules
from .models import ExtractedFields
from .parsers import (
    AmountParser,
    DateParser,
    FormContext,
    ItemNameParser,
    ParseResult,
    PayeeParser,
    ProjectCodeParser,
    SlipNumberParser,
)

logger = logging.getLogger(__name__)


class FormParser:
    """
    Extract a structured record from the OCR text of a Japanese expense form.

    The form type is classified first because the amount and item-name
    rules depend on it. Every other field parser runs independently on the
    same text. Parsing never raises for any text input; fields that cannot
    be recovered keep their defaults.

    A FormParser holds no per-call state, so one instance can be shared
    between threads.
    """

    def __init__(self, rules_path: Optional[Path] = None):
        """Initialize classifiers from the keyword rules and the field parsers."""
        rules = load_rules(rules_path)
        self.document_type_classifier = DocumentTypeClassifier(rules=rules)
        self.category_classifier = CategoryClassifier(rules=rules)

        self.slip_number_parser = SlipNumberParser()
        self.project_code_parser = ProjectCodeParser()
        self.date_parser = DateParser()
        self.amount_parser = AmountParser()
        self.item_name_parser = ItemNameParser()
        self.payee_parser = PayeeParser()

    def parse(self, text: str, today: Optional[date] = None) -> ExtractedFields:
        """
        Parse a form.

        Args:
            text: Raw OCR text
            today: Date used when no date is found on the form (defaults to today)

        Returns:
            Fully populated ExtractedFields
        """
        fields, _ = self.parse_with_details(text, today)
        return fields

    def parse_with_details(self, text: str,
                           today: Optional[date] = None) -> Tuple[ExtractedFields, Dict[str, ParseResult]]:
        """Parse a form and also return each field parser's result, keyed by field name."""
        text = text or ""
        document_type = self.document_type_classifier.classify(text)
        category = self.category_classifier.classify(text, document_type)

        context = FormContext(full_text=text, document_type=document_type, today=today)

        results = {
            'slip_number': self.slip_number_parser.parse(context),
            'project_code': self.project_code_parser.parse(context),
            'date': self.date_parser.parse(context),
            'amount': self.amount_parser.parse(context),
            'item_name': self.item_name_parser.parse(context),
            'payee': self.payee_parser.parse(context),
        }

        amount = results['amount'].value
        fields = ExtractedFields(
            document_type=document_type,
            date=results['date'].value,
            category=category,
            slip_number=results['slip_number'].value,
            project_code=results['project_code'].value,
            item_name=results['item_name'].value,
            specification="",
            payee=results['payee'].value,
            unit_price=amount,
            quantity=1,
            amount=amount,
        )

        logger.info(f"Parsed {document_type.value} form: date={fields.date}, "
                    f"amount=¥{amount:,}, item={fields.item_name!r}, payee={fields.payee!r}")
        return fields, results

    def parse_to_dict(self, text: str, today: Optional[date] = None) -> Dict[str, Any]:
        """Parse a form and return the record as a plain dictionary."""
        return self.parse(text, today).to_dict()


_default_parser: Optional[FormParser] = None


def extract_fields(text: str, today: Optional[date] = None) -> ExtractedFields:
    """Parse a form with a shared parser built from the bundled rules."""
    global _default_parser
    if _default_parser is None:
        _default_parser = FormParser()
    return _default_parser.parse(text, today)
