"""Document-type and expense-category classification from keyword rules."""

import yaml
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .models import DocumentType, ExpenseCategory

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "rules" / "keywords.yml"

REQUIRED_KEYS = ('document_types', 'default_document_type', 'categories', 'default_category')


def load_rules(rules_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load keyword rules from a YAML file.

    Args:
        rules_path: Path to the rules file, the bundled keywords.yml if None

    Returns:
        Parsed rules dictionary
    """
    rules_path = Path(rules_path) if rules_path else DEFAULT_RULES_PATH
    try:
        with open(rules_path, 'r', encoding='utf-8') as f:
            rules = yaml.safe_load(f)
    except Exception as e:
        logger.error(f"Failed to load keyword rules from {rules_path}: {e}")
        raise

    if not isinstance(rules, dict):
        raise ValueError(f"Rules file {rules_path} must contain a mapping")
    missing = [key for key in REQUIRED_KEYS if key not in rules]
    if missing:
        raise ValueError(f"Rules file {rules_path} is missing: {', '.join(missing)}")

    logger.info(f"Loaded {len(rules['document_types'])} document type rules and "
                f"{len(rules['categories'])} category rules from {rules_path.name}")
    return rules


@dataclass(frozen=True)
class KeywordRule:
    """One classification rule; the outcome applies when every condition given holds."""
    outcome: Any
    keywords: Tuple[str, ...] = ()
    document_types: Tuple[DocumentType, ...] = ()

    def matches(self, text: str, document_type: Optional[DocumentType] = None) -> bool:
        if self.document_types and document_type not in self.document_types:
            return False
        if self.keywords and not any(keyword in text for keyword in self.keywords):
            return False
        return True


def _document_types(values) -> Tuple[DocumentType, ...]:
    return tuple(DocumentType(value) for value in values or [])


class DocumentTypeClassifier:
    """Pick the form type from header keywords, first matching rule wins."""

    def __init__(self, rules_path: Optional[Path] = None, rules: Optional[Dict[str, Any]] = None):
        rules = rules if rules is not None else load_rules(rules_path)

        self.rules: List[KeywordRule] = [
            KeywordRule(outcome=DocumentType(entry['type']), keywords=tuple(entry.get('any', [])))
            for entry in rules['document_types']
        ]
        self.default = DocumentType(rules['default_document_type'])

    def classify(self, text: str) -> DocumentType:
        for current in self.rules:
            if current.matches(text):
                logger.info(f"Classified document as '{current.outcome.value}'")
                return current.outcome

        logger.info(f"No document type keyword found, defaulting to '{self.default.value}'")
        return self.default


class CategoryClassifier:
    """Assign an expense category from the form type and body keywords."""

    def __init__(self, rules_path: Optional[Path] = None, rules: Optional[Dict[str, Any]] = None):
        """
        Initialize classifier with category rules.

        Args:
            rules_path: Path to a keyword rules YAML file
            rules: Already loaded rules, takes precedence over rules_path
        """
        rules = rules if rules is not None else load_rules(rules_path)

        self.rules: List[KeywordRule] = [
            KeywordRule(
                outcome=ExpenseCategory(entry['category']),
                keywords=tuple(entry.get('any', [])),
                document_types=_document_types(entry.get('document_types')),
            )
            for entry in rules['categories']
        ]
        self.default = ExpenseCategory(rules['default_category'])

    def classify(self, text: str, document_type: DocumentType) -> ExpenseCategory:
        """
        Classify a form into an expense category.

        Args:
            text: Full OCR text
            document_type: Already classified form type

        Returns:
            The category of the first matching rule, or the default
        """
        for current in self.rules:
            if current.matches(text, document_type):
                logger.info(f"Classified category as '{current.outcome.value}'")
                return current.outcome

        logger.info(f"No category rule matched, defaulting to '{self.default.value}'")
        return self.default
