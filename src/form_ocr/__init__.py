"""Expense Form OCR - extract structured fields from Japanese expense forms."""

__version__ = "1.0.0"

from .models import DocumentType, ExpenseCategory, ExtractedFields
from .parse import FormParser, extract_fields
from .classify import CategoryClassifier, DocumentTypeClassifier
from .review import ReviewQueue, ReviewItem, validate_extracted
from .export import ExcelExporter

__all__ = [
    'DocumentType',
    'ExpenseCategory',
    'ExtractedFields',
    'FormParser',
    'extract_fields',
    'CategoryClassifier',
    'DocumentTypeClassifier',
    'ReviewQueue',
    'ReviewItem',
    'validate_extracted',
    'ExcelExporter',
]
