"""Data model for extracted expense-form records."""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any


class DocumentType(str, Enum):
    """Form type recognized from the OCR header text."""
    PURCHASE_REQUEST = "purchase_request"
    REIMBURSEMENT = "reimbursement"
    TRAVEL = "travel"

    @property
    def label(self) -> str:
        return DOC_TYPE_LABELS[self]


class ExpenseCategory(str, Enum):
    """Expense category, matching the budget spreadsheet flags."""
    GOODS = "goods"
    TRAVEL = "travel"
    HONORARIUM = "honorarium"
    LABOR = "labor"
    OTHER = "other"
    SUBCONTRACT = "subcontract"
    REFUND = "refund"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]

    @property
    def short_label(self) -> str:
        return CATEGORY_SHORT[self]

    @classmethod
    def from_flag(cls, flag: str) -> "ExpenseCategory":
        """Map a spreadsheet flag column value (R, S, T, I, H or blank)."""
        return FLAG_TO_CATEGORY.get((flag or "").strip().upper(), cls.GOODS)


DOC_TYPE_LABELS = {
    DocumentType.PURCHASE_REQUEST: "購入依頼",
    DocumentType.REIMBURSEMENT: "立替払",
    DocumentType.TRAVEL: "旅費",
}

CATEGORY_LABELS = {
    ExpenseCategory.GOODS: "物品",
    ExpenseCategory.TRAVEL: "旅費(R)",
    ExpenseCategory.HONORARIUM: "謝金",
    ExpenseCategory.LABOR: "人件費(S)",
    ExpenseCategory.OTHER: "その他(T)",
    ExpenseCategory.SUBCONTRACT: "再委託(I)",
    ExpenseCategory.REFUND: "返金(H)",
}

CATEGORY_SHORT = {
    ExpenseCategory.GOODS: "物品",
    ExpenseCategory.TRAVEL: "旅費",
    ExpenseCategory.HONORARIUM: "謝金",
    ExpenseCategory.LABOR: "人件費",
    ExpenseCategory.OTHER: "その他",
    ExpenseCategory.SUBCONTRACT: "再委託",
    ExpenseCategory.REFUND: "返金",
}

FLAG_TO_CATEGORY = {
    "": ExpenseCategory.GOODS,
    "R": ExpenseCategory.TRAVEL,
    "S": ExpenseCategory.LABOR,
    "T": ExpenseCategory.OTHER,
    "I": ExpenseCategory.SUBCONTRACT,
    "H": ExpenseCategory.REFUND,
}


@dataclass
class ExtractedFields:
    """One structured record extracted from a form's OCR text.

    Every field is always populated. Values that could not be recovered
    are left at their defaults (empty string, 0, quantity 1) for a human
    to correct.
    """
    document_type: DocumentType
    date: str
    category: ExpenseCategory
    slip_number: str = ""
    project_code: str = ""
    item_name: str = ""
    specification: str = ""
    payee: str = ""
    unit_price: int = 0
    quantity: int = 1
    amount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['document_type'] = self.document_type.value
        data['category'] = self.category.value
        return data
