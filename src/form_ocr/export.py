"""JSON and Excel export of extracted form records."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from .models import CATEGORY_LABELS, DOC_TYPE_LABELS, DocumentType, ExpenseCategory
from .review import ReviewItem

logger = logging.getLogger(__name__)

# Column header, record key, width. Mirrors the budget spreadsheet layout.
COLUMNS = [
    ("伝票番号", 'slip_number', 18),
    ("納品日", 'date', 12),
    ("品名", 'item_name', 30),
    ("規格等", 'specification', 20),
    ("支払先", 'payee', 24),
    ("単価", 'unit_price', 12),
    ("数量", 'quantity', 8),
    ("金額", 'amount', 12),
    ("費目", 'category', 12),
    ("書類種別", 'document_type', 12),
    ("Jコード", 'project_code', 14),
    ("ファイル", 'file_name', 25),
    ("確認状況", 'review_status', 10),
    ("確認理由", 'review_reason', 40),
]


def export_json(records: List[Dict[str, Any]], output_path: Path):
    """Write records as a UTF-8 JSON array."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(records, f, ensure_ascii=False, indent=2)
    logger.info(f"JSON exported to: {output_path}")


class ExcelExporter:
    """Export extracted records and review items to Excel."""

    def __init__(self, output_path: Path):
        """
        Initialize Excel exporter.

        Args:
            output_path: Path for the output Excel file
        """
        self.output_path = output_path
        self.workbook = Workbook()

    def export_transactions(self,
                            records: List[Dict[str, Any]],
                            review_items: List[ReviewItem],
                            include_summary: bool = False):
        """
        Export records to a single Transactions sheet.

        Args:
            records: Record dictionaries as produced by the batch processor
            review_items: Items needing review, matched to records by file path
            include_summary: Whether to add a category summary above the table
        """
        try:
            if "Sheet" in self.workbook.sheetnames:
                self.workbook.remove(self.workbook["Sheet"])

            self._create_transactions_sheet(records, review_items, include_summary)

            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self.workbook.save(str(self.output_path))

            logger.info(f"Excel file exported to: {self.output_path}")

        except Exception as e:
            logger.error(f"Failed to export Excel file: {e}")
            raise

    def _create_transactions_sheet(self, records: List[Dict[str, Any]],
                                   review_items: List[ReviewItem], include_summary: bool):
        ws = self.workbook.create_sheet("Transactions")
        current_row = 1

        if include_summary:
            current_row = self._add_summary_section(ws, records, current_row)
            current_row += 2

        # A file can have several review items (validation and duplicates)
        review_lookup: Dict[str, List[str]] = {}
        for item in review_items:
            review_lookup.setdefault(item.file_path, []).append(item.reason)

        for col, (header, _, width) in enumerate(COLUMNS, 1):
            cell = ws.cell(row=current_row, column=col, value=header)
            cell.font = Font(bold=True)
            cell.fill = PatternFill(start_color="E6E6E6", end_color="E6E6E6", fill_type="solid")
            cell.alignment = Alignment(horizontal="center")
            ws.column_dimensions[get_column_letter(col)].width = width
        current_row += 1

        for record in records:
            row = self.to_row(record, review_lookup.get(record.get('file_path', ''), []))
            for col, (_, key, _) in enumerate(COLUMNS, 1):
                ws.cell(row=current_row, column=col, value=row[key])
            current_row += 1

        # Files that failed before a record could be extracted
        record_paths = {record.get('file_path', '') for record in records}
        for file_path, reasons in review_lookup.items():
            if file_path in record_paths:
                continue
            row = self.to_row({'file_name': Path(file_path).name}, reasons)
            for col, (_, key, _) in enumerate(COLUMNS, 1):
                ws.cell(row=current_row, column=col, value=row[key])
            current_row += 1

        logger.info(f"Created Transactions sheet with {len(records)} records "
                    f"and {len(review_items)} review items")

    @staticmethod
    def to_row(record: Dict[str, Any], review_reasons: List[str]) -> Dict[str, Any]:
        """Convert a record dictionary to display values for one sheet row."""
        row = {key: record.get(key, '') for _, key, _ in COLUMNS}
        row['category'] = category_label(record.get('category'))
        row['document_type'] = document_type_label(record.get('document_type'))
        row['review_status'] = "REVIEW" if review_reasons else "OK"
        row['review_reason'] = "; ".join(review_reasons)
        return row

    def _add_summary_section(self, ws, records: List[Dict[str, Any]], start_row: int) -> int:
        """Add per-category counts and totals at the top of the sheet."""
        if not records:
            ws.cell(row=start_row, column=1, value="No transactions to summarize")
            return start_row + 1

        summary = summarize_by_category(records)

        ws.cell(row=start_row, column=1, value="費目別集計").font = Font(bold=True, size=14)
        current_row = start_row + 2

        ws.cell(row=current_row, column=1, value="件数:").font = Font(bold=True)
        ws.cell(row=current_row, column=2, value=len(records))
        ws.cell(row=current_row, column=4, value="合計金額:").font = Font(bold=True)
        ws.cell(row=current_row, column=5, value=f"¥{int(summary['amount'].sum()):,}")
        current_row += 2

        for col, header in enumerate(["費目", "件数", "金額"], 1):
            ws.cell(row=current_row, column=col, value=header).font = Font(bold=True)
        current_row += 1

        for _, data in summary.iterrows():
            ws.cell(row=current_row, column=1, value=data['category'])
            ws.cell(row=current_row, column=2, value=int(data['count']))
            ws.cell(row=current_row, column=3, value=f"¥{int(data['amount']):,}")
            current_row += 1

        return current_row


def summarize_by_category(records: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Count and total records per expense category.

    Returns:
        DataFrame with columns category (display label), count and amount,
        in category declaration order, omitting empty categories
    """
    df = pd.DataFrame(records, columns=['category', 'amount'])
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce').fillna(0).astype(int)
    grouped = df.groupby('category')['amount'].agg(['count', 'sum'])

    rows = []
    for category in ExpenseCategory:
        if category.value in grouped.index:
            data = grouped.loc[category.value]
            rows.append({'category': category.label, 'count': int(data['count']),
                         'amount': int(data['sum'])})
    return pd.DataFrame(rows, columns=['category', 'count', 'amount'])


def category_label(value: Any) -> str:
    try:
        return CATEGORY_LABELS[ExpenseCategory(value)]
    except ValueError:
        return str(value or '')


def document_type_label(value: Any) -> str:
    try:
        return DOC_TYPE_LABELS[DocumentType(value)]
    except ValueError:
        return str(value or '')
