"""Integration tests for the complete form parsing pipeline."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

from form_ocr import extract_fields
from form_ocr.models import DocumentType, ExpenseCategory
from form_ocr.parse import FormParser

TODAY = date(2025, 1, 9)


class TestIntegration:
    """Integration tests for complete form parsing."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = FormParser()

    def test_reimbursement_claim(self):
        """A typical 立替払請求書."""
        text = "立替払請求書\n但し、電源タップ代として\n金 3,000 円\n令和6年5月10日\n支払先：Amazon"

        fields = self.parser.parse(text, TODAY)

        assert fields.document_type == DocumentType.REIMBURSEMENT
        assert fields.item_name == "電源タップ代"
        assert fields.amount == 3000
        assert fields.unit_price == 3000
        assert fields.quantity == 1
        assert fields.date == "2024-05-10"
        assert fields.payee == "Amazon"
        assert fields.category == ExpenseCategory.GOODS
        assert fields.slip_number == ""
        assert fields.specification == ""

    def test_purchase_request(self):
        """A 購入依頼 form with full-width numbers."""
        text = """購入依頼書
伝票番号 P25000026-001
Jコード J250000252
品名：ノートパソコン
購入先：株式会社ヨドバシ
税込金額：１９８，０００円
令和７年２月３日"""

        fields = self.parser.parse(text, TODAY)

        assert fields.document_type == DocumentType.PURCHASE_REQUEST
        assert fields.slip_number == "P25000026-001"
        assert fields.project_code == "J250000252"
        assert fields.item_name == "ノートパソコン"
        assert fields.payee == "株式会社ヨドバシ"
        assert fields.amount == 198000
        assert fields.date == "2025-02-03"
        assert fields.category == ExpenseCategory.GOODS

    def test_travel_settlement(self):
        """A 旅費精算書."""
        text = "旅費精算書\n精算額：24,680\n出張先 大阪\n平成31年4月1日"

        fields = self.parser.parse(text, TODAY)

        assert fields.document_type == DocumentType.TRAVEL
        assert fields.amount == 24680
        assert fields.item_name == "旅費（精算）"
        assert fields.category == ExpenseCategory.TRAVEL
        assert fields.date == "2019-04-01"

    def test_label_precedence_over_phone_number(self):
        text = "購入依頼\n合計金額: 5,000\nTEL 080-1234-5678"

        assert self.parser.parse(text, TODAY).amount == 5000

    def test_fallback_amount(self):
        text = "数量 3\n単価 450\n12,000"

        assert self.parser.parse(text, TODAY).amount == 12000

    def test_category_override(self):
        fields = self.parser.parse("購入依頼\n講演謝金", TODAY)

        assert fields.document_type == DocumentType.PURCHASE_REQUEST
        assert fields.category == ExpenseCategory.HONORARIUM

    def test_missing_field_defaults(self):
        """Unrecognizable text yields defaults, never an exception."""
        fields = self.parser.parse("ただのメモ", TODAY)

        assert fields.document_type == DocumentType.REIMBURSEMENT
        assert fields.slip_number == ""
        assert fields.project_code == ""
        assert fields.payee == ""
        assert fields.item_name == ""
        assert fields.amount == 0
        assert fields.quantity == 1
        assert fields.date == "2025-01-09"

    def test_empty_and_none_text(self):
        assert self.parser.parse("", TODAY).amount == 0
        assert self.parser.parse(None, TODAY).date == "2025-01-09"

    def test_idempotent(self):
        text = "購入依頼\n品名：トナー\n合計 8,800\n2024/06/01"

        assert self.parser.parse(text, TODAY) == self.parser.parse(text, TODAY)

    def test_full_width_same_as_ascii(self):
        ascii_text = "立替払\n伝票 E25000031-002\n金 45,600 円\n令和6年7月8日"
        full_width_text = "立替払\n伝票 E２５００００３１-００２\n金 ４５，６００ 円\n令和６年７月８日"

        ascii_fields = self.parser.parse(ascii_text, TODAY)
        full_width_fields = self.parser.parse(full_width_text, TODAY)

        assert full_width_fields.amount == ascii_fields.amount == 45600
        assert full_width_fields.slip_number == ascii_fields.slip_number == "E25000031-002"
        assert full_width_fields.date == ascii_fields.date == "2024-07-08"

    def test_parse_with_details(self):
        fields, results = self.parser.parse_with_details("金 1,500 円\n用途：切手", TODAY)

        assert fields.amount == 1500
        assert results['amount'].rule == 'kin_yen'
        assert results['item_name'].rule == 'youto'
        assert not results['date'].matched

    def test_to_dict(self):
        data = self.parser.parse_to_dict("旅行命令\n精算 3,210", TODAY)

        assert data['document_type'] == 'travel'
        assert data['category'] == 'travel'
        assert data['amount'] == 3210
        assert data['specification'] == ""

    def test_concurrent_use(self):
        """One parser shared between threads gives the same answers."""
        texts = [f"立替払\n金 {n},000 円\n令和6年1月{n}日" for n in range(1, 21)]

        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(lambda t: self.parser.parse(t, TODAY), texts))

        assert [r.amount for r in results] == [n * 1000 for n in range(1, 21)]
        assert results[9].date == "2024-01-10"

    def test_extract_fields_helper(self):
        fields = extract_fields("立替払\n金 700 円", TODAY)

        assert fields.amount == 700
