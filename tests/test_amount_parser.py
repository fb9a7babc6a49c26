"""Tests for AmountParser component."""

import pytest
from form_ocr.models import DocumentType
from form_ocr.parsers.amount_parser import AmountParser, FALLBACK_RULE
from form_ocr.parsers.base import FormContext


class TestAmountParser:
    """Test suite for AmountParser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.parser = AmountParser()

    def parse(self, text, document_type=DocumentType.REIMBURSEMENT):
        return self.parser.parse(FormContext(full_text=text, document_type=document_type))

    def test_kin_yen_reimbursement(self):
        """金 ○○○ 円 phrasing on a reimbursement claim."""
        result = self.parse("立替払請求書\n金 3,000 円")

        assert result.value == 3000
        assert result.rule == 'kin_yen'

    def test_kin_yen_full_width(self):
        assert self.parse("金３，０００円").value == 3000

    def test_tax_included_before_total(self):
        text = "購入依頼\n合計: 11,000\n税込金額：12,100"

        result = self.parse(text, DocumentType.PURCHASE_REQUEST)

        assert result.value == 12100
        assert result.rule == 'tax_included'

    def test_total_label_beats_larger_number(self):
        """A labelled total wins over a larger phone number."""
        text = "購入依頼\n合計金額: 5,000\nTEL 080-1234-5678"

        result = self.parse(text, DocumentType.PURCHASE_REQUEST)

        assert result.value == 5000
        assert result.rule == 'total'

    @pytest.mark.parametrize("text, expected", [
        ("税込 1,100", 1100),
        ("税込額：2,200", 2200),
        ("合計\n4,400", 4400),
    ])
    def test_purchase_label_variants(self, text, expected):
        assert self.parse(text, DocumentType.PURCHASE_REQUEST).value == expected

    def test_settlement_travel(self):
        """The first 精算 in 旅費精算書 has no number after it, the second does."""
        text = "旅費精算書\n精算額：24,680"

        result = self.parse(text, DocumentType.TRAVEL)

        assert result.value == 24680
        assert result.rule == 'settlement'

    def test_labels_only_apply_to_their_form_type(self):
        """合計 is a purchase-request rule, so a reimbursement falls back."""
        text = "合計 5,000\n電話 080-1234-5678"

        result = self.parse(text, DocumentType.REIMBURSEMENT)

        assert result.value == 5678
        assert result.rule == FALLBACK_RULE

    def test_fallback_takes_largest_number(self):
        text = "数量 3\n単価 450\n12,000"

        result = self.parse(text)

        assert result.value == 12000
        assert result.rule == FALLBACK_RULE

    def test_no_numbers_returns_zero(self):
        result = self.parse("金額の記載なし")

        assert result.value == 0
        assert not result.matched

    def test_comma_only_capture_falls_through(self):
        """A label followed only by commas is not a number."""
        result = self.parse("金 ,,, 円")

        assert result.value == 0

    def test_full_width_matches_ascii(self):
        ascii_result = self.parse("金12,345円")
        full_width_result = self.parse("金１２，３４５円")

        assert full_width_result.value == ascii_result.value == 12345

    def test_rule_table_order(self):
        assert [r.name for r in self.parser.rules] == [
            'kin_yen', 'tax_included', 'total', 'settlement',
        ]
