"""Tests for document type and category classification."""

import pytest
from form_ocr.classify import CategoryClassifier, DocumentTypeClassifier, load_rules
from form_ocr.models import DocumentType, ExpenseCategory


class TestDocumentTypeClassifier:
    """Test suite for DocumentTypeClassifier."""

    def setup_method(self):
        self.classifier = DocumentTypeClassifier()

    @pytest.mark.parametrize("text, expected", [
        ("購入依頼書", DocumentType.PURCHASE_REQUEST),
        ("立替払請求書", DocumentType.REIMBURSEMENT),
        ("立替払", DocumentType.REIMBURSEMENT),
        ("旅費計算書", DocumentType.TRAVEL),
        ("旅費精算", DocumentType.TRAVEL),
        ("旅行命令簿", DocumentType.TRAVEL),
    ])
    def test_keywords(self, text, expected):
        assert self.classifier.classify(text) == expected

    def test_purchase_request_beats_reimbursement(self):
        assert self.classifier.classify("立替払\n購入依頼") == DocumentType.PURCHASE_REQUEST

    def test_reimbursement_beats_travel(self):
        assert self.classifier.classify("旅費精算 立替払") == DocumentType.REIMBURSEMENT

    @pytest.mark.parametrize("text", ["", "ノイズ 123 ###"])
    def test_default_reimbursement(self, text):
        assert self.classifier.classify(text) == DocumentType.REIMBURSEMENT


class TestCategoryClassifier:
    """Test suite for CategoryClassifier."""

    def setup_method(self):
        self.classifier = CategoryClassifier()

    def test_travel_document_is_travel(self):
        """Travel forms are travel even when other keywords appear."""
        result = self.classifier.classify("旅費精算 謝金", DocumentType.TRAVEL)

        assert result == ExpenseCategory.TRAVEL

    def test_honorarium_overrides_purchase_request(self):
        result = self.classifier.classify("購入依頼\n講演謝金", DocumentType.PURCHASE_REQUEST)

        assert result == ExpenseCategory.HONORARIUM

    @pytest.mark.parametrize("text, expected", [
        ("謝礼", ExpenseCategory.HONORARIUM),
        ("再委託費", ExpenseCategory.SUBCONTRACT),
        ("業務委託", ExpenseCategory.SUBCONTRACT),
        ("返金", ExpenseCategory.REFUND),
        ("返納金", ExpenseCategory.REFUND),
        ("謝金 委託 返金", ExpenseCategory.HONORARIUM),
        ("委託 返金", ExpenseCategory.SUBCONTRACT),
    ])
    def test_keyword_order(self, text, expected):
        assert self.classifier.classify(text, DocumentType.REIMBURSEMENT) == expected

    @pytest.mark.parametrize("document_type", [
        DocumentType.PURCHASE_REQUEST, DocumentType.REIMBURSEMENT,
    ])
    def test_default_goods(self, document_type):
        assert self.classifier.classify("文房具", document_type) == ExpenseCategory.GOODS


class TestRulesFile:
    """Tests for loading keyword rules from YAML."""

    def test_custom_rules(self, tmp_path):
        rules_file = tmp_path / "rules.yml"
        rules_file.write_text(
            "document_types:\n"
            "  - type: travel\n"
            "    any: [出張]\n"
            "default_document_type: purchase_request\n"
            "categories:\n"
            "  - category: labor\n"
            "    any: [人件費]\n"
            "default_category: other\n",
            encoding='utf-8',
        )

        doc_classifier = DocumentTypeClassifier(rules_file)
        category_classifier = CategoryClassifier(rules_file)

        assert doc_classifier.classify("出張報告") == DocumentType.TRAVEL
        assert doc_classifier.classify("購入依頼") == DocumentType.PURCHASE_REQUEST
        assert category_classifier.classify("人件費", DocumentType.REIMBURSEMENT) == ExpenseCategory.LABOR
        assert category_classifier.classify("文房具", DocumentType.REIMBURSEMENT) == ExpenseCategory.OTHER

    def test_missing_table_raises(self, tmp_path):
        rules_file = tmp_path / "rules.yml"
        rules_file.write_text("document_types: []\n", encoding='utf-8')

        with pytest.raises(ValueError, match="missing"):
            load_rules(rules_file)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "absent.yml")

    def test_unknown_category_raises(self, tmp_path):
        rules_file = tmp_path / "rules.yml"
        rules_file.write_text(
            "document_types: []\n"
            "default_document_type: reimbursement\n"
            "categories: []\n"
            "default_category: snacks\n",
            encoding='utf-8',
        )

        with pytest.raises(ValueError):
            CategoryClassifier(rules_file)
