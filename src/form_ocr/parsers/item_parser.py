"""Item name (品名) extraction."""

from ..models import DocumentType
from .base import BaseParser, FormContext, ParseResult, rule

# Label, optional colon/whitespace, then the rest of the line
LINE_VALUE = r'\s*[:：\s]*([^\n\r]{2,50})'

TRAVEL_ITEM_NAME = "旅費（精算）"


class ItemNameParser(BaseParser):
    """Extract the item description, with rules that depend on the form type."""

    uses_normalized_text = False

    def __init__(self):
        super().__init__()

        self.rules = [
            rule('hinmei', r'品名' + LINE_VALUE, DocumentType.PURCHASE_REQUEST),
            rule('hinmoku', r'品目' + LINE_VALUE, DocumentType.PURCHASE_REQUEST),
            # 但し、○○代として receipt clause; the optional 代 is not captured
            rule('tadashi', r'但し[、,]?\s*(.+?)\s*代?\s*として', DocumentType.REIMBURSEMENT),
            rule('youto', r'用途' + LINE_VALUE, DocumentType.REIMBURSEMENT),
        ]

        # Suffix appended to a 但し clause capture ("cost of ...")
        self.clause_suffixes = {'tadashi': '代'}

    def parse(self, context: FormContext) -> ParseResult:
        if context.document_type == DocumentType.TRAVEL:
            return ParseResult(value=TRAVEL_ITEM_NAME, rule='travel_fixed')

        for current, match in self._iter_matches(context):
            value = match.group(current.group).strip() + self.clause_suffixes.get(current.name, '')
            result = ParseResult(value=value, rule=current.name, source_text=match.group())
            self._log_result(result)
            return result

        self.logger.warning("No item name found")
        return ParseResult(value="")
