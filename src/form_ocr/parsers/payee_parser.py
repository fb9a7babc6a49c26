"""Payee (支払先) extraction from labelled fields."""

from .base import BaseParser, FormContext, ParseResult, rule

LINE_VALUE = r'\s*[:：\s]*([^\n\r]{2,30})'


class PayeeParser(BaseParser):
    """Extract the payee name. Rules apply to every form type."""

    uses_normalized_text = False

    def __init__(self):
        super().__init__()

        self.rules = [
            rule('shiharaisaki', r'支払先' + LINE_VALUE),
            rule('konyusaki', r'購入先' + LINE_VALUE),
            rule('gyosha', r'業者名?' + LINE_VALUE),
        ]

    def parse(self, context: FormContext) -> ParseResult:
        """
        Extract the payee from the first matching label.

        Args:
            context: Form context with the raw OCR text

        Returns:
            ParseResult with the trimmed payee name, or "" if no label found
        """
        for current, match in self._iter_matches(context):
            result = ParseResult(value=match.group(current.group).strip(), rule=current.name,
                                 source_text=match.group())
            self._log_result(result)
            return result

        self.logger.warning("No payee label found")
        return ParseResult(value="")
