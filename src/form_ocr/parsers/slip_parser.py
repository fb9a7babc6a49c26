"""Slip-number and project-code (J-code) extraction."""

from .base import BaseParser, FormContext, ParseResult, rule


class SlipNumberParser(BaseParser):
    """Extract the form tracking number, e.g. P25000026-001."""

    def __init__(self):
        super().__init__()

        self.rules = [
            # Main sequence + sub sequence, hyphen may be ASCII, U+2010 or full-width
            rule('hyphenated', r'[PEWF][0-9]{7,}[-‐－][0-9]{2,3}', group=0),
            rule('continuous', r'[PEWF][0-9]{10,}', group=0),
        ]

    def parse(self, context: FormContext) -> ParseResult:
        for current, match in self._iter_matches(context):
            result = ParseResult(
                value=match.group(current.group),
                rule=current.name,
                source_text=match.group(),
            )
            self._log_result(result)
            return result

        result = ParseResult(value="")
        self._log_result(result)
        return result


class ProjectCodeParser(BaseParser):
    """Extract the grant/project identifier: J followed by nine digits."""

    def __init__(self):
        super().__init__()
        self.rules = [rule('j_code', r'J[0-9]{9}', group=0)]

    def parse(self, context: FormContext) -> ParseResult:
        for current, match in self._iter_matches(context):
            result = ParseResult(value=match.group(current.group), rule=current.name,
                                 source_text=match.group())
            self._log_result(result)
            return result
        return ParseResult(value="")
