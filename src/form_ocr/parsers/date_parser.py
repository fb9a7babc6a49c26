"""Date parsing for Japanese era (wareki) and western date notation."""

import re
from datetime import date

from .base import BaseParser, FormContext, ParseResult, rule

ERA_PATTERN = r'{era}\s*([0-9]{{1,2}}|元)\s*年\s*([0-9]{{1,2}})\s*月\s*([0-9]{{1,2}})\s*日'


class DateParser(BaseParser):
    """Extract the form date and normalize it to YYYY-MM-DD.

    Rules are tried in order: Reiwa, Heisei, then YYYY/M/D or YYYY-M-D.
    When nothing matches, the context's ``today`` is returned so the
    record always carries a date.
    """

    def __init__(self):
        super().__init__()

        # Japanese era offsets: era year N is western year offset + N
        self.wareki_map = {
            'reiwa': 2018,   # 令和1年 = 2019
            'heisei': 1988,  # 平成1年 = 1989
        }

        self.rules = [
            rule('reiwa', ERA_PATTERN.format(era='令和')),
            rule('heisei', ERA_PATTERN.format(era='平成')),
            rule('western', r'([0-9]{4})[/\-]([0-9]{1,2})[/\-]([0-9]{1,2})'),
        ]

    def parse(self, context: FormContext) -> ParseResult:
        """
        Extract the document date.

        Args:
            context: Form context; ``today`` supplies the fallback date

        Returns:
            ParseResult with an ISO date string
        """
        for current, match in self._iter_matches(context):
            result = ParseResult(
                value=self._format_match(current.name, match),
                rule=current.name,
                source_text=match.group(),
            )
            self._log_result(result)
            return result

        self.logger.warning("No date found in text, falling back to today")
        return ParseResult(value=self.format_date(context.today))

    def _format_match(self, rule_name: str, match: re.Match) -> str:
        year, month, day = match.groups()
        if rule_name in self.wareki_map:
            era_year = 1 if year == '元' else int(year)
            year = str(self.wareki_map[rule_name] + era_year)
        return f"{year}-{int(month):02d}-{int(day):02d}"

    @staticmethod
    def format_date(value: date) -> str:
        return f"{value.year}-{value.month:02d}-{value.day:02d}"
